#sociopedia/api/auth/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE


class RegisterSchema(Schema):
    """POST /auth/register 요청(JSON 또는 multipart form)의 유효성을 검사하는 스키마"""
    class Meta:
        # friends 등 클라이언트가 보내더라도 가입 시 받지 않는 필드는 무시합니다.
        unknown = EXCLUDE

    first_name = fields.Str(required=True, data_key='firstName', validate=validate.Length(min=2, max=50))
    last_name = fields.Str(required=True, data_key='lastName', validate=validate.Length(min=2, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=50))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=5))
    picture_path = fields.Str(load_default="", data_key='picturePath')
    location = fields.Str(load_default=None, allow_none=True)
    occupation = fields.Str(load_default=None, allow_none=True)


class LoginRequestSchema(Schema):
    """로그인 요청의 유효성을 검사하는 스키마"""
    class Meta:
        unknown = EXCLUDE

    email = fields.Str(required=True, validate=validate.Length(min=1))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=1))
