# sociopedia/api/users/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE


class UserResponseSchema(Schema):
    """
    사용자 정보 응답 스키마.
    password(해시)는 정의하지 않으므로 어떤 응답에도 포함되지 않습니다.
    """
    user_id = fields.Str(data_key='_id', dump_only=True)
    first_name = fields.Str(data_key='firstName')
    last_name = fields.Str(data_key='lastName')
    email = fields.Str()
    picture_path = fields.Str(data_key='picturePath')
    friends = fields.List(fields.Str())
    location = fields.Str(allow_none=True)
    occupation = fields.Str(allow_none=True)
    viewed_profile = fields.Int(data_key='viewedProfile')
    impressions = fields.Int()
    created_at = fields.DateTime(data_key='createdAt')
    updated_at = fields.DateTime(data_key='updatedAt')


class FriendSchema(Schema):
    """GET /users/{id}/friends 및 친구 토글 응답에 쓰이는 친구 요약 정보."""
    user_id = fields.Str(data_key='_id', dump_only=True)
    first_name = fields.Str(data_key='firstName')
    last_name = fields.Str(data_key='lastName')
    occupation = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    picture_path = fields.Str(data_key='picturePath')


class ProfileUpdateSchema(Schema):
    """PATCH /users/{id} 요청 본문의 유효성을 검사합니다."""
    class Meta:
        unknown = EXCLUDE

    first_name = fields.Str(data_key='firstName', validate=validate.Length(min=2, max=50))
    last_name = fields.Str(data_key='lastName', validate=validate.Length(min=2, max=50))
    location = fields.Str(allow_none=True)
    occupation = fields.Str(allow_none=True)
    picture_path = fields.Str(data_key='picturePath')
