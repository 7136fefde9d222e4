# sociopedia/api/posts/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

# --- 재사용을 위한 중첩 스키마 ---
class CommentSchema(Schema):
    """게시물 응답에 포함될 댓글 스키마."""
    user_id = fields.Str(data_key='userId')
    text = fields.Str()
    created_at = fields.DateTime(data_key='createdAt')

# --- API 요청/응답 스키마 ---

class PostCreateSchema(Schema):
    """POST /posts 요청 본문(JSON 또는 multipart form)의 유효성을 검사합니다."""
    class Meta:
        unknown = EXCLUDE

    # 생략하면 토큰의 사용자 ID를 사용합니다.
    user_id = fields.Str(load_default=None, data_key='userId')
    description = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=2000))
    picture_path = fields.Str(load_default=None, allow_none=True, data_key='picturePath')


class LikeToggleSchema(Schema):
    """PATCH /posts/{id}/like 요청 본문."""
    class Meta:
        unknown = EXCLUDE

    user_id = fields.Str(load_default=None, data_key='userId')


class CommentCreateSchema(Schema):
    """POST /posts/{id}/comments 요청 본문."""
    class Meta:
        unknown = EXCLUDE

    text = fields.Str(required=True, validate=validate.Length(min=1, max=1000))


class PostResponseSchema(Schema):
    """게시글 응답 JSON 형식. likes는 {userId: true} 맵으로 내보냅니다."""
    post_id = fields.Str(data_key='_id', dump_only=True)
    user_id = fields.Str(data_key='userId')
    first_name = fields.Str(data_key='firstName')
    last_name = fields.Str(data_key='lastName')
    location = fields.Str(allow_none=True)
    description = fields.Str(allow_none=True)
    picture_path = fields.Str(allow_none=True, data_key='picturePath')
    user_picture_path = fields.Str(allow_none=True, data_key='userPicturePath')
    likes = fields.Method('dump_likes')
    comments = fields.Method('dump_comments')
    created_at = fields.DateTime(data_key='createdAt')
    updated_at = fields.DateTime(data_key='updatedAt')

    def dump_likes(self, post):
        return {user_id: True for user_id in sorted(post.likes)}

    def dump_comments(self, post):
        # 딕셔너리 형식이 아닌 기존 댓글은 저장된 값 그대로 내보냅니다.
        comment_schema = CommentSchema()
        return [comment_schema.dump(comment) if isinstance(comment, dict) else comment
                for comment in post.comments]
