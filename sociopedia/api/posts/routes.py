# sociopedia/api/posts/routes.py
from flask import Blueprint, request, jsonify, current_app, g

from sociopedia.api.posts.schemas import (
    PostCreateSchema, LikeToggleSchema, CommentCreateSchema, PostResponseSchema
)
from sociopedia.api.request_utils import request_payload, uploaded_picture
from sociopedia.core.security import jwt_required, ensure_caller

posts_bp = Blueprint('posts_bp', __name__)


@posts_bp.route('', methods=['POST'], strict_slashes=False)
@jwt_required
def create_post():
    """
    새로운 게시글을 생성합니다.
    - JSON 또는 multipart(form 필드 + 'picture' 파일)를 받습니다.
    - 성공 시 새 게시글을 포함한 전체 게시글 목록을 201로 반환합니다.
    """
    post_service = current_app.services['posts']
    data = PostCreateSchema().load(request_payload())
    author_id = ensure_caller(data['user_id'], "다른 사용자로 게시글을 작성할 수 없습니다.")

    with uploaded_picture() as picture_url:
        posts = post_service.create_post(author_id, data['description'], picture_url or data['picture_path'])
    return jsonify(PostResponseSchema(many=True).dump(posts)), 201


@posts_bp.route('', methods=['GET'], strict_slashes=False)
@jwt_required
def get_feed_posts():
    """전체 게시글 피드를 조회합니다."""
    post_service = current_app.services['posts']
    posts = post_service.list_feed()
    return jsonify(PostResponseSchema(many=True).dump(posts)), 200


@posts_bp.route('/<string:user_id>/posts', methods=['GET'])
@jwt_required
def get_user_posts(user_id: str):
    """특정 사용자가 작성한 게시글 목록을 조회합니다."""
    post_service = current_app.services['posts']
    posts = post_service.list_by_author(user_id)
    return jsonify(PostResponseSchema(many=True).dump(posts)), 200


@posts_bp.route('/<string:post_id>/like', methods=['PATCH'])
@jwt_required
def like_post(post_id: str):
    """게시글의 좋아요를 누르거나 취소하고 갱신된 게시글을 반환합니다."""
    post_service = current_app.services['posts']
    data = LikeToggleSchema().load(request.get_json(silent=True) or {})
    user_id = ensure_caller(data['user_id'])

    post = post_service.toggle_like(post_id, user_id)
    return jsonify(PostResponseSchema().dump(post)), 200


@posts_bp.route('/<string:post_id>/comments', methods=['POST'])
@jwt_required
def add_comment(post_id: str):
    """게시글에 댓글을 추가하고 갱신된 게시글을 반환합니다."""
    post_service = current_app.services['posts']
    data = CommentCreateSchema().load(request.get_json(silent=True) or {})
    user_id = g.user_id

    post = post_service.add_comment(post_id, user_id, data['text'])
    return jsonify(PostResponseSchema().dump(post)), 201
