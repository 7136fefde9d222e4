# sociopedia/api/users/routes.py
from flask import Blueprint, jsonify, current_app

from sociopedia.api.request_utils import request_payload, uploaded_picture
from sociopedia.api.users.schemas import UserResponseSchema, FriendSchema, ProfileUpdateSchema
from sociopedia.core.security import jwt_required, ensure_caller

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/<string:user_id>', methods=['GET'])
@jwt_required
def get_user(user_id: str):
    """특정 사용자의 정보를 조회합니다."""
    user_service = current_app.services['users']
    user = user_service.get_user(user_id)
    return jsonify(UserResponseSchema().dump(user)), 200


@users_bp.route('/<string:user_id>/friends', methods=['GET'])
@jwt_required
def get_user_friends(user_id: str):
    """특정 사용자의 친구 목록(요약 정보)을 조회합니다."""
    user_service = current_app.services['users']
    friends = user_service.get_friends(user_id)
    return jsonify(FriendSchema(many=True).dump(friends)), 200


@users_bp.route('/<string:user_id>', methods=['PATCH'])
@jwt_required
def update_user_profile(user_id: str):
    """
    본인의 프로필 정보를 수정합니다.
    - JSON 또는 multipart('picture' 파일 포함)를 받습니다.
    """
    ensure_caller(user_id, "다른 사용자의 프로필은 수정할 수 없습니다.")

    user_service = current_app.services['users']
    data = ProfileUpdateSchema().load(request_payload())

    with uploaded_picture() as picture_url:
        if picture_url:
            data['picture_path'] = picture_url
        user = user_service.update_profile(user_id, data)
    return jsonify(UserResponseSchema().dump(user)), 200


@users_bp.route('/<string:user_id>/<string:friend_id>', methods=['PATCH'])
@jwt_required
def add_remove_friend(user_id: str, friend_id: str):
    """
    두 사용자 사이의 친구 관계를 토글합니다.
    - 성공 시 user_id의 갱신된 친구 목록을 반환합니다.
    """
    ensure_caller(user_id, "다른 사용자의 친구 목록은 수정할 수 없습니다.")
    user_service = current_app.services['users']
    friends = user_service.toggle_friend(user_id, friend_id)
    return jsonify(FriendSchema(many=True).dump(friends)), 200
