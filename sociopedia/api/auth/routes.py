# sociopedia/api/auth/routes.py

from flask import Blueprint, jsonify, current_app

from sociopedia.api.auth.schemas import RegisterSchema, LoginRequestSchema
from sociopedia.api.request_utils import request_payload, uploaded_picture
from sociopedia.api.users.schemas import UserResponseSchema

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    회원가입 엔드포인트입니다.
    - JSON 또는 multipart(form 필드 + 'picture' 파일)를 받습니다.
    - 이메일 중복은 사진 업로드 전에 확인합니다.
    - 성공 시 비밀번호를 제외한 사용자 정보를 201로 반환합니다.
    """
    identity_service = current_app.services['identity']
    data = RegisterSchema().load(request_payload())
    identity_service.ensure_email_available(data['email'])

    raw_password = data.pop('password')
    with uploaded_picture() as picture_url:
        if picture_url:
            data['picture_path'] = picture_url
        user = identity_service.register(data, raw_password)
    return jsonify(UserResponseSchema().dump(user)), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """이메일/비밀번호로 로그인하고 Access Token과 사용자 정보를 반환합니다."""
    identity_service = current_app.services['identity']
    data = LoginRequestSchema().load(request_payload())

    token, user = identity_service.login(data['email'], data['password'])
    return jsonify({
        "token": token,
        "user": UserResponseSchema().dump(user)  # password 필드는 스키마에 없으므로 전송되지 않습니다.
    }), 200
