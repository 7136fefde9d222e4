# sociopedia/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정
from sociopedia.core.config import config_by_name
from sociopedia.core.exceptions import SociopediaError
from sociopedia.core.security import TokenGuard

# - API 블루프린트
from sociopedia.api.auth.routes import auth_bp
from sociopedia.api.users.routes import users_bp
from sociopedia.api.posts.routes import posts_bp

# - 서비스 모듈
from sociopedia.api.auth.services import IdentityService
from sociopedia.api.users.services import UserService
from sociopedia.api.posts.services import PostService
from sociopedia.services.firestore_service import FirestoreUserStore, FirestorePostStore
from sociopedia.services.storage_service import StorageService


def _init_firebase(app: Flask) -> None:
    if firebase_admin._apps:
        return
    cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred, {
        'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
    })


def create_app(config_name: Optional[str] = None, services: Optional[Dict[str, Any]] = None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param services: 'user_store', 'post_store', 'storage'를 직접 주입할 때 사용합니다.
                     주입하면 Firebase를 초기화하지 않습니다. (테스트용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    CORS(app, resources={r"/*": {"origins": app.config['CORS_ORIGINS']}})

    # =====================================================================================
    # 4. 저장소 및 외부 서비스 초기화
    # =====================================================================================
    if services is None:
        _init_firebase(app)
        db = firestore.client()
        user_store = FirestoreUserStore(db)
        post_store = FirestorePostStore(db)
        try:
            storage_instance = StorageService()
            storage_instance.init_app(app)
        except Exception as e:
            logging.error(f"Failed to initialize storage service: {e}")
            raise
    else:
        user_store = services['user_store']
        post_store = services['post_store']
        storage_instance = services.get('storage')

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    secret_key = app.config['JWT_SECRET_KEY']
    expires_minutes = app.config.get('JWT_ACCESS_TOKEN_EXPIRES_MINUTES') or 0
    access_token_expires = timedelta(minutes=expires_minutes) if expires_minutes > 0 else None

    app.services = {}
    app.services['storage'] = storage_instance
    app.services['token_guard'] = TokenGuard(secret_key, app.config['JWT_ALGORITHM'])
    app.services['identity'] = IdentityService(
        user_store=user_store,
        secret_key=secret_key,
        access_token_expires=access_token_expires,
        bcrypt_rounds=app.config['BCRYPT_ROUNDS']
    )
    app.services['users'] = UserService(user_store=user_store)
    app.services['posts'] = PostService(post_store=post_store, user_store=user_store)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(users_bp, url_prefix='/users')
    app.register_blueprint(posts_bp, url_prefix='/posts')

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({"status": "ok"}), 200

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(SociopediaError)
    def handle_domain_error(err: SociopediaError):
        logging.warning(f"{request.method} {request.path} -> {err.status_code} {err.error_code}: {err.message}")
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 라우팅 404/405 등은 그대로 돌려줍니다.
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    @app.after_request
    def log_request(response):
        logging.info(f"{request.remote_addr} {request.method} {request.full_path.rstrip('?')} {response.status_code}")
        return response

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
