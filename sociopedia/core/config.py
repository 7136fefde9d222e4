# sociopedia/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return int(value)


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명에 사용하는 비밀 키. 토큰 위변조를 방지합니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ALGORITHM = 'HS256'
    # Access Token 유효 시간(분). 값이 없거나 0이면 만료 시간 없이 발급합니다.
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES = _int_env('JWT_ACCESS_TOKEN_EXPIRES_MINUTES', 0)

    # bcrypt cost factor
    BCRYPT_ROUNDS = _int_env('BCRYPT_ROUNDS', 12)

    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # 쉼표로 구분된 허용 origin 목록
    CORS_ORIGINS = [origin.strip() for origin in os.getenv('CORS_ORIGINS', '*').split(',') if origin.strip()]
    # 업로드 요청 본문 최대 크기 (기본 30MB)
    MAX_CONTENT_LENGTH = _int_env('MAX_CONTENT_LENGTH', 30 * 1024 * 1024)


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    # 개발용 Firebase 프로젝트의 서비스 계정 키 파일 경로
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)
    JWT_SECRET_KEY = os.getenv('TEST_JWT_SECRET_KEY', 'test-secret-key-for-testing-only')
    # 테스트 속도를 위해 최소 cost 사용
    BCRYPT_ROUNDS = 4


class ProductionConfig(Config):
    """운영 환경 설정. 비밀 키는 반드시 환경 변수로 주입되어야 합니다."""
    DEBUG = False


# FLASK_ENV 값에 따라 create_app에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
