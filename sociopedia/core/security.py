# sociopedia/core/security.py
import base64
import hashlib
import logging
from datetime import timedelta
from functools import wraps
from typing import Any, Dict, Optional

import bcrypt
import jwt
from flask import request, g, current_app

from sociopedia.core.exceptions import UnauthorizedError
from sociopedia.utils.datetime_utils import DateTimeUtils

ALGORITHM = "HS256"
BEARER_SCHEME = "bearer"


def _pre_hash_password(password: str) -> bytes:
    """
    bcrypt는 72바이트 이후를 무시하므로 SHA-256으로 먼저 줄입니다.
    base64로 인코딩해 NUL 바이트가 들어가지 않도록 합니다.
    """
    digest = hashlib.sha256(password.encode('utf-8')).digest()
    return base64.b64encode(digest)


def hash_password(password: str, rounds: int = 12) -> str:
    """랜덤 salt로 비밀번호를 해싱합니다. 반환값은 DB 저장용 문자열입니다."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_pre_hash_password(password), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_pre_hash_password(password), password_hash.encode('utf-8'))
    except ValueError as e:
        # 저장된 해시 형식이 깨진 경우
        logging.warning(f"비밀번호 해시 검증 불가: {e}")
        return False


def create_access_token(user_id: str, secret_key: str, expires_delta: Optional[timedelta] = None,
                        algorithm: str = ALGORITHM) -> str:
    """user_id를 sub 클레임으로 담은 Access Token을 발급합니다. expires_delta가 없으면 만료 없음."""
    issued_at = DateTimeUtils.now()
    to_encode: Dict[str, Any] = {"sub": user_id, "iat": issued_at, "type": "access"}
    if expires_delta:
        to_encode["exp"] = issued_at + expires_delta
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


class TokenGuard:
    """
    보호된 요청의 Authorization 헤더를 검증합니다.
    서명 키는 생성 시점에 주입받고, 요청 처리 중에 환경 변수를 직접 읽지 않습니다.
    """

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM):
        if not secret_key:
            raise ValueError("JWT_SECRET_KEY 설정이 필요합니다.")
        self.secret_key = secret_key
        self.algorithm = algorithm

    def verify(self, raw_header: Optional[str]) -> Dict[str, Any]:
        """
        헤더 값을 검증하고 디코딩된 클레임을 반환합니다.
        - 'Bearer ' 접두사는 있어도 되고 없어도 됩니다.
        - 헤더 누락, 서명 불일치, 형식 오류, 만료 시 UnauthorizedError
        """
        if not raw_header or not raw_header.strip():
            raise UnauthorizedError("Authorization 헤더가 없습니다.", "TOKEN_MISSING")

        token = raw_header.strip()
        scheme, _, rest = token.partition(" ")
        if scheme.lower() == BEARER_SCHEME:
            token = rest.strip()
        if not token:
            raise UnauthorizedError("Authorization 헤더가 없습니다.", "TOKEN_MISSING")

        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm],
                                options={"require": ["sub"]})
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("토큰이 만료되었습니다.", "TOKEN_EXPIRED")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("유효하지 않은 토큰입니다.", "INVALID_TOKEN")

        if not claims.get("sub"):
            raise UnauthorizedError("유효하지 않은 토큰입니다.", "INVALID_TOKEN")
        return claims


def jwt_required(f):
    """
    뷰 함수 실행 전에 토큰을 검증합니다.
    성공 시 g.user(클레임)와 g.user_id(호출자 ID)를 설정합니다.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token_guard: TokenGuard = current_app.services['token_guard']
        claims = token_guard.verify(request.headers.get("Authorization"))
        g.user = claims
        g.user_id = claims["sub"]
        return f(*args, **kwargs)

    return decorated_function


def ensure_caller(user_id: Optional[str], message: str = "다른 사용자를 대신해 요청할 수 없습니다.") -> str:
    """
    요청 대상 user_id가 토큰의 사용자와 같은지 확인합니다. jwt_required 이후에만 호출합니다.
    user_id가 비어 있으면 토큰의 사용자 ID를 반환합니다.
    """
    caller_id = g.user_id
    if user_id and user_id != caller_id:
        raise UnauthorizedError(message, "CALLER_MISMATCH")
    return caller_id
