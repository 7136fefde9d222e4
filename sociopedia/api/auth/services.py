# sociopedia/api/auth/services.py
import uuid
import random
import logging
from datetime import timedelta
from typing import Dict, Any, Tuple, Optional

from sociopedia.core.exceptions import ConflictError, UnauthorizedError
from sociopedia.core.security import hash_password, verify_password, create_access_token
from sociopedia.models.user import User

# viewedProfile / impressions 초기값 범위 (표시용 임의 값)
PLACEHOLDER_COUNTER_MAX = 10000


class IdentityService:
    """
    회원가입과 로그인을 담당하는 서비스 클래스.
    서명 키와 토큰 유효 시간은 생성 시점에 주입받습니다.
    """

    def __init__(self, user_store, secret_key: str, access_token_expires: Optional[timedelta] = None,
                 bcrypt_rounds: int = 12):
        if not secret_key:
            raise ValueError("JWT_SECRET_KEY 설정이 필요합니다.")
        self.user_store = user_store
        self.secret_key = secret_key
        self.access_token_expires = access_token_expires
        self.bcrypt_rounds = bcrypt_rounds

    def ensure_email_available(self, email: str) -> None:
        """가입 전에 이메일 중복을 미리 확인합니다. 최종 판정은 user_store.create가 합니다."""
        if self.user_store.find_by_email(email.strip().lower()):
            raise ConflictError("이미 가입된 이메일입니다.", "EMAIL_ALREADY_EXISTS")

    def register(self, profile: Dict[str, Any], raw_password: str) -> User:
        """
        새 사용자를 생성합니다.
        - 비밀번호는 bcrypt 해시로만 저장합니다.
        - 친구 목록은 항상 비어 있는 상태로 시작합니다. (상대방 문서와의 대칭을 보장할 수 없으므로)
        - 이메일 중복 또는 저장 실패 시 ConflictError
        """
        new_user = User(
            user_id=str(uuid.uuid4()),
            first_name=profile['first_name'],
            last_name=profile['last_name'],
            email=profile['email'].strip().lower(),
            password=hash_password(raw_password, rounds=self.bcrypt_rounds),
            picture_path=profile.get('picture_path') or "",
            friends=[],
            location=profile.get('location'),
            occupation=profile.get('occupation'),
            viewed_profile=random.randrange(PLACEHOLDER_COUNTER_MAX),
            impressions=random.randrange(PLACEHOLDER_COUNTER_MAX),
        )
        saved_user = self.user_store.create(new_user)
        logging.info(f"회원가입 완료 (user_id: {saved_user.user_id})")
        return saved_user

    def login(self, email: str, raw_password: str) -> Tuple[str, User]:
        """
        이메일/비밀번호를 확인하고 Access Token을 발급합니다.
        사용자 없음과 비밀번호 불일치는 호출자에게 같은 UnauthorizedError로 보입니다.
        """
        user = self.user_store.find_by_email(email.strip().lower())
        if not user:
            logging.info("로그인 실패: 존재하지 않는 사용자")
            raise UnauthorizedError("이메일 또는 비밀번호가 올바르지 않습니다.", "INVALID_CREDENTIALS")

        if not verify_password(raw_password, user.password):
            logging.info(f"로그인 실패: 비밀번호 불일치 (user_id: {user.user_id})")
            raise UnauthorizedError("이메일 또는 비밀번호가 올바르지 않습니다.", "INVALID_CREDENTIALS")

        token = create_access_token(user.user_id, self.secret_key, self.access_token_expires)
        logging.info(f"로그인 성공 (user_id: {user.user_id})")
        return token, user
