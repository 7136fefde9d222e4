# sociopedia/core/exceptions.py
"""
서비스 계층에서 사용하는 예외 분류.

서비스는 아래 네 가지 예외만 발생시키고, HTTP 응답 형식으로의 변환은
create_app에 등록된 전역 에러 핸들러가 담당합니다.
"""
from typing import Any, Dict, Optional


class SociopediaError(Exception):
    """모든 도메인 예외의 기반 클래스."""
    status_code = 500
    default_error_code = 'INTERNAL_SERVER_ERROR'

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error_code": self.error_code, "message": self.message}


class NotFoundError(SociopediaError):
    """사용자 또는 게시물 ID가 존재하지 않음."""
    status_code = 404
    default_error_code = 'NOT_FOUND'


class UnauthorizedError(SociopediaError):
    """토큰 누락/위조/만료, 또는 로그인 정보 불일치."""
    status_code = 401
    default_error_code = 'UNAUTHORIZED'


class ConflictError(SociopediaError):
    """유일성 제약 위반 등 저장소 쓰기 실패."""
    status_code = 409
    default_error_code = 'CONFLICT'


class InvalidArgumentError(SociopediaError):
    """잘못된 입력 (자기 자신과의 친구 토글 등)."""
    status_code = 400
    default_error_code = 'INVALID_ARGUMENT'
