"""
게이트웨이 신원 헤더

인증 자체는 상위 게이트웨이(외부 ID 제공자)가 수행하며, 이 서비스는
게이트웨이가 설정한 헤더의 사용자 ID/역할을 그대로 신뢰합니다.
"""

from fastapi import Depends, Request

from rewardapi.config import settings
from rewardapi.core.exceptions import AuthenticationError, AuthorizationError

MAX_USER_ID_LENGTH = 64
ADMIN_ROLE = "admin"


def get_current_user_id(request: Request) -> str:
    """신뢰 헤더에서 사용자 ID 추출"""
    raw = request.headers.get(settings.TRUSTED_USER_HEADER)
    user_id = raw.strip() if raw else ""
    if not user_id:
        raise AuthenticationError("Missing user identity")
    if len(user_id) > MAX_USER_ID_LENGTH:
        raise AuthenticationError("Invalid user identity")
    return user_id


def require_admin(request: Request, user_id: str = Depends(get_current_user_id)) -> str:
    """관리자 권한 확인 - 역할 헤더가 admin 이어야 함"""
    role = (request.headers.get(settings.TRUSTED_ROLE_HEADER) or "").strip().lower()
    if role != ADMIN_ROLE:
        raise AuthorizationError("Admin privileges required")
    return user_id
