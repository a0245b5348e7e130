from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from comicapi.containers import Container
from comicapi.core.exceptions import AuthenticationError, AuthorizationError
from comicapi.core.security import TokenService
from comicapi.schemas.auth import CurrentUser

# JWT Bearer 토큰 스킴 - 누락 시 401 envelope 를 직접 만들기 위해 auto_error 끔
security = HTTPBearer(auto_error=False)


@inject
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(Provide[Container.core.token_service]),
) -> CurrentUser:
    """필수 사용자 인증 - 서명/만료만 검증하고 DB 는 조회하지 않음"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    payload = token_service.decode_access_token(credentials.credentials)
    return CurrentUser(id=payload.sub, email=payload.email, role=payload.role)


def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """관리자 권한이 필요한 엔드포인트용 의존성"""
    if not current_user.is_admin:
        raise AuthorizationError()
    return current_user
