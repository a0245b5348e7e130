"""
인증 API 라우터

공개 엔드포인트:
- POST /auth/register, /auth/login, /auth/refetchToken, /auth/google
- POST /auth/forgot-password, /auth/reset-password, /auth/verify, /auth/resend-confirm

Bearer 토큰 필요:
- GET /auth/me, POST /auth/logout, POST /auth/update-password

일회용 코드는 응답에 포함되지 않고 메일로만 전달된다.
"""

import logging

from fastapi import APIRouter, Depends

from comicapi.core.auth_middleware import get_current_user
from comicapi.deps import get_auth_service
from comicapi.schemas.auth import (
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    ResendConfirmRequest,
    ResetPasswordRequest,
    SocialLoginRequest,
    TokenPairResponse,
    UpdatePasswordRequest,
    VerifyEmailRequest,
)
from comicapi.schemas.base import ApiResponse
from comicapi.schemas.user import UserProfile
from comicapi.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=ApiResponse[TokenPairResponse])
def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """회원가입 후 즉시 토큰 쌍 발급 (이메일 인증은 로그인 조건이 아님)"""
    tokens = auth_service.register(request)
    return ApiResponse.of(tokens, message="Registered")


@router.post("/login", response_model=ApiResponse[TokenPairResponse])
def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    return ApiResponse.of(auth_service.login(request))


@router.get("/me", response_model=ApiResponse[UserProfile])
def me(
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    return ApiResponse.of(auth_service.get_profile(current_user.id))


@router.post("/logout", response_model=ApiResponse[None])
def logout(
    request: RefreshTokenRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.logout(request.refresh_token)
    return ApiResponse.of(message="Logged out")


@router.post("/refetchToken", response_model=ApiResponse[TokenPairResponse])
def refetch_token(
    request: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """refresh token 교환 - 제시된 토큰은 폐기되고 새 토큰 쌍 발급"""
    return ApiResponse.of(auth_service.refresh(request.refresh_token))


@router.post("/forgot-password", response_model=ApiResponse[None])
def forgot_password(
    request: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.forgot_password(request.email)
    return ApiResponse.of(
        message="If the email is registered, a reset code has been sent"
    )


@router.post("/reset-password", response_model=ApiResponse[None])
def reset_password(
    request: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.reset_password(request)
    return ApiResponse.of(message="Password has been reset")


@router.post("/verify", response_model=ApiResponse[None])
def verify_email(
    request: VerifyEmailRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.verify_email(request)
    return ApiResponse.of(message="Email verified")


@router.post("/resend-confirm", response_model=ApiResponse[None])
def resend_confirm(
    request: ResendConfirmRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.resend_confirmation(request.email)
    return ApiResponse.of(message="Verification code sent")


@router.post("/google", response_model=ApiResponse[TokenPairResponse])
def social_login(
    request: SocialLoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    return ApiResponse.of(auth_service.social_login(request))


@router.post("/update-password", response_model=ApiResponse[None])
def update_password(
    request: UpdatePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.update_password(current_user.id, request)
    return ApiResponse.of(message="Password updated")
