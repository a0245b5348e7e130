import uuid
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from comicapi.models.user import UserRole
from comicapi.schemas.base import CamelModel

# bcrypt 입력 한도
PASSWORD_MAX_BYTES = 72
PASSWORD_MIN_LENGTH = 6


def _check_password(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class EmailRequest(CamelModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v


class RegisterRequest(EmailRequest):
    full_name: str = Field(..., min_length=1, max_length=200)
    password: str

    @field_validator("password")
    @classmethod
    def password_rules(cls, v: str) -> str:
        return _check_password(v)


class LoginRequest(EmailRequest):
    password: str = Field(..., min_length=1, max_length=200)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(EmailRequest):
    pass


class ResendConfirmRequest(EmailRequest):
    pass


class VerifyEmailRequest(EmailRequest):
    code: str = Field(..., pattern=r"^\d{6}$")


class ResetPasswordRequest(EmailRequest):
    code: str = Field(..., pattern=r"^\d{6}$")
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_rules(cls, v: str) -> str:
        return _check_password(v)


class SocialLoginRequest(EmailRequest):
    """소셜 로그인 요청 - 호출자가 제공한 클레임을 그대로 신뢰함"""

    full_name: str = Field(..., min_length=1, max_length=200)
    avatar_url: Optional[str] = None


class UpdatePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=200)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_rules(cls, v: str) -> str:
        return _check_password(v)


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenPayload(CamelModel):
    """검증된 access token 클레임"""

    sub: uuid.UUID
    email: str
    role: str = UserRole.USER.value


class CurrentUser(CamelModel):
    """토큰에서 복원한 요청 주체 - DB 조회 없이 만들어짐"""

    id: uuid.UUID
    email: str
    role: str = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return UserRole.is_admin(self.role)
