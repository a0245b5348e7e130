"""
토큰/비밀값 관련 유틸리티

- Access token: HS256 JWT (서명/만료/issuer/audience 검증, 저장소 조회 없음)
- Refresh token: 64 바이트 CSPRNG 값, DB 에는 해시만 저장
- 일회용 코드: 6자리 숫자, DB 에는 해시만 저장
- 비밀번호: bcrypt
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt
from pydantic import ValidationError

from comicapi.config import Settings
from comicapi.core.exceptions import AuthenticationError
from comicapi.schemas.auth import TokenPayload
from comicapi.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


def hash_token(secret: str) -> str:
    """refresh token 과 일회용 코드에 공통으로 쓰는 단방향 해시"""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def generate_one_time_code() -> str:
    """Generate 6-digit numeric code (100000-999999)"""
    return str(secrets.randbelow(900000) + 100000)


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)
    ).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # 저장된 해시 형식이 깨진 경우
        logger.warning("Stored password hash is malformed")
        return False


class TokenService:
    """JWT access token 발급/검증 및 refresh token 생성"""

    def __init__(self, settings: Settings):
        self.settings = settings

    def create_access_token(
        self, user: Any, expires_delta: Optional[timedelta] = None
    ) -> str:
        now = utcnow()
        expire = now + (
            expires_delta
            or timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode: Dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "iss": self.settings.JWT_ISSUER,
            "aud": self.settings.JWT_AUDIENCE,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(
            to_encode, self.settings.SECRET_KEY, algorithm=self.settings.JWT_ALGORITHM
        )

    def decode_access_token(self, token: str) -> TokenPayload:
        try:
            payload = jwt.decode(
                token,
                self.settings.SECRET_KEY,
                algorithms=[self.settings.JWT_ALGORITHM],
                audience=self.settings.JWT_AUDIENCE,
                issuer=self.settings.JWT_ISSUER,
            )
            return TokenPayload.model_validate(payload)
        except (JWTError, ValidationError) as e:
            logger.info(f"Access token rejected: {type(e).__name__}")
            raise AuthenticationError()

    def generate_refresh_token(self) -> str:
        return secrets.token_urlsafe(64)

    def refresh_token_expiry(self, now: Optional[datetime] = None) -> datetime:
        return (now or utcnow()) + timedelta(
            days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
