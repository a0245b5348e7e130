"""
인증 관련 일회성 비밀 값 저장 모델

리프레시 토큰, 이메일 인증 코드, 비밀번호 재설정 코드는 모두
원본 값이 아닌 해시만 저장합니다. 만료/폐기/사용된 레코드는 삭제하지 않고
상태만 기록하여 감사 추적을 유지합니다.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from comicapi.models.base import BaseModel, CreatedAtMixin, UTCDateTime


class AuthRefreshToken(BaseModel, CreatedAtMixin):
    __tablename__ = "auth_refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token_hash: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    revoked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)


class OneTimeCodeMixin(CreatedAtMixin):
    """6자리 일회성 코드 공통 컬럼 - consumed_at 이 채워지면 재사용 불가"""

    @declared_attr
    def id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    @declared_attr
    def user_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        )

    @declared_attr
    def code_hash(cls) -> Mapped[str]:
        return mapped_column(String(128), nullable=False)

    @declared_attr
    def expires_at(cls) -> Mapped[datetime]:
        return mapped_column(UTCDateTime, nullable=False)

    @declared_attr
    def consumed_at(cls) -> Mapped[Optional[datetime]]:
        return mapped_column(UTCDateTime, nullable=True)


class EmailVerificationCode(BaseModel, OneTimeCodeMixin):
    __tablename__ = "email_verification_codes"
    __table_args__ = (
        Index("idx_email_verification_codes_user_hash", "user_id", "code_hash"),
    )


class PasswordResetCode(BaseModel, OneTimeCodeMixin):
    __tablename__ = "password_reset_codes"
    __table_args__ = (
        Index("idx_password_reset_codes_user_hash", "user_id", "code_hash"),
    )
