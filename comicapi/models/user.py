import uuid
from enum import Enum
from typing import Optional, Union

from sqlalchemy import Boolean, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from comicapi.models.base import BaseModel, TimestampMixin


class UserRole(str, Enum):
    """사용자 역할 정의"""

    USER = "user"  # 일반 사용자
    ADMIN = "admin"  # 관리자

    @classmethod
    def is_admin(cls, role: Union[str, "UserRole"]) -> bool:
        """관리자 권한 확인"""
        if isinstance(role, cls):
            role = role.value
        return role == cls.ADMIN.value


class UserStatus(int, Enum):
    INACTIVE = 0
    ACTIVE = 1


class User(BaseModel, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )  # 항상 소문자로 정규화되어 저장
    password_hash: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )  # NULL for social-login-only users
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), default=UserRole.USER.value, nullable=False
    )
    status: Mapped[int] = mapped_column(
        Integer, default=UserStatus.ACTIVE.value, nullable=False
    )
    email_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def is_admin(self) -> bool:
        return UserRole.is_admin(str(self.role))

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)
