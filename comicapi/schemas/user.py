import uuid
from datetime import datetime
from typing import Optional

from comicapi.models.user import UserRole, UserStatus
from comicapi.schemas.base import CamelModel


class UserRecord(CamelModel):
    """내부용 사용자 레코드 (password_hash 포함, 응답에 직접 쓰지 않음)"""

    id: uuid.UUID
    full_name: str
    email: str
    password_hash: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = UserRole.USER.value
    status: int = UserStatus.ACTIVE.value
    email_verified: bool = False
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return UserRole.is_admin(self.role)

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)


class UserProfile(CamelModel):
    id: uuid.UUID
    full_name: str
    email: str
    avatar_url: Optional[str] = None
    role: str
    email_verified: bool
    created_at: Optional[datetime] = None
