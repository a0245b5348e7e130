import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from comicapi.models.auth import AuthRefreshToken
from comicapi.repositories.base import BaseRepository
from comicapi.schemas.base import CamelModel


class RefreshTokenRecord(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    token_hash: str
    revoked: bool
    expires_at: datetime


class RefreshTokenRepository(BaseRepository[AuthRefreshToken, RefreshTokenRecord]):
    """Refresh token 저장소 - 해시로만 조회/저장"""

    def __init__(self, db: Session):
        super().__init__(AuthRefreshToken, RefreshTokenRecord, db)

    def add(
        self,
        user_id: uuid.UUID,
        token_hash: str,
        expires_at: datetime,
        commit: bool = True,
    ) -> RefreshTokenRecord:
        return self.create(
            commit=commit,
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            revoked=False,
        )

    def find_by_hash(self, token_hash: str) -> Optional[RefreshTokenRecord]:
        return self.get_by_field("token_hash", token_hash)

    def revoke_if_active(self, token_id: uuid.UUID) -> bool:
        """아직 폐기되지 않은 경우에만 폐기 - 동시 요청 중 하나만 True"""
        result = self.db.execute(
            update(AuthRefreshToken)
            .where(AuthRefreshToken.id == token_id, AuthRefreshToken.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
