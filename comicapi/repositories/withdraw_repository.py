import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from comicapi.models.currency import WithdrawRequest, WithdrawStatus
from comicapi.repositories.base import BaseRepository
from comicapi.schemas.currency import WithdrawResponse


class WithdrawRepository(BaseRepository[WithdrawRequest, WithdrawResponse]):
    """출금 요청 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(WithdrawRequest, WithdrawResponse, db)

    def list_for_user(self, user_id: uuid.UUID) -> List[WithdrawResponse]:
        rows = (
            self.db.query(WithdrawRequest)
            .filter(WithdrawRequest.user_id == user_id)
            .order_by(WithdrawRequest.created_at.desc())
            .all()
        )
        return self._to_schemas(rows)

    def list_all(self, status: Optional[WithdrawStatus] = None) -> List[WithdrawResponse]:
        query = self.db.query(WithdrawRequest)
        if status is not None:
            query = query.filter(WithdrawRequest.status == status.value)
        return self._to_schemas(query.order_by(WithdrawRequest.created_at.desc()).all())
