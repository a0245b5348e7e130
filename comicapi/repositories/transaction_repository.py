import uuid
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from comicapi.models.payment import Transaction, TransactionStatus
from comicapi.repositories.base import BaseRepository
from comicapi.schemas.payment import TransactionResponse


class TransactionRepository(BaseRepository[Transaction, TransactionResponse]):
    """구매/결제 기록 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(Transaction, TransactionResponse, db)

    def list_paged(
        self,
        user_id: Optional[uuid.UUID],
        offset: int,
        limit: int,
        status: Optional[TransactionStatus] = None,
    ) -> Tuple[List[TransactionResponse], int]:
        """user_id 가 None 이면 전체 조회 (관리자). 최신순"""
        query = self.db.query(Transaction)
        if user_id is not None:
            query = query.filter(Transaction.user_id == user_id)
        if status is not None:
            query = query.filter(Transaction.status == status.value)

        total = query.count()
        rows = (
            query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows), total

    def set_status(
        self, transaction_id: uuid.UUID, status: TransactionStatus
    ) -> Optional[TransactionResponse]:
        return self.update(transaction_id, status=status.value)
