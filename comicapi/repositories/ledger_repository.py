import uuid
from typing import List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from comicapi.models.currency import CurrencyLedger, LedgerEntryType
from comicapi.repositories.base import BaseRepository
from comicapi.schemas.currency import LedgerEntryResponse


class LedgerRepository(BaseRepository[CurrencyLedger, LedgerEntryResponse]):
    """재화 원장 리포지토리 (append-only)"""

    def __init__(self, db: Session):
        super().__init__(CurrencyLedger, LedgerEntryResponse, db)

    def get_balance(self, user_id: uuid.UUID) -> int:
        """CREDIT 합계 - DEBIT 합계"""
        signed = case(
            (CurrencyLedger.entry_type == LedgerEntryType.DEBIT.value, -CurrencyLedger.amount),
            else_=CurrencyLedger.amount,
        )
        balance = (
            self.db.query(func.coalesce(func.sum(signed), 0))
            .filter(CurrencyLedger.user_id == user_id)
            .scalar()
        )
        return int(balance or 0)

    def add_entry(
        self,
        user_id: uuid.UUID,
        entry_type: LedgerEntryType,
        amount: int,
        description: Optional[str] = None,
        commit: bool = True,
    ) -> LedgerEntryResponse:
        return self.create(
            commit=commit,
            user_id=user_id,
            entry_type=entry_type.value,
            amount=amount,
            description=description,
        )

    def list_paged(
        self, user_id: uuid.UUID, offset: int, limit: int
    ) -> Tuple[List[LedgerEntryResponse], int]:
        query = self.db.query(CurrencyLedger).filter(CurrencyLedger.user_id == user_id)
        total = query.count()
        rows = (
            query.order_by(CurrencyLedger.created_at.desc(), CurrencyLedger.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows), total
