"""
재화 원장 / 출금 요청 모델

잔액은 어디에도 저장하지 않습니다. 사용자 잔액은 항상
currency_ledger 의 CREDIT 합계 - DEBIT 합계로 계산합니다.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from comicapi.models.base import BaseModel, CreatedAtMixin, TimestampMixin


class LedgerEntryType(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class WithdrawStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class CurrencyLedger(BaseModel, CreatedAtMixin):
    """재화 원장 - 한번 생성된 레코드는 수정되지 않음"""

    __tablename__ = "currency_ledger"
    __table_args__ = (Index("idx_currency_ledger_user", "user_id", "entry_type"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    entry_type: Mapped[str] = mapped_column(String(10), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class WithdrawRequest(BaseModel, TimestampMixin):
    __tablename__ = "withdraw_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    bank_name: Mapped[str] = mapped_column(String(255), nullable=False)
    bank_account: Mapped[str] = mapped_column(String(255), nullable=False)
    bank_account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=WithdrawStatus.PENDING.value, nullable=False
    )
    admin_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
