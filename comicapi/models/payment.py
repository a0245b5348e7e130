import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from comicapi.models.base import BaseModel, CreatedAtMixin, UTCDateTime
from comicapi.utils.date_utils import utcnow


class PurchaseType(str, Enum):
    CHAPTER = "CHAPTER"


class TransactionStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PENDING = "PENDING"
    FAILED = "FAILED"


class PaymentProvider(str, Enum):
    MANUAL = "MANUAL"  # 앱 내 지갑/수동 결제


class Transaction(BaseModel, CreatedAtMixin):
    """
    구매/결제 시도 기록 (append-only)

    관리자의 수동 결제 승인에 의한 status 변경 외에는 수정되지 않는다.
    """

    __tablename__ = "transactions"
    __table_args__ = (Index("idx_transactions_user_created", "user_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    comic_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    chapter_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency_type: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    provider: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    provider_ref: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class UserPurchase(BaseModel):
    """
    엔타이틀먼트 레코드 - 존재 자체가 열람 권한

    (user_id, type, ref_id) 복합 PK 가 중복 구매를 DB 수준에서 막는다.
    """

    __tablename__ = "user_purchases"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), primary_key=True
    )
    type: Mapped[str] = mapped_column(String(20), primary_key=True)
    ref_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    purchased_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )
