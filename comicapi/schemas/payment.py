import uuid
from datetime import datetime
from typing import Optional

from comicapi.models.payment import TransactionStatus
from comicapi.schemas.base import CamelModel


class PurchaseChapterRequest(CamelModel):
    chapter_id: uuid.UUID


class PurchaseResult(CamelModel):
    chapter_id: uuid.UUID
    already_owned: bool
    transaction_id: Optional[uuid.UUID] = None


class TransactionResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    comic_id: Optional[uuid.UUID] = None
    chapter_id: Optional[uuid.UUID] = None
    amount: int
    currency_type: int
    status: TransactionStatus
    provider: Optional[str] = None
    provider_ref: Optional[str] = None
    created_at: Optional[datetime] = None
