import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from comicapi.models.currency import LedgerEntryType, WithdrawStatus
from comicapi.schemas.base import CamelModel


class BalanceResponse(CamelModel):
    user_id: uuid.UUID
    balance: int


class LedgerEntryResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    entry_type: LedgerEntryType
    amount: int
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class CreateLedgerEntryRequest(CamelModel):
    user_id: uuid.UUID
    entry_type: LedgerEntryType
    amount: int = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=500)


class CreateWithdrawRequest(CamelModel):
    amount: int = Field(..., gt=0)
    bank_name: str = Field(..., min_length=1, max_length=255)
    bank_account: str = Field(..., min_length=1, max_length=255)
    bank_account_name: str = Field(..., min_length=1, max_length=255)

    @field_validator("bank_name", "bank_account", "bank_account_name", mode="before")
    @classmethod
    def strip_bank_fields(cls, v):
        return v.strip() if isinstance(v, str) else v


class ReviewWithdrawRequest(CamelModel):
    status: WithdrawStatus
    admin_note: Optional[str] = Field(None, max_length=1000)


class WithdrawResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: int
    bank_name: str
    bank_account: str
    bank_account_name: str
    status: WithdrawStatus
    admin_note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
