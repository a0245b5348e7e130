from comicapi.models.base import Base
from comicapi.models.user import User, UserRole
from comicapi.models.auth import (
    AuthRefreshToken,
    EmailVerificationCode,
    PasswordResetCode,
)
from comicapi.models.catalog import Chapter, ChapterPage, Comic
from comicapi.models.payment import Transaction, UserPurchase
from comicapi.models.currency import CurrencyLedger, WithdrawRequest

__all__ = [
    "Base",
    "User",
    "UserRole",
    "AuthRefreshToken",
    "EmailVerificationCode",
    "PasswordResetCode",
    "Comic",
    "Chapter",
    "ChapterPage",
    "Transaction",
    "UserPurchase",
    "CurrencyLedger",
    "WithdrawRequest",
]
