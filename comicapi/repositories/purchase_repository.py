import uuid
from datetime import datetime

from sqlalchemy.orm import Session

from comicapi.models.payment import PurchaseType, UserPurchase
from comicapi.repositories.base import BaseRepository
from comicapi.schemas.base import CamelModel


class PurchaseRecord(CamelModel):
    user_id: uuid.UUID
    type: PurchaseType
    ref_id: uuid.UUID
    purchased_at: datetime


class PurchaseRepository(BaseRepository[UserPurchase, PurchaseRecord]):
    """엔타이틀먼트 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(UserPurchase, PurchaseRecord, db)

    def has_purchased(
        self,
        user_id: uuid.UUID,
        ref_id: uuid.UUID,
        type: PurchaseType = PurchaseType.CHAPTER,
    ) -> bool:
        return self.db.get(UserPurchase, (user_id, type.value, ref_id)) is not None

    def grant(
        self,
        user_id: uuid.UUID,
        ref_id: uuid.UUID,
        type: PurchaseType = PurchaseType.CHAPTER,
        commit: bool = True,
    ) -> PurchaseRecord:
        """복합 PK 충돌 시 IntegrityError 가 그대로 전파됨"""
        return self.create(commit=commit, user_id=user_id, type=type.value, ref_id=ref_id)
