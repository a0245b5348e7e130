import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from comicapi.core import guards
from comicapi.core.exceptions import AuthorizationError, NotFoundError
from comicapi.database.session import transactional
from comicapi.models.payment import PaymentProvider, PurchaseType, TransactionStatus
from comicapi.repositories.catalog_repository import ChapterRepository
from comicapi.repositories.purchase_repository import PurchaseRepository
from comicapi.repositories.transaction_repository import TransactionRepository
from comicapi.repositories.user_repository import UserRepository
from comicapi.schemas.auth import CurrentUser
from comicapi.schemas.pagination import PagedResult, PageParams
from comicapi.schemas.payment import PurchaseResult, TransactionResponse

logger = logging.getLogger(__name__)


class PaymentService:
    """회차 구매 및 거래 기록 조회/승인"""

    def __init__(self, db: Session):
        self.db = db
        self.chapter_repo = ChapterRepository(db)
        self.purchase_repo = PurchaseRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.user_repo = UserRepository(db)

    def purchase_chapter(self, actor: CurrentUser, chapter_id: uuid.UUID) -> PurchaseResult:
        """멱등 구매 - 이미 보유한 회차는 아무것도 기록하지 않고 성공 처리"""
        chapter = self.chapter_repo.get_by_id(chapter_id)
        if not chapter:
            raise NotFoundError("Chapter not found")

        if self.purchase_repo.has_purchased(actor.id, chapter.id, PurchaseType.CHAPTER):
            logger.info(f"Chapter {chapter.id} already owned by user {actor.id}")
            return PurchaseResult(chapter_id=chapter.id, already_owned=True)

        try:
            with transactional(self.db):
                transaction = self.transaction_repo.create(
                    commit=False,
                    user_id=actor.id,
                    type=PurchaseType.CHAPTER.value,
                    comic_id=chapter.comic_id,
                    chapter_id=chapter.id,
                    amount=chapter.unit_price,
                    currency_type=0,
                    status=TransactionStatus.SUCCESS.value,
                    provider=PaymentProvider.MANUAL.value,
                )
                self.purchase_repo.grant(
                    actor.id, chapter.id, PurchaseType.CHAPTER, commit=False
                )
        except IntegrityError:
            # 두 쓰기 모두 롤백됨. 복합 PK 충돌일 때만 보유로 판정
            if self.purchase_repo.has_purchased(actor.id, chapter.id, PurchaseType.CHAPTER):
                logger.info(
                    f"Concurrent purchase of chapter {chapter.id} by user {actor.id} resolved as owned"
                )
                return PurchaseResult(chapter_id=chapter.id, already_owned=True)
            if not self.user_repo.get_by_id(actor.id):
                logger.warning(f"Purchase rejected: user {actor.id} no longer exists")
                raise NotFoundError("User not found")
            raise

        logger.info(
            f"User {actor.id} purchased chapter {chapter.id} (transaction {transaction.id})"
        )
        return PurchaseResult(
            chapter_id=chapter.id, already_owned=False, transaction_id=transaction.id
        )

    def list_transactions(
        self,
        actor: CurrentUser,
        page: PageParams,
        status: Optional[TransactionStatus] = None,
    ) -> PagedResult[TransactionResponse]:
        """본인 거래 목록 (관리자는 전체)"""
        user_filter = None if guards.is_admin(actor) else actor.id
        items, total = self.transaction_repo.list_paged(
            user_filter, offset=page.offset, limit=page.page_size, status=status
        )
        return PagedResult[TransactionResponse](
            items=items,
            total=total,
            page_number=page.page_number,
            page_size=page.page_size,
        )

    def check_transaction(
        self, actor: CurrentUser, transaction_id: uuid.UUID
    ) -> TransactionResponse:
        transaction = self.transaction_repo.get_by_id(transaction_id)
        if not transaction:
            raise NotFoundError("Transaction not found")
        if not guards.can_view_transaction(actor, transaction):
            raise AuthorizationError()
        return transaction

    def accept_manual_payment(self, transaction_id: uuid.UUID) -> TransactionResponse:
        """관리자 수동 결제 승인 - status 만 SUCCESS 로 전이"""
        transaction = self.transaction_repo.set_status(
            transaction_id, TransactionStatus.SUCCESS
        )
        if not transaction:
            raise NotFoundError("Transaction not found")
        logger.info(f"Manual payment accepted for transaction {transaction_id}")
        return transaction
