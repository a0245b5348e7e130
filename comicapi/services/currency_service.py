import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from comicapi.core.exceptions import InsufficientBalanceError, NotFoundError
from comicapi.database.session import transactional
from comicapi.models.currency import WithdrawStatus
from comicapi.repositories.ledger_repository import LedgerRepository
from comicapi.repositories.user_repository import UserRepository
from comicapi.repositories.withdraw_repository import WithdrawRepository
from comicapi.schemas.currency import (
    BalanceResponse,
    CreateLedgerEntryRequest,
    CreateWithdrawRequest,
    LedgerEntryResponse,
    ReviewWithdrawRequest,
    WithdrawResponse,
)
from comicapi.schemas.pagination import PagedResult, PageParams

logger = logging.getLogger(__name__)


class CurrencyService:
    """재화 원장 및 출금 요청 서비스

    잔액은 저장하지 않고 매번 원장에서 계산한다.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ledger_repo = LedgerRepository(db)
        self.user_repo = UserRepository(db)
        self.withdraw_repo = WithdrawRepository(db)

    def get_balance(self, user_id: uuid.UUID) -> BalanceResponse:
        return BalanceResponse(
            user_id=user_id, balance=self.ledger_repo.get_balance(user_id)
        )

    def get_history(
        self, user_id: uuid.UUID, page: PageParams
    ) -> PagedResult[LedgerEntryResponse]:
        items, total = self.ledger_repo.list_paged(
            user_id, offset=page.offset, limit=page.page_size
        )
        return PagedResult[LedgerEntryResponse](
            items=items,
            total=total,
            page_number=page.page_number,
            page_size=page.page_size,
        )

    def create_entry(self, request: CreateLedgerEntryRequest) -> LedgerEntryResponse:
        """관리자용 원장 직접 기록 (역할 확인 외 제약 없음)"""
        if not self.user_repo.get_by_id(request.user_id):
            raise NotFoundError("User not found")

        entry = self.ledger_repo.add_entry(
            user_id=request.user_id,
            entry_type=request.entry_type,
            amount=request.amount,
            description=request.description,
        )
        logger.info(
            f"Ledger {entry.entry_type.value} {entry.amount} recorded for user {request.user_id}"
        )
        return entry

    # ------------------------------------------------------------------
    # Withdrawals
    # ------------------------------------------------------------------

    def create_withdraw(
        self, user_id: uuid.UUID, request: CreateWithdrawRequest
    ) -> WithdrawResponse:
        """잔액 확인 후 PENDING 출금 요청 생성

        사용자 행을 잠근 상태에서 잔액을 계산하므로 같은 사용자의
        동시 출금 요청은 직렬화된다. 잔액을 예약/차감하지는 않는다.
        """
        with transactional(self.db):
            if not self.user_repo.lock_for_update(user_id):
                raise NotFoundError("User not found")
            balance = self.ledger_repo.get_balance(user_id)
            if request.amount > balance:
                logger.info(
                    f"Withdraw rejected for user {user_id}: amount {request.amount} > balance {balance}"
                )
                raise InsufficientBalanceError()

            withdraw = self.withdraw_repo.create(
                commit=False,
                user_id=user_id,
                amount=request.amount,
                bank_name=request.bank_name,
                bank_account=request.bank_account,
                bank_account_name=request.bank_account_name,
                status=WithdrawStatus.PENDING.value,
            )
        logger.info(f"Withdraw {withdraw.id} requested by user {user_id}")
        return withdraw

    def list_my_withdraws(self, user_id: uuid.UUID) -> List[WithdrawResponse]:
        return self.withdraw_repo.list_for_user(user_id)

    def list_withdraws(
        self, status: Optional[WithdrawStatus] = None
    ) -> List[WithdrawResponse]:
        return self.withdraw_repo.list_all(status)

    def review_withdraw(
        self, withdraw_id: uuid.UUID, request: ReviewWithdrawRequest
    ) -> WithdrawResponse:
        withdraw = self.withdraw_repo.update(
            withdraw_id, status=request.status.value, admin_note=request.admin_note
        )
        if not withdraw:
            raise NotFoundError("Withdraw request not found")
        logger.info(f"Withdraw {withdraw_id} set to {request.status.value}")
        return withdraw
