"""
결제 API 라우터

- POST /payments/purchased-chapter: 회차 구매 (멱등)
- GET /payments/transactions: 거래 목록 (관리자는 전체)
- GET /payments/transactions/check/{transaction_id}: 거래 단건 확인
- PUT /payments/accept-manual/{transaction_id}: 수동 결제 승인 (관리자)
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from comicapi.core.auth_middleware import get_current_user, require_admin
from comicapi.deps import get_payment_service
from comicapi.models.payment import TransactionStatus
from comicapi.schemas.auth import CurrentUser
from comicapi.schemas.base import ApiResponse
from comicapi.schemas.pagination import PagedResult, PageParams
from comicapi.schemas.payment import (
    PurchaseChapterRequest,
    PurchaseResult,
    TransactionResponse,
)
from comicapi.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/purchased-chapter", response_model=ApiResponse[PurchaseResult])
def purchase_chapter(
    request: PurchaseChapterRequest,
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """
    회차 구매 - 이미 보유한 회차는 기록 없이 성공 반환

    HTTP Status:
        200: 구매 완료 또는 이미 보유
        401: 인증 실패
        404: 회차 없음
    """
    result = payment_service.purchase_chapter(current_user, request.chapter_id)
    message = "Already purchased" if result.already_owned else "Purchased"
    return ApiResponse.of(result, message=message)


@router.get(
    "/transactions", response_model=ApiResponse[PagedResult[TransactionResponse]]
)
def list_transactions(
    page_number: int = Query(1, ge=1, alias="pageNumber"),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    status: Optional[TransactionStatus] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
):
    page = PageParams(page_number=page_number, page_size=page_size)
    return ApiResponse.of(payment_service.list_transactions(current_user, page, status))


@router.get(
    "/transactions/check/{transaction_id}",
    response_model=ApiResponse[TransactionResponse],
)
def check_transaction(
    transaction_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
):
    return ApiResponse.of(
        payment_service.check_transaction(current_user, transaction_id)
    )


@router.put(
    "/accept-manual/{transaction_id}",
    response_model=ApiResponse[TransactionResponse],
)
def accept_manual_payment(
    transaction_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    payment_service: PaymentService = Depends(get_payment_service),
):
    transaction = payment_service.accept_manual_payment(transaction_id)
    logger.info(f"Admin {admin.id} accepted manual payment {transaction_id}")
    return ApiResponse.of(transaction, message="Payment accepted")
