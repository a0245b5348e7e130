import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from comicapi.core.auth_middleware import get_current_user, require_admin
from comicapi.deps import get_currency_service
from comicapi.models.currency import WithdrawStatus
from comicapi.schemas.auth import CurrentUser
from comicapi.schemas.base import ApiResponse
from comicapi.schemas.currency import (
    CreateWithdrawRequest,
    ReviewWithdrawRequest,
    WithdrawResponse,
)
from comicapi.services.currency_service import CurrencyService

router = APIRouter(prefix="/withdraws", tags=["withdraws"])


@router.post("", response_model=ApiResponse[WithdrawResponse])
def create_withdraw(
    request: CreateWithdrawRequest,
    current_user: CurrentUser = Depends(get_current_user),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    """잔액 이하 금액만 요청 가능 (400 Insufficient balance)"""
    withdraw = currency_service.create_withdraw(current_user.id, request)
    return ApiResponse.of(withdraw, message="Withdraw requested")


@router.get("/me", response_model=ApiResponse[List[WithdrawResponse]])
def list_my_withdraws(
    current_user: CurrentUser = Depends(get_current_user),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    return ApiResponse.of(currency_service.list_my_withdraws(current_user.id))


@router.get("/admin", response_model=ApiResponse[List[WithdrawResponse]])
def list_withdraws(
    status: Optional[WithdrawStatus] = Query(None),
    admin: CurrentUser = Depends(require_admin),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    return ApiResponse.of(currency_service.list_withdraws(status))


@router.put("/{withdraw_id}", response_model=ApiResponse[WithdrawResponse])
def review_withdraw(
    withdraw_id: uuid.UUID,
    request: ReviewWithdrawRequest,
    admin: CurrentUser = Depends(require_admin),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    withdraw = currency_service.review_withdraw(withdraw_id, request)
    return ApiResponse.of(withdraw, message="Withdraw updated")
