from fastapi import APIRouter, Depends, Query

from comicapi.core.auth_middleware import get_current_user, require_admin
from comicapi.deps import get_currency_service
from comicapi.schemas.auth import CurrentUser
from comicapi.schemas.base import ApiResponse
from comicapi.schemas.currency import (
    BalanceResponse,
    CreateLedgerEntryRequest,
    LedgerEntryResponse,
)
from comicapi.schemas.pagination import PagedResult, PageParams
from comicapi.services.currency_service import CurrencyService

router = APIRouter(prefix="/currency", tags=["currency"])


@router.get("/balance", response_model=ApiResponse[BalanceResponse])
def get_my_balance(
    current_user: CurrentUser = Depends(get_current_user),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    """원장에서 계산한 현재 잔액"""
    return ApiResponse.of(currency_service.get_balance(current_user.id))


@router.get(
    "/history", response_model=ApiResponse[PagedResult[LedgerEntryResponse]]
)
def get_my_history(
    page_number: int = Query(1, ge=1, alias="pageNumber"),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    current_user: CurrentUser = Depends(get_current_user),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    page = PageParams(page_number=page_number, page_size=page_size)
    return ApiResponse.of(currency_service.get_history(current_user.id, page))


@router.post("", response_model=ApiResponse[LedgerEntryResponse])
def create_ledger_entry(
    request: CreateLedgerEntryRequest,
    admin: CurrentUser = Depends(require_admin),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    """관리자 수동 CREDIT/DEBIT 기록"""
    return ApiResponse.of(currency_service.create_entry(request), message="Entry recorded")
