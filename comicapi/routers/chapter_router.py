"""
회차 페이지 API 라우터

- GET /chapters/{chapter_id}/pages: 페이지 목록 (엔타이틀먼트 확인)
- GET /chapters/slug/{slug}/pages: slug 로 페이지 목록
- POST /chapters/{chapter_id}/pages: 페이지 일괄 추가 (작품 소유자/관리자)
- PUT /chapters/{chapter_id}/pages/reorder: 페이지 순서 변경 (작품 소유자/관리자)
- DELETE /chapters/{chapter_id}/pages/{page_id}: 페이지 삭제 (작품 소유자/관리자)
"""

import uuid

from fastapi import APIRouter, Depends, Path

from comicapi.core.auth_middleware import get_current_user
from comicapi.deps import get_chapter_service
from comicapi.schemas.auth import CurrentUser
from comicapi.schemas.base import ApiResponse
from comicapi.schemas.catalog import (
    AddPagesRequest,
    ChapterPagesResponse,
    ReorderPagesRequest,
)
from comicapi.services.chapter_service import ChapterService

router = APIRouter(prefix="/chapters", tags=["chapters"])


@router.get("/slug/{slug}/pages", response_model=ApiResponse[ChapterPagesResponse])
def get_pages_by_slug(
    slug: str = Path(..., min_length=1),
    current_user: CurrentUser = Depends(get_current_user),
    chapter_service: ChapterService = Depends(get_chapter_service),
):
    return ApiResponse.of(chapter_service.get_pages_by_slug(current_user, slug))


@router.get("/{chapter_id}/pages", response_model=ApiResponse[ChapterPagesResponse])
def get_pages(
    chapter_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    chapter_service: ChapterService = Depends(get_chapter_service),
):
    """무료/소유자/관리자/구매자만 열람 가능, 그 외 403 Purchase required"""
    return ApiResponse.of(chapter_service.get_pages(current_user, chapter_id))


@router.post("/{chapter_id}/pages", response_model=ApiResponse[ChapterPagesResponse])
def add_pages(
    chapter_id: uuid.UUID,
    request: AddPagesRequest,
    current_user: CurrentUser = Depends(get_current_user),
    chapter_service: ChapterService = Depends(get_chapter_service),
):
    pages = chapter_service.add_pages(current_user, chapter_id, request.pages)
    return ApiResponse.of(pages, message="Pages added")


@router.put(
    "/{chapter_id}/pages/reorder", response_model=ApiResponse[ChapterPagesResponse]
)
def reorder_pages(
    chapter_id: uuid.UUID,
    request: ReorderPagesRequest,
    current_user: CurrentUser = Depends(get_current_user),
    chapter_service: ChapterService = Depends(get_chapter_service),
):
    pages = chapter_service.reorder_pages(current_user, chapter_id, request.items)
    return ApiResponse.of(pages, message="Pages reordered")


@router.delete("/{chapter_id}/pages/{page_id}", response_model=ApiResponse[None])
def delete_page(
    chapter_id: uuid.UUID,
    page_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    chapter_service: ChapterService = Depends(get_chapter_service),
):
    chapter_service.delete_page(current_user, chapter_id, page_id)
    return ApiResponse.of(message="Page deleted")
