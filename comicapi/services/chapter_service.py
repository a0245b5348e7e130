import logging
import uuid
from typing import List

from sqlalchemy.orm import Session

from comicapi.core import guards
from comicapi.core.exceptions import (
    AuthorizationError,
    BusinessLogicError,
    NotFoundError,
    PurchaseRequiredError,
)
from comicapi.database.session import transactional
from comicapi.models.payment import PurchaseType
from comicapi.repositories.catalog_repository import ChapterRepository
from comicapi.repositories.purchase_repository import PurchaseRepository
from comicapi.schemas.auth import CurrentUser
from comicapi.schemas.catalog import (
    ChapterPagesResponse,
    ChapterRecord,
    NewPage,
    PageOrder,
)

logger = logging.getLogger(__name__)


class ChapterService:
    """회차 페이지 열람(엔타이틀먼트 판단)과 페이지 관리"""

    def __init__(self, db: Session):
        self.db = db
        self.chapter_repo = ChapterRepository(db)
        self.purchase_repo = PurchaseRepository(db)

    def _get_chapter(self, chapter_id: uuid.UUID) -> ChapterRecord:
        chapter = self.chapter_repo.get_by_id(chapter_id)
        if not chapter:
            raise NotFoundError("Chapter not found")
        return chapter

    def _get_managed_chapter(
        self, actor: CurrentUser, chapter_id: uuid.UUID
    ) -> ChapterRecord:
        chapter = self._get_chapter(chapter_id)
        if not guards.can_manage_chapter(actor, chapter):
            raise AuthorizationError()
        return chapter

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def get_pages(self, actor: CurrentUser, chapter_id: uuid.UUID) -> ChapterPagesResponse:
        return self._pages_for(actor, self._get_chapter(chapter_id))

    def get_pages_by_slug(self, actor: CurrentUser, slug: str) -> ChapterPagesResponse:
        chapter = self.chapter_repo.get_by_slug(slug)
        if not chapter:
            raise NotFoundError("Chapter not found")
        return self._pages_for(actor, chapter)

    def _pages_for(
        self, actor: CurrentUser, chapter: ChapterRecord
    ) -> ChapterPagesResponse:
        # 매 요청마다 새로 판단 (캐시하지 않음)
        purchased = False
        if not chapter.is_free:
            purchased = self.purchase_repo.has_purchased(
                actor.id, chapter.id, PurchaseType.CHAPTER
            )
        if not guards.can_read_chapter(actor, chapter, purchased):
            logger.info(f"Chapter {chapter.id} pages denied for user {actor.id}")
            raise PurchaseRequiredError()

        return ChapterPagesResponse(
            chapter_id=chapter.id,
            chapter_slug=chapter.slug,
            pages=self.chapter_repo.list_pages(chapter.id),
        )

    # ------------------------------------------------------------------
    # Page management
    # ------------------------------------------------------------------

    def add_pages(
        self, actor: CurrentUser, chapter_id: uuid.UUID, pages: List[NewPage]
    ) -> ChapterPagesResponse:
        chapter = self._get_managed_chapter(actor, chapter_id)
        if not pages:
            raise BusinessLogicError("No pages provided")

        orders = [p.page_order for p in pages]
        if len(set(orders)) != len(orders):
            raise BusinessLogicError("Duplicate page order in request")
        existing = set(self.chapter_repo.page_orders(chapter.id).values())
        taken = sorted(existing.intersection(orders))
        if taken:
            raise BusinessLogicError(f"Page order already in use: {taken}")

        with transactional(self.db):
            added = self.chapter_repo.add_pages(chapter.id, pages)
        logger.info(f"Added {added} pages to chapter {chapter.id}")
        return self._pages_for(actor, chapter)

    def reorder_pages(
        self, actor: CurrentUser, chapter_id: uuid.UUID, items: List[PageOrder]
    ) -> ChapterPagesResponse:
        chapter = self._get_managed_chapter(actor, chapter_id)
        if not items:
            raise BusinessLogicError("No pages provided")

        page_ids = [item.page_id for item in items]
        if len(set(page_ids)) != len(page_ids):
            raise BusinessLogicError("Duplicate page id in request")
        new_orders = {item.page_id: item.page_order for item in items}
        if len(set(new_orders.values())) != len(new_orders):
            raise BusinessLogicError("Duplicate page order in request")

        current = self.chapter_repo.page_orders(chapter.id)
        unknown = [str(pid) for pid in page_ids if pid not in current]
        if unknown:
            raise BusinessLogicError(f"Pages not in chapter: {unknown}")
        # 이동하지 않는 페이지의 순서와 겹치면 안 됨
        fixed = {order for pid, order in current.items() if pid not in new_orders}
        collisions = sorted(fixed.intersection(new_orders.values()))
        if collisions:
            raise BusinessLogicError(f"Page order already in use: {collisions}")

        with transactional(self.db):
            self.chapter_repo.reorder_pages(chapter.id, new_orders)
        logger.info(f"Reordered {len(items)} pages in chapter {chapter.id}")
        return self._pages_for(actor, chapter)

    def delete_page(
        self, actor: CurrentUser, chapter_id: uuid.UUID, page_id: uuid.UUID
    ) -> None:
        chapter = self._get_managed_chapter(actor, chapter_id)
        with transactional(self.db):
            if not self.chapter_repo.delete_page(chapter.id, page_id):
                raise NotFoundError("Page not found")
        logger.info(f"Deleted page {page_id} from chapter {chapter.id}")
