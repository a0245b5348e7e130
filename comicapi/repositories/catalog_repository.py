import uuid
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from comicapi.models.catalog import Chapter, ChapterPage
from comicapi.repositories.base import BaseRepository
from comicapi.schemas.catalog import ChapterPageResponse, ChapterRecord, NewPage


class ChapterRepository(BaseRepository[Chapter, ChapterRecord]):
    """회차 조회 (작품 소유자 포함) 및 페이지 쓰기"""

    def __init__(self, db: Session):
        super().__init__(Chapter, ChapterRecord, db)

    def get_by_slug(self, slug: str) -> Optional[ChapterRecord]:
        return self.get_by_field("slug", slug)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def list_pages(self, chapter_id: uuid.UUID) -> List[ChapterPageResponse]:
        pages = (
            self.db.query(ChapterPage)
            .filter(ChapterPage.chapter_id == chapter_id)
            .order_by(ChapterPage.page_order.asc())
            .all()
        )
        return [ChapterPageResponse.model_validate(p) for p in pages]

    def page_orders(self, chapter_id: uuid.UUID) -> Dict[uuid.UUID, int]:
        """page_id -> page_order"""
        rows = (
            self.db.query(ChapterPage.id, ChapterPage.page_order)
            .filter(ChapterPage.chapter_id == chapter_id)
            .all()
        )
        return {row.id: row.page_order for row in rows}

    def add_pages(self, chapter_id: uuid.UUID, pages: List[NewPage]) -> int:
        """페이지 추가 후 page_count 증가. 커밋은 호출자가 담당"""
        for page in pages:
            self.db.add(
                ChapterPage(
                    chapter_id=chapter_id,
                    page_order=page.page_order,
                    image_url=page.image_url,
                )
            )
        self._adjust_page_count(chapter_id, len(pages))
        self.db.flush()
        return len(pages)

    def reorder_pages(
        self, chapter_id: uuid.UUID, new_orders: Dict[uuid.UUID, int]
    ) -> None:
        """2단계 쓰기로 (chapter_id, page_order) 유니크 인덱스 충돌 없이 재정렬

        1) 대상 페이지를 기존/요청 순서 최댓값보다 위로 이동
        2) 최종 순서 기록
        커밋은 호출자가 담당.
        """
        current = self.page_orders(chapter_id)
        offset = max(list(current.values()) + list(new_orders.values())) + 1

        pages = (
            self.db.query(ChapterPage)
            .filter(
                ChapterPage.chapter_id == chapter_id,
                ChapterPage.id.in_(list(new_orders)),
            )
            .all()
        )
        for page in pages:
            page.page_order = page.page_order + offset
        self.db.flush()

        for page in pages:
            page.page_order = new_orders[page.id]
        self.db.flush()

    def delete_page(self, chapter_id: uuid.UUID, page_id: uuid.UUID) -> bool:
        page = (
            self.db.query(ChapterPage)
            .filter(ChapterPage.id == page_id, ChapterPage.chapter_id == chapter_id)
            .first()
        )
        if page is None:
            return False
        self.db.delete(page)
        self._adjust_page_count(chapter_id, -1)
        self.db.flush()
        return True

    def _adjust_page_count(self, chapter_id: uuid.UUID, delta: int) -> None:
        chapter = self._get_model(chapter_id)
        if chapter is not None:
            chapter.page_count = max(chapter.page_count + delta, 0)
