import uuid
from typing import List, Optional

from pydantic import Field

from comicapi.schemas.base import CamelModel


class ChapterRecord(CamelModel):
    id: uuid.UUID
    comic_id: uuid.UUID
    slug: str
    title: str
    unit_price: int = 0
    page_count: int = 0
    # 작품 소유자 (접근 판단용)
    owner_id: Optional[uuid.UUID] = None

    @property
    def is_free(self) -> bool:
        return self.unit_price == 0


class ChapterPageResponse(CamelModel):
    id: uuid.UUID
    chapter_id: uuid.UUID
    page_order: int
    image_url: str


class ChapterPagesResponse(CamelModel):
    chapter_id: uuid.UUID
    chapter_slug: str
    pages: List[ChapterPageResponse]


class NewPage(CamelModel):
    page_order: int = Field(..., ge=1)
    image_url: str = Field(..., min_length=1)


class AddPagesRequest(CamelModel):
    pages: List[NewPage]


class PageOrder(CamelModel):
    page_id: uuid.UUID
    page_order: int = Field(..., ge=1)


class ReorderPagesRequest(CamelModel):
    items: List[PageOrder]
