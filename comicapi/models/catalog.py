"""
카탈로그 모델 (외부 협력 영역)

엔타이틀먼트 판단에 필요한 필드(회차 가격, 작품 소유자)와
구매 여부로 보호되는 회차 페이지만 정의합니다.
"""

import uuid
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from comicapi.models.base import BaseModel, CreatedAtMixin, TimestampMixin


class Comic(BaseModel, TimestampMixin):
    __tablename__ = "comics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 플랫폼이 직접 등록한 작품은 소유자가 없음
    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    chapters: Mapped[List["Chapter"]] = relationship(back_populates="comic")


class Chapter(BaseModel, TimestampMixin):
    __tablename__ = "chapters"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    comic_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("comics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # 0 = 무료
    page_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    comic: Mapped[Comic] = relationship(back_populates="chapters", lazy="joined")
    pages: Mapped[List["ChapterPage"]] = relationship(
        back_populates="chapter", order_by="ChapterPage.page_order"
    )

    @property
    def owner_id(self) -> Optional[uuid.UUID]:
        """작품 소유자 ID"""
        return self.comic.owner_id if self.comic else None


class ChapterPage(BaseModel, CreatedAtMixin):
    __tablename__ = "chapter_pages"
    __table_args__ = (
        UniqueConstraint("chapter_id", "page_order", name="uq_chapter_page_order"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    chapter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False
    )
    page_order: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)

    chapter: Mapped[Chapter] = relationship(back_populates="pages")
