from typing import Generic, List, TypeVar

from pydantic import Field

from comicapi.schemas.base import CamelModel

T = TypeVar("T")


class PageParams(CamelModel):
    """페이지 번호 기반 페이지네이션 파라미터 (1부터 시작)"""

    page_number: int = Field(1, ge=1, description="페이지 번호")
    page_size: int = Field(20, ge=1, le=100, description="페이지당 항목 수")

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


class PagedResult(CamelModel, Generic[T]):
    items: List[T]
    total: int
    page_number: int
    page_size: int
