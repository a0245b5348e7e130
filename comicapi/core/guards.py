"""
접근 판단 술어 모음

모두 (요청 주체, 리소스) 만 받는 순수 함수이며 DB 에 접근하지 않는다.
구매 여부처럼 저장소가 필요한 값은 호출자가 조회해서 넘긴다.
"""

import uuid
from typing import Any, Optional

from comicapi.models.user import UserRole


def is_admin(actor: Any) -> bool:
    return actor is not None and UserRole.is_admin(actor.role)


def owns_comic(actor: Any, owner_id: Optional[uuid.UUID]) -> bool:
    return actor is not None and owner_id is not None and actor.id == owner_id


def can_read_chapter(actor: Any, chapter: Any, purchased: bool) -> bool:
    """무료, 작품 소유자, 관리자, 구매자 중 하나면 열람 가능"""
    if chapter.unit_price == 0:
        return True
    return owns_comic(actor, chapter.owner_id) or is_admin(actor) or purchased


def can_manage_chapter(actor: Any, chapter: Any) -> bool:
    return owns_comic(actor, chapter.owner_id) or is_admin(actor)


def can_view_transaction(actor: Any, transaction: Any) -> bool:
    return is_admin(actor) or (actor is not None and transaction.user_id == actor.id)
