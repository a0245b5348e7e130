from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """현재 UTC 시각 (timezone-aware)"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    naive datetime 을 UTC 로 간주하여 tzinfo 를 붙이고,
    aware datetime 은 UTC 로 변환한다.

    SQLite 처럼 timezone 을 저장하지 않는 드라이버에서 읽은 값을
    애플리케이션 코드에서 aware 값과 안전하게 비교하기 위해 사용한다.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """만료 시각이 현재 시각 이전(또는 같음)이면 True"""
    if expires_at is None:
        return True
    current = now or utcnow()
    return ensure_utc(expires_at) <= current
