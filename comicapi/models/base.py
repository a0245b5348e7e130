from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, declarative_base, declared_attr, mapped_column
from sqlalchemy.types import TypeDecorator

from comicapi.utils.date_utils import ensure_utc, utcnow

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """항상 timezone-aware UTC datetime 을 돌려주는 컬럼 타입"""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)


class CreatedAtMixin:
    """생성 시각 필드를 위한 믹스인"""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
        )


class TimestampMixin(CreatedAtMixin):
    """타임스탬프 필드를 위한 믹스인"""

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            UTCDateTime,
            default=utcnow,
            server_default=func.now(),
            onupdate=utcnow,
            nullable=False,
        )


class BaseModel(Base):
    """모든 모델의 베이스 클래스"""

    __abstract__ = True
