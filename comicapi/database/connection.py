from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from comicapi.config import Settings, settings


def build_engine(config: Settings) -> Engine:
    url = config.database_url
    if url.startswith("sqlite"):
        # 테스트/로컬 개발용
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=config.DEBUG,
        )

    return create_engine(
        url,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # 연결 유효성 검사
        pool_recycle=3600,  # 1시간마다 연결 재생성
        echo=config.DEBUG,  # 디버그 모드에서 SQL 로깅
    )


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=bind,
        expire_on_commit=False,
    )


engine = build_engine(settings)
SessionLocal = build_session_factory(engine)
