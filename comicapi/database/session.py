from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from comicapi.database.connection import SessionLocal


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context() -> Iterator[Session]:
    """컨텍스트 매니저를 사용한 데이터베이스 세션 관리"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def transactional(db: Session) -> Iterator[Session]:
    """여러 레코드 쓰기를 하나의 커밋으로 묶는다.

    블록 안에서는 flush 만 하고, 정상 종료 시 한 번 commit 한다.
    예외가 발생하면 전체를 rollback 하고 예외를 다시 던진다.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
