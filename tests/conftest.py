import os
import sys
import uuid
from pathlib import Path
from typing import List, Optional, Tuple

# 앱 import 전에 테스트 환경 설정
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MAIL_BACKEND"] = "log"
os.environ["LOG_JSON"] = "false"

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402
from dependency_injector import providers  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from comicapi.config import get_settings  # noqa: E402
from comicapi.core.security import TokenService, hash_password  # noqa: E402
from comicapi.database.connection import build_engine, build_session_factory  # noqa: E402
from comicapi.database.session import get_db  # noqa: E402
from comicapi.main import app  # noqa: E402
from comicapi.models import Base, Chapter, ChapterPage, Comic, User  # noqa: E402
from comicapi.models.user import UserRole  # noqa: E402
from comicapi.services.mail_service import MailPurpose  # noqa: E402

DEFAULT_PASSWORD = "secret123"


class FakeMailService:
    """보낸 코드를 메모리에 보관하는 메일 서비스"""

    def __init__(self):
        self.outbox: List[Tuple[str, str, MailPurpose]] = []
        self.fail = False

    def send_code(self, to_email: str, code: str, purpose: MailPurpose) -> Optional[str]:
        if self.fail:
            raise RuntimeError("mail transport down")
        self.outbox.append((to_email, code, purpose))
        return None

    def last_code(self, email: str, purpose: MailPurpose) -> str:
        for to_email, code, sent_purpose in reversed(self.outbox):
            if to_email == email and sent_purpose == purpose:
                return code
        raise AssertionError(f"no {purpose.value} mail sent to {email}")


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def session_factory(tmp_path):
    config = get_settings().model_copy(
        update={"DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}"}
    )
    engine = build_engine(config)
    Base.metadata.create_all(bind=engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mail():
    return FakeMailService()


@pytest.fixture
def token_service(settings):
    return TokenService(settings)


@pytest.fixture
def client(session_factory, mail):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    container = app.container  # type: ignore[attr-defined]
    app.dependency_overrides[get_db] = override_get_db
    container.core.mail_service.override(providers.Object(mail))
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    container.core.mail_service.reset_override()
    app.dependency_overrides.clear()


# ----------------------------------------------------------------------
# Seed helpers
# ----------------------------------------------------------------------


def create_user(
    db,
    email: str = "reader@example.com",
    password: Optional[str] = DEFAULT_PASSWORD,
    role: UserRole = UserRole.USER,
    full_name: str = "Reader",
) -> User:
    user = User(
        email=email,
        full_name=full_name,
        password_hash=hash_password(password, rounds=4) if password else None,
        role=role.value,
    )
    db.add(user)
    db.commit()
    return user


def create_chapter(
    db,
    owner: Optional[User] = None,
    unit_price: int = 100,
    page_orders=(1, 2, 3),
) -> Chapter:
    suffix = uuid.uuid4().hex[:8]
    comic = Comic(
        owner_id=owner.id if owner else None,
        slug=f"comic-{suffix}",
        title="Night Market",
        unit_price=unit_price,
    )
    db.add(comic)
    db.flush()
    chapter = Chapter(
        comic_id=comic.id,
        slug=f"chapter-{suffix}",
        title="Chapter 1",
        unit_price=unit_price,
        page_count=len(page_orders),
    )
    db.add(chapter)
    db.flush()
    for order in page_orders:
        db.add(
            ChapterPage(
                chapter_id=chapter.id,
                page_order=order,
                image_url=f"https://cdn.example.com/{suffix}/{order}.jpg",
            )
        )
    db.commit()
    return chapter


def auth_headers(token_service: TokenService, user: User) -> dict:
    return {"Authorization": f"Bearer {token_service.create_access_token(user)}"}


@pytest.fixture
def reader(db):
    return create_user(db)


@pytest.fixture
def admin(db):
    return create_user(db, email="admin@example.com", role=UserRole.ADMIN, full_name="Admin")


@pytest.fixture
def author(db):
    return create_user(db, email="author@example.com", full_name="Author")
