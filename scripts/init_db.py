import logging
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from comicapi.config import settings  # noqa: E402
from comicapi.core.security import hash_password  # noqa: E402
from comicapi.database.connection import engine  # noqa: E402
from comicapi.database.session import get_db_context  # noqa: E402
from comicapi.logging_config import setup_logging  # noqa: E402
from comicapi.models import Base, User  # noqa: E402
from comicapi.models.user import UserRole  # noqa: E402
from comicapi.repositories.user_repository import normalize_email  # noqa: E402

logger = logging.getLogger("comicapi")


def seed_admin(email: str, password: str) -> None:
    """관리자 계정 생성 (이미 있으면 역할만 admin 으로 승격)"""
    email = normalize_email(email)
    with get_db_context() as db:
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            db.add(
                User(
                    email=email,
                    full_name="Administrator",
                    password_hash=hash_password(password, settings.BCRYPT_ROUNDS),
                    role=UserRole.ADMIN.value,
                    email_verified=True,
                )
            )
            logger.info(f"Admin account created: {email}")
        else:
            user.role = UserRole.ADMIN.value
            logger.info(f"Existing account promoted to admin: {email}")


def init_db():
    """데이터베이스 초기화"""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise

    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if admin_email and admin_password:
        seed_admin(admin_email, admin_password)


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    init_db()
