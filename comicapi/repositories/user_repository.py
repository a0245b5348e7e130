import uuid
from typing import Optional

from sqlalchemy.orm import Session

from comicapi.models.user import User as UserModel
from comicapi.repositories.base import BaseRepository
from comicapi.schemas.user import UserRecord


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[UserModel, UserRecord]):
    """사용자 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(UserModel, UserRecord, db)

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        return self._to_schema(
            self.db.query(UserModel)
            .filter(UserModel.email == normalize_email(email))
            .first()
        )

    def email_exists(self, email: str) -> bool:
        return self.exists({"email": normalize_email(email)})

    def create_user(
        self,
        email: str,
        full_name: str,
        password_hash: Optional[str] = None,
        email_verified: bool = False,
        avatar_url: Optional[str] = None,
        commit: bool = True,
    ) -> UserRecord:
        return self.create(
            commit=commit,
            email=normalize_email(email),
            full_name=full_name.strip(),
            password_hash=password_hash,
            email_verified=email_verified,
            avatar_url=avatar_url,
        )

    def set_password_hash(
        self, user_id: uuid.UUID, password_hash: str, commit: bool = True
    ) -> Optional[UserRecord]:
        return self.update(user_id, commit=commit, password_hash=password_hash)

    def mark_email_verified(
        self, user_id: uuid.UUID, commit: bool = True
    ) -> Optional[UserRecord]:
        return self.update(user_id, commit=commit, email_verified=True)

    def lock_for_update(self, user_id: uuid.UUID) -> Optional[UserRecord]:
        """사용자 행 잠금 (SELECT ... FOR UPDATE, SQLite 에서는 무시됨)

        반드시 transactional() 블록 안에서 호출해야 잠금이 커밋까지 유지된다.
        """
        return self._to_schema(
            self.db.query(UserModel)
            .filter(UserModel.id == user_id)
            .with_for_update()
            .first()
        )
