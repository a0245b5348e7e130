import uuid
from datetime import datetime
from typing import Optional, Type, Union

from sqlalchemy import update
from sqlalchemy.orm import Session

from comicapi.models.auth import EmailVerificationCode, PasswordResetCode
from comicapi.repositories.base import BaseRepository
from comicapi.schemas.base import CamelModel

CodeModel = Union[EmailVerificationCode, PasswordResetCode]


class OneTimeCodeRecord(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    code_hash: str
    expires_at: datetime
    consumed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class OneTimeCodeRepository(BaseRepository[CodeModel, OneTimeCodeRecord]):
    """이메일 인증 코드 / 비밀번호 재설정 코드 공용 저장소"""

    def __init__(self, model_class: Type[CodeModel], db: Session):
        super().__init__(model_class, OneTimeCodeRecord, db)

    def add(
        self,
        user_id: uuid.UUID,
        code_hash: str,
        expires_at: datetime,
        commit: bool = True,
    ) -> OneTimeCodeRecord:
        return self.create(
            commit=commit, user_id=user_id, code_hash=code_hash, expires_at=expires_at
        )

    def find(self, user_id: uuid.UUID, code_hash: str) -> Optional[OneTimeCodeRecord]:
        """같은 코드가 여러 번 발급된 경우 가장 최근 것을 반환"""
        model = self.model_class
        return self._to_schema(
            self.db.query(model)
            .filter(model.user_id == user_id, model.code_hash == code_hash)
            .order_by(model.created_at.desc())
            .first()
        )

    def consume_if_unused(self, code_id: uuid.UUID, now: datetime) -> bool:
        """consumed_at 이 비어 있을 때만 소비 처리 - 동시 요청 중 하나만 True"""
        model = self.model_class
        result = self.db.execute(
            update(model)
            .where(model.id == code_id, model.consumed_at.is_(None))
            .values(consumed_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class EmailVerificationCodeRepository(OneTimeCodeRepository):
    def __init__(self, db: Session):
        super().__init__(EmailVerificationCode, db)


class PasswordResetCodeRepository(OneTimeCodeRepository):
    def __init__(self, db: Session):
        super().__init__(PasswordResetCode, db)
