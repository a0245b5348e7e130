import logging
import uuid
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from comicapi.config import Settings
from comicapi.core.exceptions import (
    AuthenticationError,
    BusinessLogicError,
    ConflictError,
    InvalidCodeError,
    NotFoundError,
)
from comicapi.core.security import (
    TokenService,
    generate_one_time_code,
    hash_password,
    hash_token,
    verify_password,
)
from comicapi.database.session import transactional
from comicapi.repositories.one_time_code_repository import (
    EmailVerificationCodeRepository,
    OneTimeCodeRepository,
    PasswordResetCodeRepository,
)
from comicapi.repositories.refresh_token_repository import RefreshTokenRepository
from comicapi.repositories.user_repository import UserRepository, normalize_email
from comicapi.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SocialLoginRequest,
    TokenPairResponse,
    UpdatePasswordRequest,
    VerifyEmailRequest,
)
from comicapi.schemas.user import UserProfile, UserRecord
from comicapi.services.mail_service import MailPurpose, MailService
from comicapi.utils.date_utils import ensure_utc, is_expired, utcnow

logger = logging.getLogger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 담당하는 서비스

    refresh token 과 일회용 코드는 해시로만 저장/조회하며,
    원본 값은 발급 시점에만 호출자(또는 메일)로 전달된다.
    """

    def __init__(
        self,
        db: Session,
        settings: Settings,
        token_service: TokenService,
        mail_service: MailService,
    ):
        self.db = db
        self.settings = settings
        self.token_service = token_service
        self.mail_service = mail_service
        self.user_repo = UserRepository(db)
        self.refresh_repo = RefreshTokenRepository(db)
        self.verification_repo = EmailVerificationCodeRepository(db)
        self.reset_repo = PasswordResetCodeRepository(db)

    # ------------------------------------------------------------------
    # Token pair
    # ------------------------------------------------------------------

    def _issue_token_pair(self, user: UserRecord) -> TokenPairResponse:
        """access/refresh 토큰 발급. refresh 해시 저장은 호출자의 트랜잭션에 포함됨"""
        refresh_token = self.token_service.generate_refresh_token()
        self.refresh_repo.add(
            user_id=user.id,
            token_hash=hash_token(refresh_token),
            expires_at=self.token_service.refresh_token_expiry(),
            commit=False,
        )
        return TokenPairResponse(
            access_token=self.token_service.create_access_token(user),
            refresh_token=refresh_token,
        )

    def _new_code(
        self, repo: OneTimeCodeRepository, user_id: uuid.UUID, lifetime: timedelta
    ) -> str:
        code = generate_one_time_code()
        repo.add(
            user_id=user_id,
            code_hash=hash_token(code),
            expires_at=utcnow() + lifetime,
            commit=False,
        )
        return code

    def _verification_lifetime(self) -> timedelta:
        return timedelta(hours=self.settings.EMAIL_VERIFICATION_EXPIRE_HOURS)

    def _reset_lifetime(self) -> timedelta:
        return timedelta(hours=self.settings.PASSWORD_RESET_EXPIRE_HOURS)

    # ------------------------------------------------------------------
    # Register / login
    # ------------------------------------------------------------------

    def register(self, request: RegisterRequest) -> TokenPairResponse:
        """회원가입 - 사용자, 인증 코드, refresh token 을 하나의 트랜잭션으로 생성"""
        email = normalize_email(request.email)
        if self.user_repo.email_exists(email):
            logger.info(f"Registration rejected, email already in use: {email}")
            raise ConflictError("Email already registered")

        password_hash = hash_password(request.password, self.settings.BCRYPT_ROUNDS)
        try:
            with transactional(self.db):
                user = self.user_repo.create_user(
                    email=email,
                    full_name=request.full_name,
                    password_hash=password_hash,
                    commit=False,
                )
                code = self._new_code(
                    self.verification_repo, user.id, self._verification_lifetime()
                )
                tokens = self._issue_token_pair(user)
        except IntegrityError:
            # 동시 가입으로 유니크 인덱스에 걸린 경우
            logger.info(f"Registration lost unique-email race: {email}")
            raise ConflictError("Email already registered")

        logger.info(f"User registered: {user.id}")
        self._deliver_quietly(email, code, MailPurpose.EMAIL_VERIFICATION)
        return tokens

    def login(self, request: LoginRequest) -> TokenPairResponse:
        user = self.user_repo.get_by_email(request.email)
        if not user:
            logger.info("Login failed: unknown email")
            raise AuthenticationError("Invalid credentials")
        if not user.has_password:
            raise BusinessLogicError("Use social login", error_code="AUTH_SOCIAL")
        if not verify_password(request.password, user.password_hash):
            logger.info(f"Login failed: wrong password for user {user.id}")
            raise AuthenticationError("Invalid credentials")

        with transactional(self.db):
            tokens = self._issue_token_pair(user)
        logger.info(f"User logged in: {user.id}")
        return tokens

    def social_login(self, request: SocialLoginRequest) -> TokenPairResponse:
        """소셜 로그인 - 호출자가 보낸 이메일/이름을 검증 없이 신뢰한다"""
        email = normalize_email(request.email)
        user = self.user_repo.get_by_email(email)
        if not user:
            try:
                with transactional(self.db):
                    user = self.user_repo.create_user(
                        email=email,
                        full_name=request.full_name,
                        password_hash=None,
                        email_verified=True,
                        avatar_url=request.avatar_url,
                        commit=False,
                    )
                logger.info(f"Social user provisioned: {user.id}")
            except IntegrityError:
                # 동시에 같은 이메일로 생성된 경우 기존 사용자 사용
                user = self.user_repo.get_by_email(email)
                if not user:
                    raise

        with transactional(self.db):
            tokens = self._issue_token_pair(user)
        return tokens

    def get_profile(self, user_id: uuid.UUID) -> UserProfile:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserProfile.model_validate(user)

    # ------------------------------------------------------------------
    # Refresh / logout
    # ------------------------------------------------------------------

    def refresh(self, refresh_token: str) -> TokenPairResponse:
        """refresh token 교환 (rotation) - 제시된 토큰은 폐기되고 새 쌍이 발급됨"""
        record = self.refresh_repo.find_by_hash(hash_token(refresh_token))
        if record is None:
            logger.info("Refresh rejected: token not found")
            raise AuthenticationError("Invalid refresh token")
        if record.revoked:
            logger.warning(f"Refresh rejected: revoked token {record.id} presented")
            raise AuthenticationError("Invalid refresh token")
        if is_expired(record.expires_at):
            logger.info(f"Refresh rejected: token {record.id} expired")
            raise AuthenticationError("Invalid refresh token")

        user = self.user_repo.get_by_id(record.user_id)
        if not user:
            logger.info(f"Refresh rejected: user {record.user_id} no longer exists")
            raise AuthenticationError("Invalid refresh token")

        with transactional(self.db):
            if not self.refresh_repo.revoke_if_active(record.id):
                # 동시 교환 요청에서 다른 요청이 먼저 폐기함
                logger.warning(f"Refresh rejected: token {record.id} already rotated")
                raise AuthenticationError("Invalid refresh token")
            tokens = self._issue_token_pair(user)
        return tokens

    def logout(self, refresh_token: str) -> None:
        """멱등 - 없는 토큰도 이미 로그아웃된 것으로 간주"""
        record = self.refresh_repo.find_by_hash(hash_token(refresh_token))
        if record is None:
            logger.info("Logout: token not found, treated as logged out")
            return
        with transactional(self.db):
            self.refresh_repo.revoke_if_active(record.id)
        logger.info(f"Logout: token {record.id} revoked")

    # ------------------------------------------------------------------
    # One-time codes
    # ------------------------------------------------------------------

    def forgot_password(self, email: str) -> None:
        """항상 성공 - 존재하지 않는 이메일인지 호출자에게 드러내지 않음"""
        user = self.user_repo.get_by_email(email)
        if not user:
            logger.info("Forgot-password requested for unknown email")
            return

        with transactional(self.db):
            code = self._new_code(self.reset_repo, user.id, self._reset_lifetime())
        logger.info(f"Password reset code issued for user {user.id}")
        self._deliver_quietly(user.email, code, MailPurpose.PASSWORD_RESET)

    def reset_password(self, request: ResetPasswordRequest) -> None:
        user = self.user_repo.get_by_email(request.email)
        if not user:
            raise BusinessLogicError("Invalid request")

        password_hash = hash_password(request.new_password, self.settings.BCRYPT_ROUNDS)
        with transactional(self.db):
            self._consume_code(self.reset_repo, user.id, request.code, "reset")
            self.user_repo.set_password_hash(user.id, password_hash, commit=False)
        logger.info(f"Password reset for user {user.id}")

    def verify_email(self, request: VerifyEmailRequest) -> None:
        user = self.user_repo.get_by_email(request.email)
        if not user:
            raise BusinessLogicError("Invalid request")

        with transactional(self.db):
            self._consume_code(self.verification_repo, user.id, request.code, "verification")
            self.user_repo.mark_email_verified(user.id, commit=False)
        logger.info(f"Email verified for user {user.id}")

    def resend_confirmation(self, email: str) -> None:
        user = self.user_repo.get_by_email(email)
        if not user:
            raise BusinessLogicError("Invalid request")

        with transactional(self.db):
            code = self._new_code(
                self.verification_repo, user.id, self._verification_lifetime()
            )
        # 발송 실패는 그대로 전파 (500)
        self.mail_service.send_code(user.email, code, MailPurpose.EMAIL_VERIFICATION)
        logger.info(f"Verification code re-issued for user {user.id}")

    def _consume_code(
        self, repo: OneTimeCodeRepository, user_id: uuid.UUID, code: str, kind: str
    ) -> None:
        record = repo.find(user_id, hash_token(code))
        if record is None:
            logger.info(f"Invalid {kind} code for user {user_id}: not found")
            raise InvalidCodeError()
        if record.consumed_at is not None:
            logger.info(f"Invalid {kind} code for user {user_id}: already consumed")
            raise InvalidCodeError()
        now = utcnow()
        if is_expired(record.expires_at, now):
            logger.info(
                f"Invalid {kind} code for user {user_id}: expired at {ensure_utc(record.expires_at).isoformat()}"
            )
            raise InvalidCodeError()
        if not repo.consume_if_unused(record.id, now):
            logger.info(f"Invalid {kind} code for user {user_id}: consumed concurrently")
            raise InvalidCodeError()

    def _deliver_quietly(self, email: str, code: str, purpose: MailPurpose) -> None:
        try:
            self.mail_service.send_code(email, code, purpose)
        except Exception as e:
            logger.error(
                f"Failed to deliver {purpose.value} mail to {email}: {type(e).__name__}"
            )

    # ------------------------------------------------------------------
    # Password update
    # ------------------------------------------------------------------

    def update_password(
        self, user_id: uuid.UUID, request: UpdatePasswordRequest
    ) -> None:
        user: Optional[UserRecord] = self.user_repo.get_by_id(user_id)
        if not user or not user.has_password:
            raise BusinessLogicError("Invalid request")
        if not verify_password(request.current_password, user.password_hash):
            raise BusinessLogicError("Invalid password")

        self.user_repo.set_password_hash(
            user_id, hash_password(request.new_password, self.settings.BCRYPT_ROUNDS)
        )
        logger.info(f"Password updated for user {user_id}")
