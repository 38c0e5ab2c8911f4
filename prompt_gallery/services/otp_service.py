# prompt_gallery/services/otp_service.py
import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from prompt_gallery.core.email_client import build_otp_email
from prompt_gallery.core.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    UpstreamServiceError,
)
from prompt_gallery.core.security import CredentialIssuer
from prompt_gallery.models.otp import OTP
from prompt_gallery.models.user import User, utcnow
from prompt_gallery.repositories.otp_repo import OTPRepository
from prompt_gallery.repositories.user_repo import UserRepository
from prompt_gallery.schemas.otp import (
    OTPSentRead,
    ResetPasswordRequest,
    SendOTPRequest,
    SignupWithOTPRequest,
    VerifyOTPRequest,
)
from prompt_gallery.schemas.user import AuthResponse, UserRead

logger = logging.getLogger(__name__)

DEFAULT_OTP_TTL_MINUTES = 10


def generate_otp_code() -> str:
    """Uniform 6-digit code, zero padded (000000-999999)."""
    return f"{secrets.randbelow(1_000_000):06d}"


class OTPService:
    """
    One-time-password flows for signup and password reset.

    Per (email, purpose):

        issue  -> unverified record, code emailed
        verify -> verified=True (record kept)
        finish -> signup creates the user / reset changes the password,
                  then the record is deleted

    Verify and finish are separate calls so a client can confirm the code
    before sending the rest of the form. Expiry is checked on every lookup.
    """

    def __init__(
        self,
        otp_repo: OTPRepository,
        user_repo: UserRepository,
        email_sender,
        credentials: CredentialIssuer,
        ttl_minutes: int = DEFAULT_OTP_TTL_MINUTES,
    ):
        self.otp_repo = otp_repo
        self.user_repo = user_repo
        self.email_sender = email_sender
        self.credentials = credentials
        self.ttl_minutes = ttl_minutes

    # ----- Issue -----

    def send_otp(self, session: Session, payload: SendOTPRequest) -> OTPSentRead:
        """
        Issue a fresh code for (email, purpose) and email it.

        Raises:
            ConflictError: signup for an email that already has an account.
            NotFoundError: password reset for an unknown email.
            UpstreamServiceError: the email could not be sent. The new
                record stays in the ledger but is unusable without the code.
        """
        email = str(payload.email)
        existing = self.user_repo.get_by_email(session, email)

        if payload.purpose == "signup" and existing is not None:
            raise ConflictError("Email already registered")
        if payload.purpose == "forgot_password" and existing is None:
            raise NotFoundError("Email not found")

        self.otp_repo.delete_unverified(session, email, payload.purpose)

        code = generate_otp_code()
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=self.ttl_minutes)
        otp = OTP(
            email=email,
            code=code,
            purpose=payload.purpose,
            expires_at=expires_at,
            verified=False,
        )
        self.otp_repo.create(session, otp)
        session.commit()

        subject, html_body, text_body = build_otp_email(code, payload.purpose, self.ttl_minutes)
        try:
            self.email_sender.send(email, subject, html_body, text_body)
        except Exception as e:
            logger.error(f"OTP email to {email} ({payload.purpose}) failed: {e}")
            raise UpstreamServiceError(f"Failed to send OTP email: {e}") from e

        logger.info(f"OTP issued for {email} ({payload.purpose})")
        return OTPSentRead(email=email, expires_at=expires_at)

    # ----- Verify -----

    def verify_otp(self, session: Session, payload: VerifyOTPRequest) -> None:
        """
        Mark the latest matching unverified code as verified.

        Wrong code, wrong email and an already-verified code all fail the
        same way.
        """
        otp = self.otp_repo.find_latest(
            session, str(payload.email), payload.otp, verified=False
        )
        if otp is None:
            raise UnauthorizedError("Invalid OTP")
        if otp.is_expired():
            raise UnauthorizedError("OTP has expired")

        otp.verified = True
        self.otp_repo.update(session, otp)
        session.commit()

    # ----- Consume -----

    def _consumable(self, session: Session, email: str, code: str, purpose: str) -> OTP:
        otp = self.otp_repo.find_latest(session, email, code, verified=True, purpose=purpose)
        if otp is None:
            raise UnauthorizedError("Invalid or unverified OTP")
        if otp.is_expired():
            raise UnauthorizedError("OTP has expired")
        return otp

    def signup_with_otp(self, session: Session, payload: SignupWithOTPRequest) -> AuthResponse:
        """
        Create the account behind a verified signup code.

        Uniqueness is re-checked here; time has passed since verify.
        """
        email = str(payload.email)
        otp = self._consumable(session, email, payload.otp, "signup")

        if self.user_repo.get_by_username(session, payload.username) is not None:
            raise ConflictError("Username already exists")
        if self.user_repo.get_by_email(session, email) is not None:
            raise ConflictError("Email already registered")

        user = User(
            username=payload.username,
            email=email,
            password_hash=self.credentials.hash_password(payload.password),
            full_name=payload.full_name,
            role="user",
            is_active=True,
            email_verified=True,
        )
        self.otp_repo.delete(session, otp)
        try:
            user = self.user_repo.create(session, user)
        except IntegrityError:
            # Rolls back the code deletion too; the code stays usable.
            session.rollback()
            raise ConflictError("Username or email already exists")

        token = self.credentials.issue_token(user.id, user.username, user.email, user.role)
        logger.info(f"User {user.username} signed up via OTP")
        return AuthResponse(token=token, user=UserRead.model_validate(user))

    def reset_password(self, session: Session, payload: ResetPasswordRequest) -> None:
        email = str(payload.email)
        otp = self._consumable(session, email, payload.otp, "forgot_password")

        user = self.user_repo.get_by_email(session, email)
        if user is None:
            raise NotFoundError("User not found")

        user.password_hash = self.credentials.hash_password(payload.new_password)
        user.updated_at = utcnow()
        self.otp_repo.delete(session, otp)
        self.user_repo.update(session, user)
        logger.info(f"Password reset for {email}")
