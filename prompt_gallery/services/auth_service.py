# prompt_gallery/services/auth_service.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from prompt_gallery.core.errors import ConflictError, ForbiddenError, UnauthorizedError
from prompt_gallery.core.security import CredentialIssuer
from prompt_gallery.models.user import User, utcnow
from prompt_gallery.repositories.user_repo import UserRepository
from prompt_gallery.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserRead

logger = logging.getLogger(__name__)


class AuthService:
    """
    Password registration and login.

    OTP-gated signup / reset live in OTPService.
    """

    def __init__(self, repo: UserRepository, credentials: CredentialIssuer):
        self.repo = repo
        self.credentials = credentials

    def _auth_response(self, user: User) -> AuthResponse:
        token = self.credentials.issue_token(user.id, user.username, user.email, user.role)
        return AuthResponse(token=token, user=UserRead.model_validate(user))

    def register(self, session: Session, payload: RegisterRequest) -> AuthResponse:
        """
        Create a user account directly.

        Raises:
            ConflictError: username or email already taken.
        """
        email = str(payload.email)

        if self.repo.get_by_username(session, payload.username) is not None:
            raise ConflictError("Username already exists")
        if self.repo.get_by_email(session, email) is not None:
            raise ConflictError("Email already exists")

        user = User(
            username=payload.username,
            email=email,
            password_hash=self.credentials.hash_password(payload.password),
            full_name=payload.full_name,
            role="user",
            is_active=True,
        )
        try:
            user = self.repo.create(session, user)
        except IntegrityError:
            session.rollback()
            logger.info(f"Register lost a uniqueness race for {payload.username}")
            raise ConflictError("Username or email already exists")
        logger.info(f"User {user.username} registered")
        return self._auth_response(user)

    def login(self, session: Session, payload: LoginRequest) -> AuthResponse:
        """
        Raises:
            UnauthorizedError: unknown email or wrong password (same message).
            ForbiddenError: the account is deactivated.
        """
        user = self.repo.get_by_email(session, str(payload.email))
        if user is None:
            logger.info("Login failed: unknown email")
            raise UnauthorizedError("Invalid email or password")

        if not user.is_active:
            raise ForbiddenError("Account is deactivated")

        if not self.credentials.verify_password(user.password_hash, payload.password):
            logger.info(f"Login failed for {user.username}: bad password")
            raise UnauthorizedError("Invalid email or password")

        user.last_login = utcnow()
        user = self.repo.update(session, user)
        return self._auth_response(user)
