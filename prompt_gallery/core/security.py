# prompt_gallery/core/security.py
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt, JWTError
from passlib.context import CryptContext

from prompt_gallery.core.config import Settings
from prompt_gallery.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)


class CredentialIssuer:
    """
    Password hashing and access-token issuing.

    One instance is built per application (see `main.create_app`) and
    handed to the services that need it; nothing here is module-global.

    Passwords:
      - bcrypt via passlib
      - SHA-256 pre-normalization keeps input under bcrypt's 72-byte limit

    Tokens:
      - HS256 JWT carrying sub (user id), username, email, role, exp
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 10080):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self._pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialIssuer":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALG,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    # ----- Passwords -----

    @staticmethod
    def _normalize_password(password: str) -> bytes:
        return hashlib.sha256(password.encode("utf-8")).hexdigest().encode("utf-8")

    def hash_password(self, password: str) -> str:
        return self._pwd_context.hash(self._normalize_password(password))

    def verify_password(self, password_hash: str, password: str) -> bool:
        """Return True if `password` matches the stored hash."""
        if not password_hash:
            return False
        try:
            return self._pwd_context.verify(self._normalize_password(password), password_hash)
        except ValueError:
            # Malformed / unknown hash format stored for this user
            logger.warning("Stored password hash could not be parsed")
            return False

    # ----- Tokens -----

    def issue_token(self, user_id: Any, username: str, email: str, role: str) -> str:
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": str(user_id),
            "username": username,
            "email": email,
            "role": role,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict[str, Any]:
        """
        Decode and verify an access token.

        Raises:
            UnauthorizedError: if the signature is invalid or the token expired.
        """
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            raise UnauthorizedError("Invalid or expired token")
