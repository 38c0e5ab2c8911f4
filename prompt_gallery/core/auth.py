# prompt_gallery/core/auth.py
import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from prompt_gallery.core.errors import ForbiddenError, UnauthorizedError
from prompt_gallery.core.permissions import ADMIN_ROLE, Caller
from prompt_gallery.database import get_session
from prompt_gallery.models.user import User

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so public routes can still see an optional caller.
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from an access token.

    Flow:
      1. If no Authorization header => anonymous => return None.
      2. Decode JWT with the app's CredentialIssuer => extract 'sub'.
      3. Convert 'sub' to UUID to match User.id type.
      4. Load the user; reject missing or deactivated accounts.

    Raises:
        UnauthorizedError: malformed / expired token or unknown user.
        ForbiddenError: the account is deactivated.
    """
    if credentials is None:
        return None

    payload = request.app.state.credentials.decode_token(credentials.credentials)
    sub = payload.get("sub")
    if not sub:
        raise UnauthorizedError("Token missing sub")

    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        raise UnauthorizedError("Invalid sub in token")

    user = session.get(User, user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise ForbiddenError("Account is deactivated")

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        UnauthorizedError: if no valid token was sent.
    """
    if user is None:
        raise UnauthorizedError("Authentication required")
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role.

    Raises:
        ForbiddenError: if role is not admin.
    """
    if user.role != ADMIN_ROLE:
        raise ForbiddenError("Admin access required")
    return user


def get_caller(user: User = Depends(require_auth)) -> Caller:
    """Authenticated caller context for service calls."""
    return Caller.from_user(user)


def get_admin_caller(user: User = Depends(require_admin)) -> Caller:
    return Caller.from_user(user)
