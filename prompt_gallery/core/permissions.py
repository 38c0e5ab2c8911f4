# prompt_gallery/core/permissions.py
import uuid
from dataclasses import dataclass

from prompt_gallery.core.errors import ForbiddenError

ADMIN_ROLE = "admin"
USER_ROLE = "user"


@dataclass(frozen=True)
class Caller:
    """
    Authenticated-caller context handed to services.

    Routers build it from the resolved User; services never look at the
    request or the token themselves.
    """

    user_id: uuid.UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @classmethod
    def from_user(cls, user) -> "Caller":
        return cls(user_id=user.id, role=user.role)


def can_manage(caller: Caller, owner_id: uuid.UUID) -> bool:
    """Admins manage everything; users manage what they own."""
    return caller.is_admin or caller.user_id == owner_id


def ensure_owner_or_admin(caller: Caller, owner_id: uuid.UUID, action: str = "modify") -> None:
    """
    Raises:
        ForbiddenError: if the caller is neither admin nor the owner.
    """
    if not can_manage(caller, owner_id):
        raise ForbiddenError(f"You don't have permission to {action} this submission")


def ensure_admin(caller: Caller) -> None:
    """
    Service-level admin guard.

    Routers already enforce this through `require_admin`; services repeat
    it so they are safe to call from other entry points.
    """
    if not caller.is_admin:
        raise ForbiddenError("Admin access required")
