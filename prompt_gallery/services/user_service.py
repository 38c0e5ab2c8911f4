# prompt_gallery/services/user_service.py
import uuid

from sqlmodel import Session

from prompt_gallery.core.errors import ConflictError, ForbiddenError, NotFoundError
from prompt_gallery.core.permissions import Caller
from prompt_gallery.models.user import User, utcnow
from prompt_gallery.repositories.user_repo import UserRepository
from prompt_gallery.schemas.user import ProfileUpdate, UserStats, UserStatusUpdate


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - profile reads / edits for the caller
      - admin user management (list, activation, delete, stats)
      - orchestrate repository operations
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def get_me(self, session: Session, caller: Caller) -> User:
        """Return the caller's own profile."""
        return self.get_user(session, caller.user_id)

    def update_me(
        self,
        session: Session,
        caller: Caller,
        payload: ProfileUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Editable: interests, full_name, bio.
        """
        user = self.get_user(session, caller.user_id)

        if payload.interests is not None:
            user.interests = payload.interests
        if payload.full_name is not None:
            user.full_name = payload.full_name
        if payload.bio is not None:
            user.bio = payload.bio

        user.updated_at = utcnow()
        return self.repo.update(session, user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        role: str | None = None,
        is_active: bool | None = None,
    ) -> list[User]:
        """List users with optional filters, newest first (admin only)."""
        return self.repo.list(session, skip=skip, limit=limit, role=role, is_active=is_active)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id.

        Raises:
            NotFoundError: if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_status(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserStatusUpdate,
    ) -> User:
        """Activate / deactivate an account (admin only)."""
        user = self.get_user(session, user_id)
        user.is_active = payload.is_active
        user.updated_at = utcnow()
        return self.repo.update(session, user)

    def delete_user(self, session: Session, caller: Caller, user_id: uuid.UUID) -> None:
        """
        Delete a user (admin only).

        Raises:
            ForbiddenError: an admin trying to delete their own account.
            ConflictError: the user still owns submissions.
        """
        user = self.get_user(session, user_id)
        if user.id == caller.user_id:
            raise ForbiddenError("Cannot delete your own account")
        if self.repo.owns_submissions(session, user.id):
            raise ConflictError("User still owns submissions")
        self.repo.delete(session, user)

    def get_stats(self, session: Session) -> UserStats:
        total = self.repo.count(session)
        admins = self.repo.count(session, role="admin")
        return UserStats(
            total_users=total,
            total_admins=admins,
            active_users=self.repo.count(session, is_active=True),
            regular_users=total - admins,
        )
