# prompt_gallery/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from prompt_gallery.core.auth import get_admin_caller, get_caller, require_admin
from prompt_gallery.core.permissions import Caller
from prompt_gallery.database import get_session
from prompt_gallery.dependencies import get_user_service
from prompt_gallery.schemas.otp import MessageRead
from prompt_gallery.schemas.user import (
    InterestsUpdate,
    ProfileUpdate,
    Role,
    UserRead,
    UserStats,
    UserStatusUpdate,
)
from prompt_gallery.services.user_service import UserService

router = APIRouter(tags=["Users"])


# -------- Self profile --------


@router.get("/profile", response_model=UserRead)
def read_profile(
    session: Session = Depends(get_session),
    caller: Caller = Depends(get_caller),
    service: UserService = Depends(get_user_service),
):
    """
    Return the authenticated user's profile.
    """
    return service.get_me(session, caller)


@router.patch("/profile", response_model=UserRead)
def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    caller: Caller = Depends(get_caller),
    service: UserService = Depends(get_user_service),
):
    """
    Update the authenticated user's profile (partial update).

    Editable: interests, full_name, bio.
    """
    return service.update_me(session, caller, payload)


@router.put("/profile/interests", response_model=MessageRead)
def update_interests(
    payload: InterestsUpdate,
    session: Session = Depends(get_session),
    caller: Caller = Depends(get_caller),
    service: UserService = Depends(get_user_service),
):
    service.update_me(session, caller, ProfileUpdate(interests=payload.interests))
    return {"message": "Interests updated successfully"}


# -------- Admin endpoints --------


@router.get(
    "/admin/users/stats",
    response_model=UserStats,
    dependencies=[Depends(require_admin)],
)
def user_stats(
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
):
    return service.get_stats(session)


@router.get(
    "/admin/users",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
    role: Role | None = None,
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List all users (admin only), newest first.

    Pagination via skip/limit; optional role / is_active filters.
    """
    return service.list_users(session, skip=skip, limit=limit, role=role, is_active=is_active)


@router.get(
    "/admin/users/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
):
    """
    Get a specific user by id (admin only).
    """
    return service.get_user(session, user_id)


@router.put(
    "/admin/users/{user_id}/status",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def change_status(
    user_id: uuid.UUID,
    payload: UserStatusUpdate,
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
):
    """
    Activate or deactivate a user (admin only).
    """
    return service.update_status(session, user_id, payload)


@router.delete("/admin/users/{user_id}", response_model=MessageRead)
def delete_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    caller: Caller = Depends(get_admin_caller),
    service: UserService = Depends(get_user_service),
):
    """
    Delete a user (admin only). Admins cannot delete themselves.
    """
    service.delete_user(session, caller, user_id)
    return {"message": "User deleted successfully"}
