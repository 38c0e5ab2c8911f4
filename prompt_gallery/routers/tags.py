# prompt_gallery/routers/tags.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from prompt_gallery.core.auth import require_admin
from prompt_gallery.database import get_session
from prompt_gallery.dependencies import get_tag_service
from prompt_gallery.schemas.otp import MessageRead
from prompt_gallery.schemas.tag import TagCategory, TagCreate, TagRead, TagStats, TagUpdate
from prompt_gallery.services.tag_service import TagService

router = APIRouter(tags=["Tags"])


# -------- Public endpoints --------


@router.get("/tags", response_model=list[TagRead])
def list_tags(
    session: Session = Depends(get_session),
    service: TagService = Depends(get_tag_service),
    category: TagCategory | None = None,
    is_active: bool | None = None,
):
    """
    List tags, most used first (ties broken by name).
    """
    return service.list_tags(session, category=category, is_active=is_active)


@router.get("/tags/search", response_model=list[TagRead])
def search_tags(
    session: Session = Depends(get_session),
    service: TagService = Depends(get_tag_service),
    q: str | None = None,
    limit: int = 10,
):
    """
    Substring search on tag names. `q` is required.
    """
    return service.search_tags(session, q, limit=limit)


@router.get("/tags/stats", response_model=TagStats)
def tag_stats(
    session: Session = Depends(get_session),
    service: TagService = Depends(get_tag_service),
):
    return service.get_stats(session)


@router.get("/tags/{tag_id}", response_model=TagRead)
def get_tag(
    tag_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: TagService = Depends(get_tag_service),
):
    return service.get_tag(session, tag_id)


# -------- Admin endpoints --------


@router.post(
    "/admin/tags",
    response_model=TagRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_tag(
    payload: TagCreate,
    session: Session = Depends(get_session),
    service: TagService = Depends(get_tag_service),
):
    """
    Create a new tag (admin only). 409 on duplicate name.
    """
    return service.create_tag(session, payload)


@router.put(
    "/admin/tags/{tag_id}",
    response_model=TagRead,
    dependencies=[Depends(require_admin)],
)
def update_tag(
    tag_id: uuid.UUID,
    payload: TagUpdate,
    session: Session = Depends(get_session),
    service: TagService = Depends(get_tag_service),
):
    return service.update_tag(session, tag_id, payload)


@router.delete(
    "/admin/tags/{tag_id}",
    response_model=MessageRead,
    dependencies=[Depends(require_admin)],
)
def delete_tag(
    tag_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: TagService = Depends(get_tag_service),
):
    """
    Delete a tag (admin only).

    Tags still attached to submissions are detached or refused depending
    on TAG_DELETE_POLICY.
    """
    service.delete_tag(session, tag_id)
    return {"message": "Tag deleted successfully"}
