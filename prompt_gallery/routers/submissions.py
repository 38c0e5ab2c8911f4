# prompt_gallery/routers/submissions.py
import uuid

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile, status
from pydantic import ValidationError
from sqlmodel import Session

from prompt_gallery.core.auth import get_admin_caller, get_caller
from prompt_gallery.core.errors import BadRequestError
from prompt_gallery.core.permissions import Caller
from prompt_gallery.database import get_session
from prompt_gallery.dependencies import moderation_service_dependency
from prompt_gallery.schemas.otp import MessageRead
from prompt_gallery.schemas.submission import (
    RejectRequest,
    SubmissionCreate,
    SubmissionStatus,
    SubmissionUpdate,
)
from prompt_gallery.services.media_kinds import MEDIA_KINDS, MediaKind
from prompt_gallery.services.moderation_service import ModerationService


def parse_tag_ids(raw: str | None) -> list[uuid.UUID]:
    """'id1, id2,' -> [UUID(id1), UUID(id2)]"""
    if not raw:
        return []
    tag_ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            tag_ids.append(uuid.UUID(part))
        except ValueError:
            raise BadRequestError(f"Invalid tag id: {part}")
    return tag_ids


def _validation_message(e: ValidationError) -> str:
    first = e.errors()[0]
    field = ".".join(str(p) for p in first["loc"])
    return f"{field}: {first['msg']}" if field else first["msg"]


def build_submission_router(kind: MediaKind) -> APIRouter:
    """
    Routes for one media kind:

      public: GET /{path}, GET /{path}/{id}
      owner:  POST /{path}/upload, PATCH /{path}/{id}, DELETE /{path}/{id}
      admin:  PUT /admin/{path}/{id}/approve|reject|publish|unpublish
    """
    router = APIRouter(tags=[f"{kind.label} Prompts"])
    get_service = moderation_service_dependency(kind)
    read_model = kind.read_model

    # -------- Public endpoints --------

    @router.get(f"/{kind.path}", response_model=list[read_model])
    def list_submissions(
        session: Session = Depends(get_session),
        service: ModerationService = Depends(get_service),
        status: SubmissionStatus | None = None,
        user_id: uuid.UUID | None = None,
        is_featured: bool | None = None,
        skip: int = 0,
        limit: int = 50,
    ):
        return service.list(
            session,
            status=status,
            user_id=user_id,
            is_featured=is_featured,
            skip=skip,
            limit=limit,
        )

    @router.get(f"/{kind.path}/{{submission_id}}", response_model=read_model)
    def get_submission(
        submission_id: uuid.UUID,
        session: Session = Depends(get_session),
        service: ModerationService = Depends(get_service),
    ):
        return service.get(session, submission_id)

    # -------- Owner endpoints --------

    @router.post(
        f"/{kind.path}/upload",
        response_model=read_model,
        status_code=status.HTTP_201_CREATED,
    )
    def upload_submission(
        file: UploadFile = File(...),
        project_title: str = Form(...),
        prompt: str = Form(...),
        creator_credit: str = Form(...),
        technical_notes: str | None = Form(None),
        model_or_tool: str | None = Form(None),
        tags: str | None = Form(None),
        session: Session = Depends(get_session),
        caller: Caller = Depends(get_caller),
        service: ModerationService = Depends(get_service),
    ):
        """
        Upload a file with its prompt details. The new submission starts
        as `pending` and unpublished.

        `tags` is a comma-separated list of tag ids.
        """
        try:
            payload = SubmissionCreate(
                project_title=project_title,
                prompt=prompt,
                creator_credit=creator_credit,
                technical_notes=technical_notes,
                model_or_tool=model_or_tool,
                tag_ids=parse_tag_ids(tags),
            )
        except ValidationError as e:
            raise BadRequestError(_validation_message(e))

        file_bytes = file.file.read()
        return service.create(
            session,
            caller,
            payload,
            file_bytes=file_bytes,
            filename=file.filename,
            content_type=file.content_type,
        )

    @router.patch(f"/{kind.path}/{{submission_id}}", response_model=read_model)
    def update_submission(
        submission_id: uuid.UUID,
        payload: SubmissionUpdate,
        session: Session = Depends(get_session),
        caller: Caller = Depends(get_caller),
        service: ModerationService = Depends(get_service),
    ):
        return service.update(session, caller, submission_id, payload)

    @router.delete(f"/{kind.path}/{{submission_id}}", response_model=MessageRead)
    def delete_submission(
        submission_id: uuid.UUID,
        session: Session = Depends(get_session),
        caller: Caller = Depends(get_caller),
        service: ModerationService = Depends(get_service),
    ):
        service.delete(session, caller, submission_id)
        return {"message": f"{kind.label} prompt deleted successfully"}

    # -------- Admin moderation --------

    @router.put(f"/admin/{kind.path}/{{submission_id}}/approve", response_model=read_model)
    def approve_submission(
        submission_id: uuid.UUID,
        session: Session = Depends(get_session),
        caller: Caller = Depends(get_admin_caller),
        service: ModerationService = Depends(get_service),
    ):
        return service.approve(session, caller, submission_id)

    @router.put(f"/admin/{kind.path}/{{submission_id}}/reject", response_model=read_model)
    def reject_submission(
        submission_id: uuid.UUID,
        payload: RejectRequest | None = Body(None),
        session: Session = Depends(get_session),
        caller: Caller = Depends(get_admin_caller),
        service: ModerationService = Depends(get_service),
    ):
        reason = payload.reason if payload else None
        return service.reject(session, caller, submission_id, reason=reason)

    @router.put(f"/admin/{kind.path}/{{submission_id}}/publish", response_model=read_model)
    def publish_submission(
        submission_id: uuid.UUID,
        session: Session = Depends(get_session),
        caller: Caller = Depends(get_admin_caller),
        service: ModerationService = Depends(get_service),
    ):
        """Only approved submissions can be published."""
        return service.publish(session, caller, submission_id)

    @router.put(f"/admin/{kind.path}/{{submission_id}}/unpublish", response_model=read_model)
    def unpublish_submission(
        submission_id: uuid.UUID,
        session: Session = Depends(get_session),
        caller: Caller = Depends(get_admin_caller),
        service: ModerationService = Depends(get_service),
    ):
        return service.unpublish(session, caller, submission_id)

    return router


routers = [build_submission_router(kind) for kind in MEDIA_KINDS.values()]
