# prompt_gallery/services/moderation_service.py
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from prompt_gallery.core.errors import (
    BadRequestError,
    NotFoundError,
    PayloadTooLargeError,
    UpstreamServiceError,
)
from prompt_gallery.core.permissions import Caller, ensure_admin, ensure_owner_or_admin
from prompt_gallery.core.storage import SupabaseBucket
from prompt_gallery.models.submission import SubmissionBase
from prompt_gallery.models.user import utcnow
from prompt_gallery.repositories.submission_repo import SubmissionRepository
from prompt_gallery.repositories.tag_repo import TagRepository
from prompt_gallery.schemas.submission import SubmissionCreate, SubmissionRead, SubmissionUpdate
from prompt_gallery.schemas.tag import TagRead
from prompt_gallery.services.media_kinds import MediaKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024
DEFAULT_SIGNED_URL_TTL = 7 * 24 * 60 * 60


class ModerationService:
    """
    Submission lifecycle for one media kind.

    States:
        pending -> approved | rejected
        approved -> published (is_published=True) -> approved (unpublished)

    Rules:
      - create: upload first, then insert; a failed insert deletes the
        uploaded object once (best-effort) and re-raises
      - approve / reject / publish / unpublish: admin only
      - publish: only while status == approved
      - update / delete: admin or the owning user
      - delete: storage object first (best-effort), then the row
      - reads on private buckets swap media_url for a presigned URL, and
        fall back to the stored URL when signing fails
    """

    def __init__(
        self,
        kind: MediaKind,
        repo: SubmissionRepository,
        tag_repo: TagRepository,
        store: SupabaseBucket,
        *,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        signed_url_ttl: int = DEFAULT_SIGNED_URL_TTL,
        record_verification: bool | None = None,
        unpublish_on_reject: bool = False,
    ):
        self.kind = kind
        self.repo = repo
        self.tag_repo = tag_repo
        self.store = store
        self.max_upload_bytes = max_upload_bytes
        self.signed_url_ttl = signed_url_ttl
        self.record_verification = (
            kind.records_verification if record_verification is None else record_verification
        )
        self.unpublish_on_reject = unpublish_on_reject

    # ----- Helpers -----

    def _get_or_404(self, session: Session, submission_id: uuid.UUID) -> SubmissionBase:
        item = self.repo.get_by_id(session, submission_id)
        if not item:
            raise NotFoundError(f"{self.kind.label} prompt not found")
        return item

    def _validate_upload(self, file_bytes: bytes, content_type: str | None) -> None:
        if not content_type or not content_type.startswith(self.kind.content_type_prefix):
            raise BadRequestError(
                f"Unsupported file type for {self.kind.label}. "
                f"Expected {self.kind.content_type_prefix}*"
            )
        if not file_bytes:
            raise BadRequestError("Uploaded file is empty")
        if len(file_bytes) > self.max_upload_bytes:
            raise PayloadTooLargeError(
                f"File too large (max {self.max_upload_bytes // (1024 * 1024)}MB)"
            )

    def _to_read(self, item: SubmissionBase) -> SubmissionRead:
        data = item.model_dump()
        data["tags"] = [TagRead.model_validate(tag) for tag in item.tags]

        if self.kind.signs_urls and item.media_url:
            try:
                data["media_url"] = self.store.presign_get(item.media_url, self.signed_url_ttl)
            except UpstreamServiceError as e:
                logger.warning(f"Signed URL failed for {self.kind.name} {item.id}: {e}")

        return self.kind.read_model.model_validate(data)

    def _save(self, session: Session, item: SubmissionBase) -> SubmissionRead:
        item.updated_at = utcnow()
        item = self.repo.update(session, item)
        return self._to_read(item)

    def _discard_upload(self, url: str) -> None:
        """Compensating delete after a failed insert. Logged, never raised."""
        try:
            self.store.delete(url)
            logger.info(f"Removed orphaned {self.kind.name} upload {url}")
        except UpstreamServiceError as e:
            logger.error(f"Could not remove orphaned {self.kind.name} upload {url}: {e}")

    # ----- Public reads -----

    def list(
        self,
        session: Session,
        status: str | None = None,
        user_id: uuid.UUID | None = None,
        is_featured: bool | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[SubmissionRead]:
        items = self.repo.list(
            session,
            status=status,
            user_id=user_id,
            is_featured=is_featured,
            skip=skip,
            limit=limit,
        )
        return [self._to_read(item) for item in items]

    def get(self, session: Session, submission_id: uuid.UUID) -> SubmissionRead:
        return self._to_read(self._get_or_404(session, submission_id))

    # ----- Owner operations -----

    def create(
        self,
        session: Session,
        caller: Caller,
        payload: SubmissionCreate,
        file_bytes: bytes,
        filename: str | None,
        content_type: str | None,
    ) -> SubmissionRead:
        """
        Upload the file, then persist a pending submission.

        Raises:
            BadRequestError: wrong content type or empty file.
            PayloadTooLargeError: file over the size limit.
            UpstreamServiceError: the upload itself failed.
            SQLAlchemyError: the insert failed (upload already rolled back).
        """
        self._validate_upload(file_bytes, content_type)
        tags = self.tag_repo.get_many(session, payload.tag_ids)

        url = self.store.upload(file_bytes, filename, content_type)

        item = self.kind.model(
            user_id=caller.user_id,
            project_title=payload.project_title,
            prompt=payload.prompt,
            technical_notes=payload.technical_notes,
            model_or_tool=payload.model_or_tool,
            creator_credit=payload.creator_credit,
            media_url=url,
            media_filename=filename,
            media_size_bytes=len(file_bytes),
            status="pending",
            is_published=False,
            is_featured=False,
        )
        item.tags = tags

        try:
            self.repo.create(session, item)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception(f"Saving {self.kind.name} submission failed; removing upload")
            self._discard_upload(url)
            raise

        session.refresh(item)
        logger.info(f"{self.kind.label} submission {item.id} created by {caller.user_id}")
        return self._to_read(item)

    def update(
        self,
        session: Session,
        caller: Caller,
        submission_id: uuid.UUID,
        payload: SubmissionUpdate,
    ) -> SubmissionRead:
        item = self._get_or_404(session, submission_id)
        ensure_owner_or_admin(caller, item.user_id, "update")

        if payload.project_title is not None:
            item.project_title = payload.project_title
        if payload.prompt is not None:
            item.prompt = payload.prompt
        if payload.technical_notes is not None:
            item.technical_notes = payload.technical_notes
        if payload.model_or_tool is not None:
            item.model_or_tool = payload.model_or_tool
        if payload.creator_credit is not None:
            item.creator_credit = payload.creator_credit
        if payload.is_featured is not None and caller.is_admin:
            item.is_featured = payload.is_featured

        return self._save(session, item)

    def delete(self, session: Session, caller: Caller, submission_id: uuid.UUID) -> None:
        item = self._get_or_404(session, submission_id)
        ensure_owner_or_admin(caller, item.user_id, "delete")

        try:
            self.store.delete(item.media_url)
        except UpstreamServiceError as e:
            logger.warning(f"Storage delete failed for {self.kind.name} {item.id}: {e}")

        self.repo.delete(session, item)
        logger.info(f"{self.kind.label} submission {submission_id} deleted by {caller.user_id}")

    # ----- Admin moderation -----

    def approve(self, session: Session, caller: Caller, submission_id: uuid.UUID) -> SubmissionRead:
        """Any state -> approved (re-approving a rejected item is allowed)."""
        ensure_admin(caller)
        item = self._get_or_404(session, submission_id)

        item.status = "approved"
        if self.record_verification:
            item.verified_at = utcnow()
            item.verified_by = caller.user_id

        return self._save(session, item)

    def reject(
        self,
        session: Session,
        caller: Caller,
        submission_id: uuid.UUID,
        reason: str | None = None,
    ) -> SubmissionRead:
        """
        Any state -> rejected.

        is_published is left alone unless unpublish_on_reject is set.
        """
        ensure_admin(caller)
        item = self._get_or_404(session, submission_id)

        item.status = "rejected"
        if reason is not None:
            item.rejection_reason = reason
        if self.unpublish_on_reject:
            item.is_published = False

        return self._save(session, item)

    def publish(self, session: Session, caller: Caller, submission_id: uuid.UUID) -> SubmissionRead:
        ensure_admin(caller)
        item = self._get_or_404(session, submission_id)

        if item.status != "approved":
            raise BadRequestError("Only approved prompts can be published")

        item.is_published = True
        return self._save(session, item)

    def unpublish(self, session: Session, caller: Caller, submission_id: uuid.UUID) -> SubmissionRead:
        ensure_admin(caller)
        item = self._get_or_404(session, submission_id)

        item.is_published = False
        return self._save(session, item)
