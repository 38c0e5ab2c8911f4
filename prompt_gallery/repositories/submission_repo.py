# prompt_gallery/repositories/submission_repo.py
import uuid
from typing import Generic, TypeVar

from sqlmodel import Session, select

from prompt_gallery.models.submission import SubmissionBase

SubmissionT = TypeVar("SubmissionT", bound=SubmissionBase)


class SubmissionRepository(Generic[SubmissionT]):
    """
    Data access layer for one submission table.

    One instance per media kind:

        SubmissionRepository(ImageSubmission)
        SubmissionRepository(GifSubmission)

    NOTE:
      - create() only flushes; ModerationService commits so it can roll
        back and clean up storage when the insert fails.
    """

    def __init__(self, model: type[SubmissionT]):
        self.model = model

    def get_by_id(self, session: Session, submission_id: uuid.UUID) -> SubmissionT | None:
        return session.get(self.model, submission_id)

    def list(
        self,
        session: Session,
        status: str | None = None,
        user_id: uuid.UUID | None = None,
        is_featured: bool | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[SubmissionT]:
        model = self.model
        stmt = select(model)
        if status is not None:
            stmt = stmt.where(model.status == status)
        if user_id is not None:
            stmt = stmt.where(model.user_id == user_id)
        if is_featured is not None:
            stmt = stmt.where(model.is_featured == is_featured)
        stmt = stmt.order_by(model.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, submission: SubmissionT) -> SubmissionT:
        session.add(submission)
        session.flush()
        return submission

    def update(self, session: Session, submission: SubmissionT) -> SubmissionT:
        session.add(submission)
        session.commit()
        session.refresh(submission)
        return submission

    def delete(self, session: Session, submission: SubmissionT) -> None:
        session.delete(submission)
        session.commit()
