# prompt_gallery/models/submission.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field, Relationship

from prompt_gallery.models.tag import Tag
from prompt_gallery.models.user import utcnow


# ---------------------------------------------------------------------------
# Tag link tables (one per media kind)
# ---------------------------------------------------------------------------


class ImageSubmissionTagLink(SQLModel, table=True):
    __tablename__ = "image_submission_tags"

    submission_id: uuid.UUID = Field(foreign_key="image_submissions.id", primary_key=True)
    tag_id: uuid.UUID = Field(foreign_key="tags.id", primary_key=True)


class GifSubmissionTagLink(SQLModel, table=True):
    __tablename__ = "gif_submission_tags"

    submission_id: uuid.UUID = Field(foreign_key="gif_submissions.id", primary_key=True)
    tag_id: uuid.UUID = Field(foreign_key="tags.id", primary_key=True)


class VideoSubmissionTagLink(SQLModel, table=True):
    __tablename__ = "video_submission_tags"

    submission_id: uuid.UUID = Field(foreign_key="video_submissions.id", primary_key=True)
    tag_id: uuid.UUID = Field(foreign_key="tags.id", primary_key=True)


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


class SubmissionBase(SQLModel):
    """
    Columns shared by every media submission table.

    Moderation:
      - status: pending | approved | rejected
      - is_published may only be switched on while status == approved
        (enforced by ModerationService.publish).

    user_id is the owner and never changes after insert.
    """

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
        description="Owner (FK to users.id)",
    )

    project_title: str = Field(max_length=100)
    prompt: str
    technical_notes: str | None = None
    model_or_tool: str | None = Field(default=None, max_length=255)
    creator_credit: str = Field(max_length=255)

    media_url: str = Field(
        max_length=500,
        description="Stored object URL (signed on read for private buckets)",
    )
    media_filename: str | None = Field(default=None, max_length=255)
    media_size_bytes: int | None = None
    width: int | None = None
    height: int | None = None

    status: str = Field(default="pending", index=True)
    verified_by: uuid.UUID | None = None
    verified_at: datetime | None = None
    rejection_reason: str | None = None

    likes_count: int = Field(default=0)
    views_count: int = Field(default=0)
    downloads_count: int = Field(default=0)

    is_featured: bool = Field(default=False, index=True)
    is_published: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)


class ImageSubmission(SubmissionBase, table=True):
    __tablename__ = "image_submissions"

    tags: list[Tag] = Relationship(link_model=ImageSubmissionTagLink)


class GifSubmission(SubmissionBase, table=True):
    __tablename__ = "gif_submissions"

    duration_seconds: float | None = None
    frame_count: int | None = None

    tags: list[Tag] = Relationship(link_model=GifSubmissionTagLink)


class VideoSubmission(SubmissionBase, table=True):
    __tablename__ = "video_submissions"

    duration_seconds: float | None = None
    video_format: str | None = Field(default=None, max_length=50)
    fps: int | None = None

    tags: list[Tag] = Relationship(link_model=VideoSubmissionTagLink)


TAG_LINK_MODELS = (ImageSubmissionTagLink, GifSubmissionTagLink, VideoSubmissionTagLink)

SUBMISSION_MODELS = (ImageSubmission, GifSubmission, VideoSubmission)
