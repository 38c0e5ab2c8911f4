# prompt_gallery/schemas/submission.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from prompt_gallery.schemas.tag import TagRead

SubmissionStatus = Literal["pending", "approved", "rejected"]


class SubmissionCreate(SQLModel):
    """
    Descriptive fields sent alongside an upload (multipart form).

    tag_ids: unknown ids are ignored when the submission is created.
    """

    model_config = ConfigDict(extra="forbid")

    project_title: str = Field(max_length=100)
    prompt: str
    creator_credit: str = Field(max_length=255)
    technical_notes: str | None = None
    model_or_tool: str | None = Field(default=None, max_length=255)
    tag_ids: list[uuid.UUID] = []

    @field_validator("project_title", "prompt", "creator_credit")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class SubmissionUpdate(SQLModel):
    """
    Partial update payload (admin or owner).

    is_featured is silently ignored unless the caller is an admin.
    """

    model_config = ConfigDict(extra="forbid")

    project_title: str | None = Field(default=None, max_length=100)
    prompt: str | None = None
    technical_notes: str | None = None
    model_or_tool: str | None = Field(default=None, max_length=255)
    creator_credit: str | None = Field(default=None, max_length=255)
    is_featured: bool | None = None

    @field_validator("project_title", "prompt", "creator_credit")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class RejectRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    reason: str | None = None


class SubmissionRead(SQLModel):
    """
    Submission representation for clients.

    media_url is a presigned URL for private buckets (GIF / video) and the
    stored public URL otherwise.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    project_title: str
    prompt: str
    technical_notes: str | None = None
    model_or_tool: str | None = None
    creator_credit: str
    media_url: str
    media_filename: str | None = None
    media_size_bytes: int | None = None
    width: int | None = None
    height: int | None = None
    status: SubmissionStatus
    verified_by: uuid.UUID | None = None
    verified_at: datetime | None = None
    rejection_reason: str | None = None
    likes_count: int = 0
    views_count: int = 0
    downloads_count: int = 0
    is_featured: bool = False
    is_published: bool = False
    created_at: datetime
    updated_at: datetime
    tags: list[TagRead] = []


class ImageSubmissionRead(SubmissionRead):
    pass


class GifSubmissionRead(SubmissionRead):
    duration_seconds: float | None = None
    frame_count: int | None = None


class VideoSubmissionRead(SubmissionRead):
    duration_seconds: float | None = None
    video_format: str | None = None
    fps: int | None = None
