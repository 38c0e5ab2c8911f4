# prompt_gallery/models/tag.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from prompt_gallery.models.user import utcnow


class Tag(SQLModel, table=True):
    """
    Flat taxonomy entry attached to submissions (many-to-many).

    usage_count is a denormalized counter and the primary sort key for
    listings.
    """

    __tablename__ = "tags"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        unique=True,
        index=True,
    )

    category: str = Field(
        default="Other",
        max_length=20,
        index=True,
        description="Style | Mood | Theme | Technique | Color | Other",
    )

    description: str | None = None

    usage_count: int = Field(default=0, ge=0)

    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
