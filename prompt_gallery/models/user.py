# prompt_gallery/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """
    Account record for the gallery.

    Identity:
      - username and email are both unique; compared exactly as stored.

    Role:
      - "user" | "admin"
      - anonymous visitors are represented by the absence of a token.

    password_hash is never serialized; read schemas do not declare it.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    username: str = Field(
        max_length=100,
        unique=True,
        index=True,
    )

    email: str = Field(
        max_length=255,
        unique=True,
        index=True,
    )

    password_hash: str = Field(max_length=255)

    full_name: str | None = Field(default=None, max_length=255)

    # Application role
    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    profile_picture_url: str | None = Field(default=None, max_length=500)
    bio: str | None = None
    # JSON array of interest ids, kept opaque on the server
    interests: str | None = None

    total_creations: int = Field(default=0)
    total_likes: int = Field(default=0)
    trending_score: int = Field(default=0)
    community_rank: int | None = None

    is_verified: bool = Field(default=False)
    is_active: bool = Field(default=True, index=True)
    email_verified: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=utcnow,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(default_factory=utcnow)
    last_login: datetime | None = None
