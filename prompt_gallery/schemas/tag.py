# prompt_gallery/schemas/tag.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

TagCategory = Literal["Style", "Mood", "Theme", "Technique", "Color", "Other"]


class TagRead(SQLModel):
    id: uuid.UUID
    name: str
    category: TagCategory
    description: str | None = None
    usage_count: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class TagCreate(SQLModel):
    """
    Payload for creating a tag (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    category: TagCategory
    description: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class TagUpdate(SQLModel):
    """
    Partial update payload for tags.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    category: TagCategory | None = None
    description: str | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class CategoryCount(SQLModel):
    category: str
    count: int


class TagStats(SQLModel):
    total_tags: int
    category_stats: list[CategoryCount]
