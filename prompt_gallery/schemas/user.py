# prompt_gallery/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# App-level roles. Anonymous visitors have no token, so we don't store them.
Role = Literal["user", "admin"]


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


class UserRead(SQLModel):
    """Response schema returned to clients (no password hash)."""

    id: uuid.UUID
    username: str
    email: str
    full_name: str | None = None
    role: Role
    profile_picture_url: str | None = None
    bio: str | None = None
    interests: str | None = None
    total_creations: int = 0
    total_likes: int = 0
    trending_score: int = 0
    community_rank: int | None = None
    is_verified: bool = False
    is_active: bool = True
    email_verified: bool = False
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None = None


class RegisterRequest(SQLModel):
    """
    Direct registration payload (no OTP).
    """

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str | None = Field(default=None, max_length=255)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        return _strip_required(v)


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(SQLModel):
    """Token + profile returned by register, login and OTP signup."""

    token: str
    user: UserRead


class ProfileUpdate(SQLModel):
    """
    Partial profile update for authenticated users.

    `interests` is an opaque string (the client sends a JSON array).
    """

    model_config = ConfigDict(extra="forbid")

    interests: str | None = None
    full_name: str | None = Field(default=None, max_length=255)
    bio: str | None = None


class InterestsUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    interests: str

    @field_validator("interests")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class UserStatusUpdate(SQLModel):
    """
    Admin-only activation toggle.
    """

    model_config = ConfigDict(extra="forbid")
    is_active: bool


class UserStats(SQLModel):
    total_users: int
    total_admins: int
    active_users: int
    regular_users: int
