# prompt_gallery/models/otp.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

from prompt_gallery.models.user import utcnow


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OTP(SQLModel, table=True):
    """
    One-time code proving control of an email address.

    Lifecycle per (email, purpose):
      issued (verified=False) -> verified (verified=True) -> deleted on use.

    Expiry is never swept; an expired row is rejected when looked up and
    lingers until a newer code for the same pair replaces it.

    Integer id so "most recent" has a stable tie-break when two rows share
    a created_at.
    """

    __tablename__ = "otps"

    id: int | None = Field(default=None, primary_key=True)

    email: str = Field(max_length=255, index=True)

    code: str = Field(max_length=6)

    purpose: str = Field(
        max_length=20,
        description="signup | forgot_password",
    )

    expires_at: datetime

    verified: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow)

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return as_utc(now) > as_utc(self.expires_at)
