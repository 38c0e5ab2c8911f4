# prompt_gallery/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (HS256 signing secret for access tokens)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file)
      - SUPABASE_URL + SUPABASE_SERVICE_ROLE_KEY (media storage)
      - SMTP_* (OTP delivery)

    Missing storage / SMTP credentials do not stop the app from starting;
    uploads and OTP sends fail at call time instead.
    """

    PROJECT_NAME: str = "Prompt Gallery API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = "sqlite:///./prompt_gallery.db"

    # Access tokens
    JWT_SECRET: str
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60

    # One-time passwords
    OTP_TTL_MINUTES: int = 10

    # Supabase Storage
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET_IMAGE: str = "images"
    STORAGE_BUCKET_GIF: str = "gifs"
    STORAGE_BUCKET_VIDEO: str = "videos"
    # 7 days
    SIGNED_URL_TTL_SECONDS: int = 7 * 24 * 60 * 60
    MAX_UPLOAD_SIZE: int = 100 * 1024 * 1024

    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # SMTP
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_FROM_EMAIL: str | None = None
    SMTP_FROM_NAME: str = "Prompt Gallery"
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False

    # Moderation / catalog policies
    TAG_DELETE_POLICY: Literal["detach", "block"] = "detach"
    RECORD_VERIFICATION_FOR_ALL_KINDS: bool = False
    UNPUBLISH_ON_REJECT: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
