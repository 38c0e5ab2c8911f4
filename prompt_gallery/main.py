# prompt_gallery/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from prompt_gallery.core.config import Settings, get_settings
from prompt_gallery.core.email_client import SmtpEmailSender
from prompt_gallery.core.errors import AppError
from prompt_gallery.core.security import CredentialIssuer
from prompt_gallery.core.storage import SupabaseBucket
from prompt_gallery.core.supabase_client import create_storage_client
from prompt_gallery.database import build_engine, create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from prompt_gallery.models import user as _user_models  # noqa: F401
from prompt_gallery.models import otp as _otp_models  # noqa: F401
from prompt_gallery.models import tag as _tag_models  # noqa: F401
from prompt_gallery.models import submission as _submission_models  # noqa: F401

# Routers
from prompt_gallery.routers.auth import router as auth_router
from prompt_gallery.routers.users import router as users_router
from prompt_gallery.routers.tags import router as tags_router
from prompt_gallery.routers.submissions import routers as submission_routers

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


def build_stores(settings: Settings) -> dict[str, SupabaseBucket]:
    """
    One bucket adapter per media kind.

    If the Supabase client cannot be created the app still starts; the
    adapters then fail each storage call with a 502.
    """
    client = None
    try:
        client = create_storage_client(settings)
    except Exception as e:
        logger.warning(f"Storage unavailable, uploads will fail: {e}")

    return {
        "image": SupabaseBucket(client, settings.STORAGE_BUCKET_IMAGE, "images"),
        "gif": SupabaseBucket(client, settings.STORAGE_BUCKET_GIF, "gifs"),
        "video": SupabaseBucket(client, settings.STORAGE_BUCKET_VIDEO, "videos"),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables(app.state.engine)
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


def create_app(
    settings: Settings | None = None,
    *,
    engine: Engine | None = None,
    credentials: CredentialIssuer | None = None,
    email_sender: SmtpEmailSender | None = None,
    stores: dict[str, SupabaseBucket] | None = None,
) -> FastAPI:
    """
    Build the API.

    Every collaborator defaults to the one described by `settings`; tests
    pass their own engine, email sender and stores.

    Run with:
        uvicorn prompt_gallery.main:create_app --factory
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine or build_engine(settings.DATABASE_URL)
    app.state.credentials = credentials or CredentialIssuer.from_settings(settings)
    app.state.email_sender = email_sender or SmtpEmailSender.from_settings(settings)
    app.state.stores = stores if stores is not None else build_stores(settings)

    if not app.state.email_sender.is_configured:
        logger.warning("SMTP is not configured, OTP emails will fail")

    # --- CORS configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    # Versioned API prefix, e.g. /api/v1
    app.include_router(auth_router, prefix=settings.API_V1_STR)
    app.include_router(users_router, prefix=settings.API_V1_STR)
    app.include_router(tags_router, prefix=settings.API_V1_STR)
    for router in submission_routers:
        app.include_router(router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "prompt-gallery-backend"}

    return app
