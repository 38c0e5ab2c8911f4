# prompt_gallery/dependencies.py
"""
Service wiring for routers.

Collaborators (CredentialIssuer, email sender, storage buckets, settings)
are built once in `main.create_app` and kept on `app.state`. These
dependencies assemble request-scoped services from them, so tests can
swap any collaborator by passing it to `create_app`.

Usage:

    @router.post("/send-otp")
    def send_otp(service: OTPService = Depends(get_otp_service)):
        ...
"""
from fastapi import Request

from prompt_gallery.repositories.otp_repo import OTPRepository
from prompt_gallery.repositories.submission_repo import SubmissionRepository
from prompt_gallery.repositories.tag_repo import TagRepository
from prompt_gallery.repositories.user_repo import UserRepository
from prompt_gallery.services.auth_service import AuthService
from prompt_gallery.services.media_kinds import MediaKind
from prompt_gallery.services.moderation_service import ModerationService
from prompt_gallery.services.otp_service import OTPService
from prompt_gallery.services.tag_service import TagService
from prompt_gallery.services.user_service import UserService


def get_auth_service(request: Request) -> AuthService:
    return AuthService(UserRepository(), request.app.state.credentials)


def get_otp_service(request: Request) -> OTPService:
    state = request.app.state
    return OTPService(
        OTPRepository(),
        UserRepository(),
        state.email_sender,
        state.credentials,
        ttl_minutes=state.settings.OTP_TTL_MINUTES,
    )


def get_user_service() -> UserService:
    return UserService(UserRepository())


def get_tag_service(request: Request) -> TagService:
    return TagService(TagRepository(), delete_policy=request.app.state.settings.TAG_DELETE_POLICY)


def moderation_service_dependency(kind: MediaKind):
    """
    Build a dependency returning the ModerationService for `kind`.
    """

    def get_moderation_service(request: Request) -> ModerationService:
        state = request.app.state
        settings = state.settings
        return ModerationService(
            kind,
            SubmissionRepository(kind.model),
            TagRepository(),
            state.stores[kind.name],
            max_upload_bytes=settings.MAX_UPLOAD_SIZE,
            signed_url_ttl=settings.SIGNED_URL_TTL_SECONDS,
            record_verification=(
                True if settings.RECORD_VERIFICATION_FOR_ALL_KINDS else None
            ),
            unpublish_on_reject=settings.UNPUBLISH_ON_REJECT,
        )

    return get_moderation_service
