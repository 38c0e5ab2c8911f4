# prompt_gallery/core/errors.py
"""
Domain errors raised by services.

Services never raise HTTPException directly. Each error carries the HTTP
status it maps to; `main.create_app` registers one handler for AppError
that renders `{"detail": message}` with that status.
"""


class AppError(Exception):
    """Base class for every business error."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BadRequestError(AppError):
    """
    Malformed or missing input, or a guard violation.

    Examples:
        - publishing a submission that is not approved
        - unsupported upload content type
        - empty tag search query
    """

    status_code = 400


class PayloadTooLargeError(BadRequestError):
    status_code = 413


class UnauthorizedError(AppError):
    """
    Bad credentials or an invalid / expired / unverified OTP.
    """

    status_code = 401


class ForbiddenError(AppError):
    """
    Role or ownership violation.
    """

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """
    Uniqueness violation: username, email, tag name.
    """

    status_code = 409


class UpstreamServiceError(AppError):
    """
    An external collaborator (object storage, SMTP) failed or is not
    configured.
    """

    status_code = 502
