# prompt_gallery/core/email_client.py
"""
Email delivery for Prompt Gallery.

Responsibilities:
  - Hold SMTP configuration (taken from Settings, not read at import time).
  - Provide a single send(...) method for services to use.
  - Support both TLS (STARTTLS) and SSL connections.

Typical .env configuration (Gmail example with App Password):

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=gallery@example.com
    SMTP_PASSWORD=<app password>
    SMTP_FROM_EMAIL=gallery@example.com
    SMTP_FROM_NAME=Prompt Gallery
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true
"""

import logging
import smtplib
from email.message import EmailMessage

from prompt_gallery.core.config import Settings

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    SMTP-backed Email Sender.

    Built once in `main.create_app` from Settings. A sender with missing
    credentials can still be constructed; `send` raises RuntimeError at
    call time so the rest of the app keeps working.
    """

    def __init__(
        self,
        host: str | None,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        from_email: str | None = None,
        from_name: str = "Prompt Gallery",
        use_tls: bool = True,
        use_ssl: bool = False,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        # Fallback: if FROM_EMAIL is not set, default to username
        self.from_email = from_email or username or ""
        self.from_name = from_name
        self.use_tls = use_tls
        self.use_ssl = use_ssl

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpEmailSender":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            from_email=settings.SMTP_FROM_EMAIL,
            from_name=settings.SMTP_FROM_NAME,
            use_tls=settings.SMTP_USE_TLS,
            use_ssl=settings.SMTP_USE_SSL,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.username and self.password)

    def _create_smtp_client(self) -> smtplib.SMTP:
        """
        Create and return an SMTP client configured for TLS or SSL.

        Priority:
          - If use_ssl is True → smtplib.SMTP_SSL (e.g., Gmail on 465).
          - Else → smtplib.SMTP + optional STARTTLS if use_tls is True.
        """
        if self.use_ssl:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self.host, self.port, timeout=30)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=30)
            if self.use_tls:
                server.starttls()

        return server

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> None:
        """
        Send an email to a single recipient.

        Parameters
        ----------
        to_email:
            Recipient email address.
        subject:
            Email subject line.
        html_body:
            HTML body, sent as an alternative part.
        text_body:
            Optional plain-text fallback. Defaults to a short notice.

        Raises
        ------
        RuntimeError:
            If required SMTP configuration is missing.
        smtplib.SMTPException:
            If the underlying SMTP connection or send fails.
        """
        if not self.is_configured:
            raise RuntimeError(
                "SMTP is not configured correctly. "
                "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
            )

        msg = EmailMessage()
        msg["From"] = (
            f"{self.from_name} <{self.from_email}>"
            if self.from_email
            else self.username
        )
        msg["To"] = to_email
        msg["Subject"] = subject

        msg.set_content(text_body or "Please view this message in an HTML-capable client.")
        msg.add_alternative(html_body, subtype="html")

        server = self._create_smtp_client()
        try:
            server.login(self.username, self.password)  # type: ignore[arg-type]
            server.send_message(msg)
        finally:
            try:
                server.quit()
            except smtplib.SMTPException:
                # Connection is being torn down anyway.
                logger.debug("SMTP quit failed", exc_info=True)


# ---------------------------------------------------------------------------
# OTP message bodies
# ---------------------------------------------------------------------------

OTP_SUBJECTS: dict[str, str] = {
    "signup": "Verify Your Email - Prompt Gallery",
    "forgot_password": "Reset Your Password - Prompt Gallery",
}

_OTP_INTROS: dict[str, str] = {
    "signup": "Thank you for signing up! Please use the following code to verify your email address:",
    "forgot_password": "We received a request to reset your password. Please use the following code to proceed:",
}


def build_otp_email(code: str, purpose: str, ttl_minutes: int) -> tuple[str, str, str]:
    """
    Return (subject, html_body, text_body) for an OTP message.

    Raises:
        ValueError: for an unknown purpose.
    """
    if purpose not in OTP_SUBJECTS:
        raise ValueError(f"Invalid email purpose: {purpose}")

    intro = _OTP_INTROS[purpose]
    html_body = (
        f"<p>{intro}</p>"
        f'<p style="font-size:28px;font-weight:bold;letter-spacing:6px">{code}</p>'
        f"<p><strong>This code will expire in {ttl_minutes} minutes.</strong></p>"
        "<p>If you didn't request this, please ignore this email.</p>"
    )
    text_body = f"{intro}\n\n{code}\n\nThis code will expire in {ttl_minutes} minutes."
    return OTP_SUBJECTS[purpose], html_body, text_body
