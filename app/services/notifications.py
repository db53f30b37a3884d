"""Password reset emails over SMTP."""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

RESET_EMAIL_SUBJECT = "Password Reset Request"


class NotificationError(Exception):
    """Raised when a reset email cannot be sent (SMTP not configured or transport failure)."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ResetLinkSender:
    """Builds the frontend reset link for a token and emails it to the user."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def build_reset_link(self, token: str) -> str:
        return f"{self.settings.FRONTEND_BASE_URL}/reset-password/{token}"

    def _build_message(self, to_email: str, token: str) -> MIMEMultipart:
        link = self.build_reset_link(token)
        minutes = self.settings.RESET_TOKEN_EXPIRE_MINUTES
        html_body = (
            "<p>You requested a password reset.</p>"
            f'<p>Click <a href="{link}">here</a> to reset your password.</p>'
            f"<p>This link will expire in {minutes} minutes.</p>"
        )
        text_body = (
            "You requested a password reset.\n"
            f"Open this link to reset your password: {link}\n"
            f"This link will expire in {minutes} minutes.\n"
        )
        msg = MIMEMultipart("alternative")
        msg["Subject"] = RESET_EMAIL_SUBJECT
        msg["From"] = f'"Password Reset" <{self.settings.SMTP_FROM}>'
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def send_reset_link(self, email: str, token: str) -> None:
        """
        Send one reset email. Delivery is at most once: failures raise
        NotificationError and are not retried.
        """
        s = self.settings
        if not s.smtp_configured:
            raise NotificationError(
                "Email is not configured; set SMTP_HOST, SMTP_USER, SMTP_PASSWORD and SMTP_FROM."
            )
        msg = self._build_message(email, token)
        password = s.SMTP_PASSWORD.get_secret_value()
        context = ssl.create_default_context()
        try:
            if s.SMTP_PORT == 465:
                with smtplib.SMTP_SSL(
                    s.SMTP_HOST, s.SMTP_PORT, context=context, timeout=s.SMTP_TIMEOUT_SEC
                ) as server:
                    server.login(s.SMTP_USER, password)
                    server.sendmail(s.SMTP_FROM, [email], msg.as_string())
            else:
                with smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=s.SMTP_TIMEOUT_SEC) as server:
                    server.ehlo()
                    server.starttls(context=context)
                    server.login(s.SMTP_USER, password)
                    server.sendmail(s.SMTP_FROM, [email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Reset email send failed",
                extra={"smtp_host": s.SMTP_HOST, "reason": str(e)[:200]},
            )
            raise NotificationError("Failed to send reset email") from e
        logger.info("Reset email sent", extra={"smtp_host": s.SMTP_HOST})


def get_reset_link_sender() -> ResetLinkSender:
    """Dependency: SMTP reset link sender bound to current settings."""
    return ResetLinkSender(get_settings())
