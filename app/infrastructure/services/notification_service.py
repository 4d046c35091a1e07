"""Email notifiers: log-only sender and SMTP sender, selected from settings."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from app.application.interfaces.services import INotificationService
from app.core.config import Settings
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class LogOnlyNotificationService:
    """INotificationService implementation that logs instead of sending email.

    Use when no SMTP is configured. Always reports success.
    """

    async def send(self, to: str, subject: str, body: str) -> bool:
        """Log the notification; no actual email sent."""
        subject_preview = (subject or "")[:80]
        if not to:
            logger.info("Notify: no recipient, skipping send (subject=%r)", subject_preview)
            return False
        logger.info("Notify: would send to %s (subject=%r)", to, subject_preview)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Notify at %s", utc_now().isoformat())
        logger.debug("Notify body (first 500 chars): %s", (body or "")[:500])
        return True


class SmtpNotificationService:
    """INotificationService implementation that sends HTML email over SMTP.

    smtplib is blocking, so each send runs in a worker thread. Transport
    errors are logged and reported as False; the caller decides whether
    that is fatal.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        *,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable email client.")
        message.add_alternative(body, subtype="html")
        return message

    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(message)

    async def send(self, to: str, subject: str, body: str) -> bool:
        if not to:
            logger.warning("SMTP notify: no recipient (subject=%r)", subject[:80])
            return False
        message = self._build_message(to, subject, body)
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "SMTP notify to %s failed (subject=%r): %s",
                to,
                subject[:80],
                e,
            )
            return False
        logger.info("SMTP notify: sent to %s (subject=%r)", to, subject[:80])
        return True


def create_notification_service(settings: Settings) -> INotificationService:
    """Build the notifier for EMAIL_BACKEND ('log' or 'smtp')."""
    if settings.email_backend == "smtp":
        assert settings.smtp_host and settings.sender_email
        return SmtpNotificationService(
            settings.smtp_host,
            settings.smtp_port,
            settings.sender_email,
            username=settings.smtp_user,
            password=(
                settings.smtp_password.get_secret_value()
                if settings.smtp_password
                else None
            ),
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )
    return LogOnlyNotificationService()
