from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from ..config import get_settings

logger = logging.getLogger(__name__)


def send_email(recipient: str, subject: str, body: str) -> None:
    settings = get_settings()
    if not settings.smtp_host or not settings.smtp_from:
        logger.warning("SMTP not configured; printing email to log.")
        logger.info("Email to %s | %s\n%s", recipient, subject, body)
        return

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = formataddr(
        (settings.smtp_from_name or settings.app_name, settings.smtp_from)
    )
    message["To"] = recipient
    message.set_content(body)

    try:
        smtp_class = smtplib.SMTP_SSL if settings.smtp_use_ssl else smtplib.SMTP
        with smtp_class(settings.smtp_host, settings.smtp_port, timeout=15) as smtp:
            if settings.smtp_use_tls and not settings.smtp_use_ssl:
                smtp.starttls()
            if settings.smtp_username:
                smtp.login(settings.smtp_username, settings.smtp_password or "")
            smtp.send_message(message)
    except Exception as exc:  # pragma: no cover - network failures
        logger.error("Failed to send email to %s: %s", recipient, exc)
        raise


def render_notification_email(title: str, message: str, recipient_name: str | None) -> str:
    app_name = get_settings().app_name
    return (
        f"{title}\n\n"
        f"Hi {recipient_name or 'there'},\n\n"
        f"{message}\n\n"
        f"Thank you for using {app_name}!\n\n"
        f"This is an automated message from {app_name}. Please do not reply to this email."
    )
