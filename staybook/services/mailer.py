"""SMTP email adapter used for the registration welcome message."""

from __future__ import annotations

import html
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from staybook.core.config import Settings

WELCOME_SUBJECT = "Welcome to Staybook"


class MailerNotConfiguredError(Exception):
    """Raised when an email is requested but SMTP settings are missing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _is_smtp_configured(settings: Settings) -> bool:
    if not settings.SMTP_HOST or not settings.SMTP_HOST.strip():
        return False
    if not settings.SMTP_USER or not settings.SMTP_USER.strip():
        return False
    if settings.SMTP_PASSWORD is None or not settings.SMTP_PASSWORD.get_secret_value():
        return False
    return True


def welcome_html(fullname: str) -> str:
    name = html.escape((fullname or "").strip()) or "there"
    return (
        f"<p>Hi {name},</p>"
        "<p>Thank you for choosing Staybook! Your account is ready.</p>"
        "<p>The Staybook team</p>"
    )


def send_html_email(settings: Settings, to_email: str, subject: str, html_body: str) -> None:
    """
    Send one HTML email over SMTP (implicit TLS on 465, STARTTLS otherwise).

    Raises MailerNotConfiguredError when SMTP settings are missing and lets
    smtplib/OSError failures propagate to the caller.
    """
    if not _is_smtp_configured(settings):
        raise MailerNotConfiguredError(
            "SMTP is not configured; set SMTP_HOST, SMTP_USER, SMTP_PASSWORD."
        )
    sender = (settings.SMTP_FROM or settings.SMTP_USER or "").strip()
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    password = settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else ""
    context = ssl.create_default_context()
    if settings.SMTP_PORT == 465:
        with smtplib.SMTP_SSL(
            settings.SMTP_HOST, settings.SMTP_PORT, context=context, timeout=settings.SMTP_TIMEOUT_SEC
        ) as server:
            server.login(settings.SMTP_USER, password)
            server.sendmail(sender, [to_email], msg.as_string())
    else:
        with smtplib.SMTP(
            settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SEC
        ) as server:
            server.ehlo()
            server.starttls(context=context)
            server.login(settings.SMTP_USER, password)
            server.sendmail(sender, [to_email], msg.as_string())


def send_welcome_email(settings: Settings, to_email: str, fullname: str) -> None:
    """Send the registration welcome message."""
    send_html_email(settings, to_email, WELCOME_SUBJECT, welcome_html(fullname))
