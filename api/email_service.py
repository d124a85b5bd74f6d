"""
Outbound email through the SendGrid v3 REST API.
"""
import logging
from datetime import datetime
from urllib.parse import urlencode

import httpx
from django.conf import settings
from django.template.loader import render_to_string

from .constants import EMAIL_TIMEOUT_SECONDS, SENDGRID_SEND_URL

logger = logging.getLogger("api")


class EmailError(Exception):
    pass


class EmailNotConfiguredError(EmailError):
    pass


class EmailDeliveryError(EmailError):
    pass


def is_configured() -> bool:
    """Check if SendGrid is properly configured"""
    return bool(settings.SENDGRID_API_KEY and settings.EMAIL_FROM)


def build_reset_url(reset_token: str) -> str:
    frontend_base = (settings.FRONTEND_URL or "").rstrip("/")
    return f"{frontend_base}/reset-password?{urlencode({'token': reset_token})}"


async def send_password_reset_email(to: str, reset_token: str, user_name: str) -> None:
    """
    Send the password-reset email.

    Raises:
        ValueError: a required argument is empty
        EmailNotConfiguredError: SENDGRID_API_KEY or EMAIL_FROM is missing
        EmailDeliveryError: SendGrid rejected the message or was unreachable
    """
    if not to or not reset_token or not user_name:
        raise ValueError("Missing required parameters")
    if not settings.SENDGRID_API_KEY:
        raise EmailNotConfiguredError("SENDGRID_API_KEY not configured")
    if not settings.EMAIL_FROM:
        raise EmailNotConfiguredError("EMAIL_FROM or EMAIL_USER not configured")

    context = {
        "brand": settings.EMAIL_BRAND_NAME,
        "user_name": user_name,
        "reset_url": build_reset_url(reset_token),
        "year": datetime.now().year,
    }
    payload = {
        "personalizations": [{"to": [{"email": to}]}],
        "from": {"email": settings.EMAIL_FROM, "name": settings.EMAIL_BRAND_NAME},
        "subject": f"Password reset - {settings.EMAIL_BRAND_NAME}",
        "content": [
            {"type": "text/plain", "value": render_to_string("emails/password_reset.txt", context)},
            {"type": "text/html", "value": render_to_string("emails/password_reset.html", context)},
        ],
    }
    headers = {"authorization": f"Bearer {settings.SENDGRID_API_KEY}"}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                SENDGRID_SEND_URL,
                headers=headers,
                json=payload,
                timeout=EMAIL_TIMEOUT_SECONDS,
            )
    except httpx.HTTPError as e:
        logger.error(f"[EMAIL] SendGrid request failed: {e}")
        raise EmailDeliveryError(str(e))

    if response.status_code >= 300:
        logger.error(f"[EMAIL] SendGrid rejected message: {response.status_code} - {response.text}")
        raise EmailDeliveryError(f"SendGrid responded with {response.status_code}")

    logger.info(f"[EMAIL] Password reset email sent to {to}")
