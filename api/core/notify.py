"""
Owner notifications over a transactional e-mail HTTP API (Brevo-compatible).

POST {NOTIFY_API_URL}
  headers: api-key
  body:    {"sender": {...}, "to": [{"email": ...}], "subject": ..., "textContent": ...}
"""

from __future__ import annotations

import logging

import httpx

from . import config

logger = logging.getLogger(__name__)

DEFAULT_NOTIFY_API_URL = "https://api.brevo.com/v3/smtp/email"


class NotificationError(RuntimeError):
    pass


def notify_api_url() -> str:
    return config.env_str("NOTIFY_API_URL", DEFAULT_NOTIFY_API_URL)


def notify_api_key() -> str:
    return config.env_str("NOTIFY_API_KEY")


def notify_sender() -> dict[str, str]:
    return {
        "name": config.env_str("NOTIFY_SENDER_NAME", "Property Listings"),
        "email": config.env_str("NOTIFY_SENDER_EMAIL", "noreply@example.com"),
    }


async def send_email(*, to_email: str, subject: str, text: str, timeout_s: float = 10.0) -> bool:
    """
    Send one plain-text e-mail. Returns False when notifications are not
    configured; raises NotificationError when the provider rejects the call.
    """
    api_key = notify_api_key()
    if not api_key:
        logger.warning("notification_skipped reason=NOTIFY_API_KEY_not_set to=%s", to_email)
        return False

    try:
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            resp = await client.post(
                notify_api_url(),
                headers={"api-key": api_key, "Content-Type": "application/json"},
                json={
                    "sender": notify_sender(),
                    "to": [{"email": to_email}],
                    "subject": subject,
                    "textContent": text,
                },
            )
    except httpx.HTTPError as exc:
        raise NotificationError(f"Notification request failed: {exc}") from exc

    if resp.status_code not in (200, 201, 202):
        raise NotificationError(f"Notification provider error: {resp.status_code} {resp.text[:300]}")

    logger.info("notification_sent to=%s", to_email)
    return True
