"""Celery tasks for notification delivery.

Both tasks are dispatched fire-and-forget from the event handlers. A
delivery failure is logged and never reaches the code that triggered it.
"""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


@shared_task(name="notifications.deliver_notification")
def deliver_notification(user_id: int, type: str, title: str, body: str) -> int | None:
    """Create an in-app notification; returns its id."""
    try:
        return services.notify(user_id, type, title, body).pk
    except Exception as e:
        logger.error(f"Failed to create notification for user {user_id}: {e}", exc_info=True)
        return None


@shared_task(name="notifications.send_email")
def send_email(
    to: str | list[str],
    subject: str,
    text: str | None = None,
    html: str | None = None,
    bcc: list[str] | None = None,
) -> int:
    """Send one email; returns the number of messages sent."""
    try:
        return services.send_mail(to, subject, text=text, html=html, bcc=bcc)
    except Exception as e:
        logger.error(f"Failed to send email '{subject}' to {to}: {e}", exc_info=True)
        return 0
