"""Notifier: in-app notifications and email."""

from __future__ import annotations

import logging
from typing import Iterable

from django.conf import settings  # type: ignore
from django.core.mail import EmailMultiAlternatives, get_connection  # type: ignore
from django.utils.html import strip_tags  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)


def notify(user_id: int, type: str, title: str, body: str) -> Notification:
    """Create an in-app notification for ``user_id``."""
    notification = Notification.objects.create(
        user_id=user_id,
        type=type,
        title=title,
        body=body,
    )
    logger.info(f"In-app notification created for user {user_id}: {title}")
    return notification


def send_mail(
    to: str | list[str],
    subject: str,
    text: str | None = None,
    html: str | None = None,
    bcc: Iterable[str] | None = None,
) -> int:
    """
    Send one email.

    Args:
        to: Recipient address or list of addresses
        subject: Subject line
        text: Plain text body; derived from ``html`` when omitted
        html: HTML alternative (optional)
        bcc: Blind copies

    Returns:
        int: number of messages sent (0 or 1)
    """
    recipients = [to] if isinstance(to, str) else list(to)
    recipients = [r for r in recipients if r]
    if not recipients:
        logger.warning(f"Email '{subject}' has no recipients; skipped")
        return 0

    message = EmailMultiAlternatives(
        subject=subject,
        body=text if text is not None else strip_tags(html or ""),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
        bcc=list(bcc or []),
        connection=get_connection(timeout=settings.EMAIL_TIMEOUT),
    )
    if html:
        message.attach_alternative(html, "text/html")

    sent = message.send(fail_silently=False)
    logger.info(f"Email sent to {', '.join(recipients)}: {subject}")
    return sent


def admin_recipients() -> list[str]:
    """Emails of active admins followed by ADMIN_EMAILS, without duplicates."""
    from apps.users.models import CustomUser

    emails: list[str] = []
    seen: set[str] = set()
    db_emails = CustomUser.objects.admins().exclude(email="").values_list("email", flat=True)
    for email in [*db_emails, *settings.ADMIN_EMAILS]:
        key = email.strip().lower()
        if key and key not in seen:
            seen.add(key)
            emails.append(email.strip())
    return emails


def admin_user_ids() -> list[int]:
    from apps.users.models import CustomUser

    return list(CustomUser.objects.admins().values_list("id", flat=True))
