"""Notification model.

An in-app message to one user about a booking or payment event. Created
by the ``notifications.deliver_notification`` task and read through the
API; each notification can be marked as read.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Type(models.TextChoices):
        BOOKING = "BOOKING", _("Booking")
        PAYMENT = "PAYMENT", _("Payment")
        SYSTEM = "SYSTEM", _("System")

    class Channel(models.TextChoices):
        APP = "APP", _("In-app")

    user = models.ForeignKey(
        "users.CustomUser", on_delete=models.CASCADE, related_name="notifications"
    )
    type = models.CharField(max_length=10, choices=Type.choices, default=Type.SYSTEM)
    title = models.CharField(max_length=255)
    body = models.TextField()
    channel = models.CharField(max_length=10, choices=Channel.choices, default=Channel.APP)
    read_at = models.DateTimeField(null=True, blank=True)
    sent_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "read_at"], name="notif_user_read_idx")]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def mark_read(self) -> None:
        if self.read_at is None:
            self.read_at = timezone.now()
            self.save(update_fields=["read_at"])
