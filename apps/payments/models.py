"""Payment models for UMC Media Hub."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder


class Payment(EventRecorder, models.Model):
    """A payment attempt for a booking, correlated with the gateway by reference_no."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Waiting for payment")
        PAID = "PAID", _("Paid")
        FAILED = "FAILED", _("Failed")

    class Method(models.TextChoices):
        QRIS = "QRIS", _("QRIS")
        TRANSFER = "TRANSFER", _("Bank transfer")
        CASH = "CASH", _("Cash")

    ACTIVE_STATUSES = (Status.PENDING, Status.PAID)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    method = models.CharField(max_length=10, choices=Method.choices, default=Method.QRIS)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    reference_no = models.CharField(
        max_length=50,
        unique=True,
        editable=False,
        help_text=_("Order id handed to the gateway."),
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    proof_url = models.URLField(max_length=500, blank=True)
    snap_token = models.CharField(max_length=255, blank=True)
    gateway_status = models.CharField(
        max_length=30,
        blank=True,
        help_text=_("Last transaction status reported by the gateway."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=models.Q(status__in=["PENDING", "PAID"]),
                name="one_active_payment_per_booking",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="payments_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Payment {self.reference_no} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES
