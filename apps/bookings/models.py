"""Booking domain models for UMC Media Hub."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.value_objects import DateRange

from .domain.state_machine import BookingStatus, assert_transition


class Booking(EventRecorder, models.Model):
    """A reservation of one or more services for an inclusive date range."""

    Status = BookingStatus

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Sum of item subtotals."),
    )
    status = models.CharField(
        max_length=20,
        choices=BookingStatus.choices,
        default=BookingStatus.MENUNGGU,
    )
    notes = models.TextField(blank=True, default="")
    approver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_bookings",
        help_text=_("Admin who last changed the status."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="booking_non_negative_total",
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="bookings_bo_status_idx"),
            models.Index(fields=["user", "-created_at"], name="bookings_bo_user_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} ({self.status})"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def duration_days(self) -> int:
        return self.dates.days

    def transition_to(self, target: str) -> str:
        """Move to ``target`` or raise ConflictError; returns the previous status."""
        previous = self.status
        assert_transition(previous, target)
        self.status = target
        return previous

    def append_note(self, line: str) -> None:
        """Notes are append-only: new lines go after whatever is already there."""
        self.notes = f"{self.notes}\n{line}" if self.notes else line


class BookingItem(models.Model):
    """One priced line of a booking. The unit price is frozen at creation."""

    class ItemType(models.TextChoices):
        JASA = "JASA", _("Service")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="items")
    type = models.CharField(max_length=10, choices=ItemType.choices, default=ItemType.JASA)
    service = models.ForeignKey(
        "catalog.Service",
        on_delete=models.PROTECT,
        related_name="booking_items",
    )
    package = models.ForeignKey(
        "catalog.Package",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="booking_items",
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2)
    notes = models.TextField(blank=True, default="")

    class Meta:
        verbose_name = _("Booking item")
        verbose_name_plural = _("Booking items")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="booking_item_positive_quantity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.service_id} x{self.quantity} ({self.subtotal})"
