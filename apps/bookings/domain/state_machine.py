"""
Booking State Machine

Explicit allow-list of status transitions. Anything not listed here is
rejected with ConflictError before any field of the booking is touched.

    MENUNGGU ─┬─> DIKONFIRMASI ─┬─> DIBAYAR ──> SELESAI
              │                 ├─> SELESAI
              │                 └─> DIBATALKAN
              ├─> DITOLAK
              └─> DIBATALKAN
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.exceptions import ConflictError


class BookingStatus(models.TextChoices):
    MENUNGGU = "MENUNGGU", _("Waiting for approval")
    DIKONFIRMASI = "DIKONFIRMASI", _("Confirmed")
    DIBAYAR = "DIBAYAR", _("Paid")
    DITOLAK = "DITOLAK", _("Rejected")
    DIBATALKAN = "DIBATALKAN", _("Cancelled")
    SELESAI = "SELESAI", _("Completed")


ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    BookingStatus.MENUNGGU: frozenset({
        BookingStatus.DIKONFIRMASI,
        BookingStatus.DITOLAK,
        BookingStatus.DIBATALKAN,
    }),
    BookingStatus.DIKONFIRMASI: frozenset({
        BookingStatus.DIBAYAR,
        BookingStatus.DIBATALKAN,
        BookingStatus.SELESAI,
    }),
    BookingStatus.DIBAYAR: frozenset({BookingStatus.SELESAI}),
    BookingStatus.DITOLAK: frozenset(),
    BookingStatus.DIBATALKAN: frozenset(),
    BookingStatus.SELESAI: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def assert_transition(current: str, target: str) -> None:
    """Raise ConflictError unless current -> target is allowed"""
    if not can_transition(current, target):
        raise ConflictError(
            f"Cannot move booking from {current} to {target}",
            detail={"current_status": str(current), "target_status": str(target)},
        )


def assert_completable(current: str) -> None:
    """Completion is an admin action on confirmed bookings only.

    DIBAYAR -> SELESAI stays in the allow-list, but no admin action takes
    that path: a paid booking cannot be completed through ``complete``.
    """
    if current != BookingStatus.DIKONFIRMASI:
        raise ConflictError(
            f"Only {BookingStatus.DIKONFIRMASI} bookings can be completed (current: {current})",
            detail={"current_status": str(current), "target_status": str(BookingStatus.SELESAI)},
        )


def is_editable(status: str) -> bool:
    """Owners may only edit bookings still waiting for approval"""
    return status == BookingStatus.MENUNGGU
