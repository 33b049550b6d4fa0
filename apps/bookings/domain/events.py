"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
They are published after successful transaction commits and picked up
by the notification handlers.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new booking is waiting for approval

    Triggers:
    - In-app notification to every admin
    - "New booking" email to admin recipients
    """
    booking_id: UUID
    user_id: int
    total_amount: Decimal


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: Admin approved the booking (MENUNGGU -> DIKONFIRMASI)

    Triggers:
    - Status notification and email to the booking owner
    """
    booking_id: UUID
    user_id: int
    approver_id: int
    notes: Optional[str] = None


@dataclass(kw_only=True)
class BookingRejected(DomainEvent):
    """Event: Admin rejected the booking (MENUNGGU -> DITOLAK)"""
    booking_id: UUID
    user_id: int
    approver_id: int
    reason: Optional[str] = None


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """Event: Owner cancelled the booking"""
    booking_id: UUID
    user_id: int
    previous_status: str


@dataclass(kw_only=True)
class BookingCompleted(DomainEvent):
    """
    Event: Admin completed the booking (-> SELESAI)

    Triggers:
    - Status notification and email to the owner
    - "Booking completed" email to admin recipients
    """
    booking_id: UUID
    user_id: int
    approver_id: int
    was_paid: bool
