"""
Payment Domain Events

Published after commit by the session manager and the reconciliation
engine; the notifications app turns them into in-app messages and emails.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class PaymentCreated(DomainEvent):
    """Event: A Snap session was opened and a PENDING payment stored"""
    payment_id: UUID
    booking_id: UUID
    user_id: int
    amount: Decimal


@dataclass(kw_only=True)
class PaymentSettled(DomainEvent):
    """
    Event: Gateway confirmed the payment (-> PAID, booking -> DIBAYAR)

    Triggers:
    - "Payment success" notification and email to the user
    - "Payment received" notification and email to admins
    """
    payment_id: UUID
    booking_id: UUID
    user_id: int
    amount: Decimal


@dataclass(kw_only=True)
class PaymentFailed(DomainEvent):
    """Event: Gateway reported deny/cancel/expire/failure (-> FAILED)"""
    payment_id: UUID
    booking_id: UUID
    user_id: int
    gateway_status: str
