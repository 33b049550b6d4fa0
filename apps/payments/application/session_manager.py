"""
Payment Session Manager

Opens a Midtrans Snap session for a confirmed booking and stores the
resulting PENDING payment.

1. Load the booking and check owner and status (DIKONFIRMASI)
2. Refuse if an active (PENDING/PAID) payment already exists
3. Take the authoritative amount (cached total, else recomputed)
4. Ask the gateway for a session with a fresh order reference
5. Persist the payment; the partial unique index is the final guard
   against two concurrent requests, and its violation becomes the same
   ConflictError as the pre-check
"""

from dataclasses import dataclass
from typing import Callable, Optional
from uuid import UUID
import logging
import time

from django.conf import settings
from django.db import IntegrityError

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from shared.domain.value_objects import Money
from apps.bookings.domain import pricing
from apps.bookings.domain.state_machine import BookingStatus
from apps.bookings.models import Booking
from apps.payments.domain.events import PaymentCreated
from apps.payments.gateway import MidtransClient, get_gateway_client
from apps.payments.models import Payment

logger = logging.getLogger(__name__)

ENABLED_PAYMENTS = {
    Payment.Method.QRIS: ["qris"],
    Payment.Method.TRANSFER: ["bank_transfer"],
}
ALL_CHANNELS = ["qris", "bank_transfer"]


@dataclass
class PaymentSession:
    payment: Payment
    token: str
    redirect_url: str


def generate_order_reference(booking_id, now_ms: int, max_length: Optional[int] = None) -> str:
    """``bk-<first 8 chars of booking id>-<last 6 digits of epoch ms>``"""
    max_length = max_length or settings.PAYMENT_ORDER_ID_MAX_LENGTH
    reference = f"bk-{str(booking_id)[:8]}-{str(now_ms)[-6:]}"
    if len(reference) > max_length:
        reference = f"bk-{now_ms}"[:max_length]
    return reference


def enabled_payments_for(method: Optional[str]) -> list[str]:
    return list(ENABLED_PAYMENTS.get(method, ALL_CHANNELS))


def customer_details(user) -> dict[str, str]:
    """Split the display name into the first/last pair Midtrans expects"""
    parts = (user.name or "Customer").split(" ")
    return {
        "first_name": parts[0] or "Customer",
        "last_name": " ".join(parts[1:]),
        "email": user.email or "",
        "phone": user.phone or "",
    }


def booking_amount(booking: Booking) -> Money:
    """Cached total when positive, otherwise recomputed from the frozen item prices"""
    if booking.total_amount and booking.total_amount > 0:
        return Money(booking.total_amount)
    lines = [
        pricing.PriceLine(unit_rate=item.unit_price, quantity=item.quantity)
        for item in booking.items.all()
    ]
    return pricing.compute_total(lines, booking.duration_days).total


class PaymentSessionManager:
    """Creates gateway payment sessions for confirmed bookings"""

    def __init__(
        self,
        gateway: Optional[MidtransClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.gateway = gateway or get_gateway_client()
        self.clock = clock

    def create_payment(self, booking_id: UUID, user_id: int, method: Optional[str] = None) -> PaymentSession:
        booking = (
            Booking.objects.select_related("user")
            .prefetch_related("items")
            .filter(pk=booking_id)
            .first()
        )
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        if booking.user_id != user_id:
            raise UnauthorizedError("Booking does not belong to you")
        if booking.status != BookingStatus.DIKONFIRMASI:
            raise ConflictError(
                f"Booking must be {BookingStatus.DIKONFIRMASI} to be paid (current: {booking.status})"
            )

        active = booking.payments.filter(status__in=Payment.ACTIVE_STATUSES).first()
        if active is not None:
            raise ConflictError(
                "A payment for this booking is already in progress",
                detail={"payment_id": str(active.pk), "status": active.status},
            )

        amount = booking_amount(booking)
        if not amount.is_positive():
            raise ValidationError("Payment amount must be positive")

        reference = generate_order_reference(booking.pk, int(self.clock() * 1000))
        session = self.gateway.create_session(
            order_reference=reference,
            gross_amount=amount.to_gateway_amount(),
            customer=customer_details(booking.user),
            enabled_payments=enabled_payments_for(method),
            callbacks={
                "finish": f"{settings.FRONTEND_URL}/payment/success",
                "error": f"{settings.FRONTEND_URL}/payment/error",
                "pending": f"{settings.FRONTEND_URL}/payment/pending",
            },
        )

        try:
            with DjangoUnitOfWork() as uow:
                payment = Payment.objects.create(
                    booking=booking,
                    amount=amount.amount,
                    method=method or Payment.Method.QRIS,
                    status=Payment.Status.PENDING,
                    reference_no=reference,
                    proof_url=session.redirect_url,
                    snap_token=session.token,
                )
                payment.add_event(PaymentCreated(
                    aggregate_id=payment.pk,
                    payment_id=payment.pk,
                    booking_id=booking.pk,
                    user_id=booking.user_id,
                    amount=amount.amount,
                ))
                uow.collect_events(payment)
        except IntegrityError as e:
            logger.warning(f"Concurrent payment creation for booking {booking.pk} rejected: {e}")
            raise ConflictError("A payment for this booking is already in progress") from e

        logger.info(
            f"Payment {payment.pk} created for booking {booking.pk}: "
            f"{reference}, amount {amount.amount}, method {payment.method}"
        )
        return PaymentSession(payment=payment, token=session.token, redirect_url=session.redirect_url)
