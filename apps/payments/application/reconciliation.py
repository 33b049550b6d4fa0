"""
Webhook Reconciliation Engine

Applies gateway payment status to the local Payment and Booking.

Entry points:
- handle_notification(): asynchronous Midtrans notifications. Never raises;
  every outcome, including unexpected errors, is acknowledged so the
  gateway stops retrying.
- reconcile(): manual status check and the periodic sweep. Gateway errors
  propagate to the caller.

The status comparison and both writes happen in a single transaction
with the payment and booking rows locked, so concurrent deliveries of
the same notification (or a notification racing a manual check) cannot
interleave. A PAID outcome moves Payment and Booking together or not at all.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from django.db import IntegrityError
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import GatewayError
from apps.bookings.domain.state_machine import BookingStatus
from apps.bookings.models import Booking
from apps.payments.domain import status_mapping
from apps.payments.domain.events import PaymentFailed, PaymentSettled
from apps.payments.gateway import MidtransClient, TransactionStatus, get_gateway_client
from apps.payments.models import Payment

logger = logging.getLogger(__name__)

PREFIX_MATCH_LENGTH = 10

# Booking already reflects (or went past) the payment
BOOKING_ALREADY_SETTLED = frozenset({BookingStatus.DIBAYAR, BookingStatus.SELESAI})


class Outcome:
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    ALREADY_PAID = "already_paid"
    NOT_FOUND = "not_found"
    NOT_YET_PROCESSED = "not_yet_processed"
    UNMAPPED = "unmapped"
    REFUSED = "refused"
    ERROR = "error"


@dataclass
class ReconciliationResult:
    outcome: str
    payment_id: Optional[str] = None
    payment_status: Optional[str] = None
    gateway_status: Optional[str] = None
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome,
            "payment_id": self.payment_id,
            "payment_status": self.payment_status,
            "gateway_status": self.gateway_status,
        }


class WebhookReconciliationEngine:

    def __init__(self, gateway: Optional[MidtransClient] = None):
        self.gateway = gateway or get_gateway_client()

    def find_payment(self, order_id: Optional[str]) -> Optional[Payment]:
        """Exact reference match, else newest payment sharing the first 10 chars"""
        if not order_id:
            return None
        payment = Payment.objects.filter(reference_no=order_id).first()
        if payment is not None:
            return payment

        prefix = order_id[:PREFIX_MATCH_LENGTH]
        payment = (
            Payment.objects.filter(reference_no__startswith=prefix)
            .order_by("-created_at")
            .first()
        )
        if payment is not None:
            logger.warning(f"Order {order_id} matched payment {payment.reference_no} by prefix {prefix}")
        return payment

    def handle_notification(self, payload: dict) -> ReconciliationResult:
        """Process one gateway notification; always returns, never raises"""
        order_id = payload.get("order_id")
        try:
            payment = self.find_payment(order_id)
            if payment is None:
                logger.warning(f"Notification for unknown order {order_id} accepted without changes")
                return ReconciliationResult(Outcome.NOT_FOUND)

            reported = payload.get("transaction_status")
            if payment.status == Payment.Status.PAID and status_mapping.is_terminal_success(
                reported, payload.get("fraud_status")
            ):
                logger.info(f"Duplicate {reported} notification for paid payment {payment.pk}")
                return self._result(Outcome.ALREADY_PAID, payment, reported)

            try:
                status = self.gateway.get_transaction_status(payment.reference_no)
            except GatewayError as e:
                if e.http_status == 404:
                    logger.info(f"Transaction {payment.reference_no} not yet processed by gateway")
                    return self._result(Outcome.NOT_YET_PROCESSED, payment)
                raise

            return self.apply_status(payment.pk, status)
        except Exception:
            logger.exception(f"Failed to process payment notification for order {order_id}")
            return ReconciliationResult(Outcome.ERROR)

    def reconcile(self, payment: Payment) -> ReconciliationResult:
        """Pull the gateway's status for ``payment`` and apply it"""
        try:
            status = self.gateway.get_transaction_status(payment.reference_no)
        except GatewayError as e:
            if e.http_status == 404:
                return self._result(Outcome.NOT_YET_PROCESSED, payment)
            raise
        return self.apply_status(payment.pk, status)

    def apply_status(self, payment_id, status: TransactionStatus) -> ReconciliationResult:
        target = status_mapping.map_gateway_status(status.transaction_status, status.fraud_status)
        if target is None:
            logger.warning(
                f"Unmapped gateway status {status.transaction_status!r} "
                f"(fraud {status.fraud_status!r}) for payment {payment_id}; no changes"
            )
            return ReconciliationResult(
                Outcome.UNMAPPED,
                payment_id=str(payment_id),
                gateway_status=status.transaction_status,
                details=status.raw,
            )

        try:
            return self._apply_locked(payment_id, target, status)
        except IntegrityError:
            # Another attempt became active between the check and the write
            logger.error(
                f"Payment {payment_id} could not move to {target}: booking already has "
                f"an active payment; left untouched for manual remediation"
            )
            payment = Payment.objects.get(pk=payment_id)
            return self._result(Outcome.REFUSED, payment, status.transaction_status, status.raw)

    def _apply_locked(self, payment_id, target: str, status: TransactionStatus) -> ReconciliationResult:
        """Compare and write under row locks; Payment and Booking change together"""
        with DjangoUnitOfWork() as uow:
            payment = Payment.objects.select_for_update().get(pk=payment_id)
            booking = Booking.objects.select_for_update().get(pk=payment.booking_id)

            if payment.status == target:
                return self._result(Outcome.UNCHANGED, payment, status.transaction_status, status.raw)

            if not status_mapping.can_transition(payment.status, target):
                logger.warning(
                    f"Ignoring {payment.status} -> {target} for payment {payment.pk} "
                    f"(gateway status {status.transaction_status})"
                )
                return self._result(Outcome.UNCHANGED, payment, status.transaction_status, status.raw)

            if target in Payment.ACTIVE_STATUSES and not payment.is_active:
                superseding = (
                    Payment.objects.select_for_update()
                    .filter(booking_id=booking.pk, status__in=Payment.ACTIVE_STATUSES)
                    .exclude(pk=payment.pk)
                    .first()
                )
                if superseding is not None:
                    logger.error(
                        f"Gateway reports {status.transaction_status} for superseded payment {payment.pk} "
                        f"of booking {booking.pk}, which already has {superseding.status} payment "
                        f"{superseding.pk}; left untouched for manual remediation"
                    )
                    return self._result(
                        Outcome.REFUSED,
                        payment,
                        status.transaction_status,
                        {**status.raw, "active_payment_id": str(superseding.pk)},
                    )

            if target == Payment.Status.PAID:
                if booking.status == BookingStatus.DIKONFIRMASI:
                    booking.transition_to(BookingStatus.DIBAYAR)
                    booking.save(update_fields=["status", "updated_at"])
                elif booking.status not in BOOKING_ALREADY_SETTLED:
                    logger.error(
                        f"Gateway settled payment {payment.pk} but booking {booking.pk} is "
                        f"{booking.status}; left untouched for manual remediation"
                    )
                    return self._result(Outcome.REFUSED, payment, status.transaction_status, status.raw)

                payment.paid_at = timezone.now()
                payment.add_event(PaymentSettled(
                    aggregate_id=payment.pk,
                    payment_id=payment.pk,
                    booking_id=booking.pk,
                    user_id=booking.user_id,
                    amount=payment.amount,
                ))
            elif target == Payment.Status.FAILED:
                payment.add_event(PaymentFailed(
                    aggregate_id=payment.pk,
                    payment_id=payment.pk,
                    booking_id=booking.pk,
                    user_id=booking.user_id,
                    gateway_status=status.transaction_status,
                ))

            previous = payment.status
            payment.status = target
            payment.gateway_status = status.transaction_status
            payment.save(update_fields=["status", "paid_at", "gateway_status", "updated_at"])
            uow.collect_events(payment)

        logger.info(
            f"Payment {payment.pk} {previous} -> {payment.status} "
            f"(gateway {status.transaction_status}), booking {booking.pk} is {booking.status}"
        )
        return self._result(Outcome.UPDATED, payment, status.transaction_status, status.raw)

    @staticmethod
    def _result(outcome, payment, gateway_status=None, details=None) -> ReconciliationResult:
        return ReconciliationResult(
            outcome,
            payment_id=str(payment.pk),
            payment_status=payment.status,
            gateway_status=gateway_status,
            details=details or {},
        )
