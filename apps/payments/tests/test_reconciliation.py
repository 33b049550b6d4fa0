from unittest import mock

import pytest
from django.db import DatabaseError, IntegrityError

from apps.bookings.models import Booking
from apps.payments.application.reconciliation import Outcome, WebhookReconciliationEngine
from apps.payments.models import Payment
from shared.domain.exceptions import GatewayError

REFERENCE = "bk-abcdefgh-123456"


def _notification(transaction_status="settlement", order_id=REFERENCE, fraud_status=None):
    return {
        "order_id": order_id,
        "transaction_status": transaction_status,
        "fraud_status": fraud_status,
        "status_code": "200",
        "gross_amount": "200000.00",
    }


@pytest.fixture
def booking(make_booking):
    return make_booking(status=Booking.Status.DIKONFIRMASI)


@pytest.fixture
def payment(make_payment, booking):
    return make_payment(booking, reference_no=REFERENCE)


def test_settlement_marks_payment_and_booking_paid(gateway, payment, booking):
    result = WebhookReconciliationEngine(gateway).handle_notification(_notification())

    assert result.outcome == Outcome.UPDATED
    payment.refresh_from_db()
    booking.refresh_from_db()
    assert payment.status == Payment.Status.PAID
    assert payment.paid_at is not None
    assert payment.gateway_status == "settlement"
    assert booking.status == Booking.Status.DIBAYAR
    assert gateway.status_queries == [REFERENCE]


def test_capture_requires_accepted_fraud_status(gateway, payment):
    gateway.transaction_status = "capture"
    gateway.fraud_status = "challenge"

    result = WebhookReconciliationEngine(gateway).handle_notification(_notification("capture"))

    assert result.outcome == Outcome.UNMAPPED
    payment.refresh_from_db()
    assert payment.status == Payment.Status.PENDING

    gateway.fraud_status = "accept"
    result = WebhookReconciliationEngine(gateway).handle_notification(_notification("capture"))
    assert result.outcome == Outcome.UPDATED


def test_duplicate_settlement_is_idempotent(gateway, payment, booking):
    engine = WebhookReconciliationEngine(gateway)
    engine.handle_notification(_notification())
    payment.refresh_from_db()
    first_paid_at = payment.paid_at

    result = engine.handle_notification(_notification())

    assert result.outcome == Outcome.ALREADY_PAID
    assert len(gateway.status_queries) == 1
    payment.refresh_from_db()
    booking.refresh_from_db()
    assert payment.paid_at == first_paid_at
    assert booking.status == Booking.Status.DIBAYAR


def test_reapplying_same_status_changes_nothing(gateway, payment):
    engine = WebhookReconciliationEngine(gateway)
    engine.reconcile(payment)
    payment.refresh_from_db()
    first_paid_at = payment.paid_at

    result = engine.reconcile(payment)

    assert result.outcome == Outcome.UNCHANGED
    payment.refresh_from_db()
    assert payment.paid_at == first_paid_at


@pytest.mark.parametrize("status", ["deny", "cancel", "expire", "failure"])
def test_failure_statuses_fail_payment_only(gateway, payment, booking, status):
    gateway.transaction_status = status

    result = WebhookReconciliationEngine(gateway).handle_notification(_notification(status))

    assert result.outcome == Outcome.UPDATED
    payment.refresh_from_db()
    booking.refresh_from_db()
    assert payment.status == Payment.Status.FAILED
    assert booking.status == Booking.Status.DIKONFIRMASI


def test_paid_is_never_downgraded(gateway, payment, booking):
    engine = WebhookReconciliationEngine(gateway)
    engine.handle_notification(_notification())

    gateway.transaction_status = "expire"
    result = engine.handle_notification(_notification("expire"))

    assert result.outcome == Outcome.UNCHANGED
    payment.refresh_from_db()
    assert payment.status == Payment.Status.PAID


def test_late_settlement_revives_failed_payment(gateway, make_payment, booking):
    payment = make_payment(booking, status=Payment.Status.FAILED, reference_no=REFERENCE)

    result = WebhookReconciliationEngine(gateway).handle_notification(_notification())

    assert result.outcome == Outcome.UPDATED
    payment.refresh_from_db()
    booking.refresh_from_db()
    assert payment.status == Payment.Status.PAID
    assert booking.status == Booking.Status.DIBAYAR


def test_unknown_order_is_acknowledged(gateway, db):
    result = WebhookReconciliationEngine(gateway).handle_notification(_notification(order_id="zz-unknown"))
    assert result.outcome == Outcome.NOT_FOUND
    assert gateway.status_queries == []


def test_prefix_match_queries_stored_reference(gateway, payment):
    result = WebhookReconciliationEngine(gateway).handle_notification(
        _notification(order_id="bk-abcdefgh-999999")
    )

    assert result.outcome == Outcome.UPDATED
    assert gateway.status_queries == [REFERENCE]


def test_unmapped_status_changes_nothing(gateway, payment, booking):
    gateway.transaction_status = "authorize"

    result = WebhookReconciliationEngine(gateway).handle_notification(_notification("authorize"))

    assert result.outcome == Outcome.UNMAPPED
    payment.refresh_from_db()
    assert payment.status == Payment.Status.PENDING
    assert payment.gateway_status == ""


def test_gateway_not_found_means_not_yet_processed(gateway, payment, not_found_error):
    gateway.error = not_found_error

    result = WebhookReconciliationEngine(gateway).handle_notification(_notification("pending"))

    assert result.outcome == Outcome.NOT_YET_PROCESSED
    assert WebhookReconciliationEngine(gateway).reconcile(payment).outcome == Outcome.NOT_YET_PROCESSED


def test_gateway_failure_is_acknowledged_by_webhook_but_raised_by_reconcile(gateway, payment):
    gateway.error = GatewayError("Payment gateway timed out")

    result = WebhookReconciliationEngine(gateway).handle_notification(_notification())
    assert result.outcome == Outcome.ERROR

    with pytest.raises(GatewayError):
        WebhookReconciliationEngine(gateway).reconcile(payment)


def test_settlement_for_cancelled_booking_is_refused(gateway, make_booking, make_payment):
    booking = make_booking(status=Booking.Status.DIBATALKAN)
    payment = make_payment(booking, reference_no=REFERENCE)

    result = WebhookReconciliationEngine(gateway).handle_notification(_notification())

    assert result.outcome == Outcome.REFUSED
    payment.refresh_from_db()
    booking.refresh_from_db()
    assert payment.status == Payment.Status.PENDING
    assert booking.status == Booking.Status.DIBATALKAN


def test_settlement_after_completion_only_updates_payment(gateway, make_booking, make_payment):
    booking = make_booking(status=Booking.Status.SELESAI)
    payment = make_payment(booking, reference_no=REFERENCE)

    result = WebhookReconciliationEngine(gateway).handle_notification(_notification())

    assert result.outcome == Outcome.UPDATED
    payment.refresh_from_db()
    booking.refresh_from_db()
    assert payment.status == Payment.Status.PAID
    assert booking.status == Booking.Status.SELESAI


def test_payment_and_booking_change_together_or_not_at_all(gateway, payment, booking):
    with mock.patch.object(Payment, "save", side_effect=DatabaseError("disk full")):
        result = WebhookReconciliationEngine(gateway).handle_notification(_notification())

    assert result.outcome == Outcome.ERROR
    payment.refresh_from_db()
    booking.refresh_from_db()
    assert payment.status == Payment.Status.PENDING
    assert booking.status == Booking.Status.DIKONFIRMASI


def test_late_settlement_of_superseded_payment_is_refused(gateway, make_payment, booking):
    old = make_payment(booking, status=Payment.Status.FAILED, reference_no="bk-old-000001")
    retry = make_payment(booking, reference_no="bk-new-000002")

    result = WebhookReconciliationEngine(gateway).reconcile(old)

    assert result.outcome == Outcome.REFUSED
    assert result.details["active_payment_id"] == str(retry.pk)
    old.refresh_from_db()
    retry.refresh_from_db()
    booking.refresh_from_db()
    assert old.status == Payment.Status.FAILED
    assert retry.status == Payment.Status.PENDING
    assert booking.status == Booking.Status.DIKONFIRMASI


def test_superseded_settlement_webhook_is_acknowledged(gateway, make_payment, booking):
    make_payment(booking, status=Payment.Status.FAILED, reference_no="bk-old-000001")
    make_payment(booking, reference_no="bk-new-000002")

    result = WebhookReconciliationEngine(gateway).handle_notification(
        _notification(order_id="bk-old-000001")
    )

    assert result.outcome == Outcome.REFUSED
    assert gateway.status_queries == ["bk-old-000001"]


def test_active_payment_race_is_refused_without_partial_writes(gateway, make_payment, booking):
    old = make_payment(booking, status=Payment.Status.FAILED, reference_no=REFERENCE)

    with mock.patch.object(Payment, "save", side_effect=IntegrityError("one_active_payment_per_booking")):
        result = WebhookReconciliationEngine(gateway).reconcile(old)

    assert result.outcome == Outcome.REFUSED
    old.refresh_from_db()
    booking.refresh_from_db()
    assert old.status == Payment.Status.FAILED
    assert booking.status == Booking.Status.DIKONFIRMASI
