from datetime import timedelta
from unittest import mock

from django.utils import timezone

from apps.bookings.models import Booking
from apps.payments.models import Payment
from apps.payments.tasks import reconcile_pending_payments
from shared.domain.exceptions import GatewayError


def _age(payment, minutes):
    Payment.objects.filter(pk=payment.pk).update(created_at=timezone.now() - timedelta(minutes=minutes))


def test_stale_pending_payments_are_reconciled(gateway, make_booking, make_payment, owner):
    stale = make_payment(make_booking(), reference_no="bk-stale-000001")
    fresh = make_payment(make_booking(), reference_no="bk-fresh-000001")
    _age(stale, 60)

    with mock.patch("apps.payments.application.reconciliation.get_gateway_client", return_value=gateway):
        stats = reconcile_pending_payments()

    assert stats == {"checked": 1, "updated": 1, "errors": 0}
    assert gateway.status_queries == ["bk-stale-000001"]
    stale.refresh_from_db()
    fresh.refresh_from_db()
    assert stale.status == Payment.Status.PAID
    assert Booking.objects.get(pk=stale.booking_id).status == Booking.Status.DIBAYAR
    assert fresh.status == Payment.Status.PENDING


def test_gateway_errors_are_counted_not_raised(gateway, make_booking, make_payment):
    payment = make_payment(make_booking())
    _age(payment, 60)
    gateway.error = GatewayError("Payment gateway unreachable", http_status=503)

    with mock.patch("apps.payments.application.reconciliation.get_gateway_client", return_value=gateway):
        stats = reconcile_pending_payments()

    assert stats == {"checked": 1, "updated": 0, "errors": 1}
    payment.refresh_from_db()
    assert payment.status == Payment.Status.PENDING
