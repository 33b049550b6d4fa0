from decimal import Decimal

import pytest

from apps.bookings.models import Booking
from apps.payments.application.session_manager import (
    PaymentSessionManager,
    enabled_payments_for,
    generate_order_reference,
)
from apps.payments.models import Payment
from apps.users.models import User
from shared.domain.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError

FIXED_CLOCK = lambda: 1700000123.5  # noqa: E731


def _manager(gateway):
    return PaymentSessionManager(gateway=gateway, clock=FIXED_CLOCK)


def test_order_reference_format():
    reference = generate_order_reference("abcdef12-3456-7890", 1700000123456, max_length=50)
    assert reference == "bk-abcdef12-123456"


def test_order_reference_falls_back_when_too_long():
    reference = generate_order_reference("abcdef12-3456-7890", 1700000123456, max_length=12)
    assert reference == "bk-170000012"
    assert len(reference) == 12


def test_enabled_payments_by_method():
    assert enabled_payments_for(Payment.Method.QRIS) == ["qris"]
    assert enabled_payments_for(Payment.Method.TRANSFER) == ["bank_transfer"]
    assert enabled_payments_for(None) == ["qris", "bank_transfer"]


def test_creates_pending_payment_for_confirmed_booking(gateway, make_booking, owner):
    booking = make_booking(unit_price=Decimal("100000.50"))

    session = _manager(gateway).create_payment(booking.id, owner.id, Payment.Method.TRANSFER)

    payment = session.payment
    assert payment.status == Payment.Status.PENDING
    assert payment.amount == Decimal("200001.00")
    assert payment.method == Payment.Method.TRANSFER
    assert payment.reference_no == f"bk-{str(booking.id)[:8]}-123500"
    assert payment.snap_token == "snap-token"
    assert session.redirect_url == "https://pay.test/snap-token"

    sent = gateway.sessions[0]
    assert sent["gross_amount"] == 200001
    assert sent["enabled_payments"] == ["bank_transfer"]
    assert sent["customer"]["first_name"] == "Budi"
    assert sent["customer"]["last_name"] == "Santoso"
    assert sent["callbacks"]["finish"] == "http://frontend.test/payment/success"


def test_default_method_is_qris(gateway, make_booking, owner):
    booking = make_booking()
    session = _manager(gateway).create_payment(booking.id, owner.id)
    assert session.payment.method == Payment.Method.QRIS
    assert gateway.sessions[0]["enabled_payments"] == ["qris", "bank_transfer"]


def test_missing_booking(gateway, owner):
    with pytest.raises(NotFoundError):
        _manager(gateway).create_payment("00000000-0000-0000-0000-000000000000", owner.id)


def test_foreign_booking_rejected(gateway, make_booking):
    booking = make_booking()
    stranger = User.objects.create_user(email="stranger@example.com", password="x" * 10)

    with pytest.raises(UnauthorizedError):
        _manager(gateway).create_payment(booking.id, stranger.id)
    assert gateway.sessions == []


@pytest.mark.parametrize("status", [Booking.Status.MENUNGGU, Booking.Status.DIBAYAR, Booking.Status.DIBATALKAN])
def test_only_confirmed_bookings_can_be_paid(gateway, make_booking, owner, status):
    booking = make_booking(status=status)
    with pytest.raises(ConflictError):
        _manager(gateway).create_payment(booking.id, owner.id)


def test_second_active_payment_conflicts(gateway, make_booking, make_payment, owner):
    booking = make_booking()
    existing = make_payment(booking)

    with pytest.raises(ConflictError) as excinfo:
        _manager(gateway).create_payment(booking.id, owner.id)

    assert excinfo.value.detail["payment_id"] == str(existing.pk)
    assert gateway.sessions == []
    assert booking.payments.count() == 1


def test_failed_payment_does_not_block_retry(gateway, make_booking, make_payment, owner):
    booking = make_booking()
    make_payment(booking, status=Payment.Status.FAILED)

    session = _manager(gateway).create_payment(booking.id, owner.id)

    assert session.payment.status == Payment.Status.PENDING
    assert booking.payments.count() == 2


def test_concurrent_creation_hits_unique_constraint(gateway, make_booking, make_payment, owner):
    booking = make_booking()
    # Another request stores its payment while ours waits for the gateway
    gateway.on_create = lambda: make_payment(booking, reference_no="bk-concurrent-1")

    with pytest.raises(ConflictError):
        _manager(gateway).create_payment(booking.id, owner.id)

    assert list(booking.payments.values_list("reference_no", flat=True)) == ["bk-concurrent-1"]


def test_zero_amount_rejected(gateway, make_booking, owner):
    booking = make_booking(unit_price=Decimal("0.00"))
    with pytest.raises(ValidationError):
        _manager(gateway).create_payment(booking.id, owner.id)
