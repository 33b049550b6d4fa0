from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.models import Booking, BookingItem
from apps.catalog.models import Service
from apps.payments.gateway import GatewaySession, TransactionStatus
from apps.payments.models import Payment
from apps.users.models import User
from shared.domain.exceptions import GatewayError


class FakeGateway:
    """In-memory stand-in for MidtransClient."""

    emulated = False

    def __init__(self, transaction_status="settlement", fraud_status=None, error=None):
        self.transaction_status = transaction_status
        self.fraud_status = fraud_status
        self.error = error
        self.sessions = []
        self.status_queries = []
        self.on_create = None

    def create_session(self, order_reference, gross_amount, customer, enabled_payments, callbacks=None):
        self.sessions.append({
            "order_reference": order_reference,
            "gross_amount": gross_amount,
            "customer": customer,
            "enabled_payments": enabled_payments,
            "callbacks": callbacks,
        })
        if self.on_create:
            self.on_create()
        return GatewaySession(token="snap-token", redirect_url="https://pay.test/snap-token")

    def get_transaction_status(self, order_reference):
        self.status_queries.append(order_reference)
        if self.error is not None:
            raise self.error
        return TransactionStatus(
            transaction_status=self.transaction_status,
            fraud_status=self.fraud_status,
            status_code="200",
            raw={"order_id": order_reference, "transaction_status": self.transaction_status},
        )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def not_found_error():
    return GatewayError("Transaction doesn't exist.", http_status=404)


@pytest.fixture
def owner(db):
    return User.objects.create_user(email="owner@example.com", name="Budi Santoso", password="x" * 10)


@pytest.fixture
def make_booking(db, owner):
    def factory(status=Booking.Status.DIKONFIRMASI, unit_price=Decimal("100000.00"), user=None):
        service = Service.objects.create(name="Studio", unit_rate=unit_price)
        booking = Booking.objects.create(
            user=user or owner,
            start_date=date(2025, 5, 1),
            end_date=date(2025, 5, 2),
            total_amount=unit_price * 2,
            status=status,
        )
        BookingItem.objects.create(
            booking=booking,
            service=service,
            quantity=1,
            unit_price=unit_price,
            subtotal=unit_price * 2,
        )
        return booking

    return factory


@pytest.fixture
def make_payment(db):
    def factory(booking, status=Payment.Status.PENDING, reference_no="bk-abcdefgh-123456"):
        return Payment.objects.create(
            booking=booking,
            amount=booking.total_amount,
            status=status,
            reference_no=reference_no,
        )

    return factory
