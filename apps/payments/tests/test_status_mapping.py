import pytest

from apps.payments.domain.status_mapping import can_transition, is_terminal_success, map_gateway_status
from apps.payments.models import Payment


@pytest.mark.parametrize(
    "transaction_status,fraud_status,expected",
    [
        ("capture", "accept", Payment.Status.PAID),
        ("settlement", None, Payment.Status.PAID),
        ("Settlement", "accept", Payment.Status.PAID),
        ("pending", None, Payment.Status.PENDING),
        ("deny", None, Payment.Status.FAILED),
        ("cancel", None, Payment.Status.FAILED),
        ("expire", None, Payment.Status.FAILED),
        ("failure", None, Payment.Status.FAILED),
        ("capture", "challenge", None),
        ("refund", None, None),
        ("", None, None),
        (None, None, None),
    ],
)
def test_map_gateway_status(transaction_status, fraud_status, expected):
    assert map_gateway_status(transaction_status, fraud_status) == expected


def test_terminal_success():
    assert is_terminal_success("settlement")
    assert is_terminal_success("capture", "accept")
    assert not is_terminal_success("pending")


def test_payment_transitions():
    assert can_transition(Payment.Status.PENDING, Payment.Status.PAID)
    assert can_transition(Payment.Status.FAILED, Payment.Status.PAID)
    assert not can_transition(Payment.Status.PAID, Payment.Status.FAILED)
    assert not can_transition(Payment.Status.FAILED, Payment.Status.PENDING)
