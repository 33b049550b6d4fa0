"""
Gateway status mapping

Midtrans reports a free-form ``transaction_status`` plus, for card
captures, a ``fraud_status``. This table is the only place where those
strings are translated into payment statuses. A status that is not in
the table is *unmapped*: the caller logs it and changes nothing.

    capture + accept -> PAID        deny    -> FAILED
    settlement       -> PAID        cancel  -> FAILED
    pending          -> PENDING     expire  -> FAILED
                                    failure -> FAILED
"""

from __future__ import annotations

from typing import Optional

from apps.payments.models import Payment

ANY_FRAUD = "*"

STATUS_TABLE: dict[tuple[str, str], str] = {
    ("capture", "accept"): Payment.Status.PAID,
    ("settlement", ANY_FRAUD): Payment.Status.PAID,
    ("pending", ANY_FRAUD): Payment.Status.PENDING,
    ("deny", ANY_FRAUD): Payment.Status.FAILED,
    ("cancel", ANY_FRAUD): Payment.Status.FAILED,
    ("expire", ANY_FRAUD): Payment.Status.FAILED,
    ("failure", ANY_FRAUD): Payment.Status.FAILED,
}

# PAID is final: a later deny/expire never downgrades it
PAYMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    Payment.Status.PENDING: frozenset({Payment.Status.PAID, Payment.Status.FAILED}),
    Payment.Status.FAILED: frozenset({Payment.Status.PAID}),
    Payment.Status.PAID: frozenset(),
}


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def map_gateway_status(transaction_status: Optional[str], fraud_status: Optional[str] = None) -> Optional[str]:
    """Payment status for a gateway status pair, or None when unmapped"""
    status = _normalize(transaction_status)
    fraud = _normalize(fraud_status)
    if (status, fraud) in STATUS_TABLE:
        return STATUS_TABLE[(status, fraud)]
    return STATUS_TABLE.get((status, ANY_FRAUD))


def is_terminal_success(transaction_status: Optional[str], fraud_status: Optional[str] = None) -> bool:
    return map_gateway_status(transaction_status, fraud_status) == Payment.Status.PAID


def can_transition(current: str, target: str) -> bool:
    return target in PAYMENT_TRANSITIONS.get(current, frozenset())
