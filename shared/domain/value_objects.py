"""
Common Value Objects

Value objects used across the booking and payment domains:
- Money: Monetary amount in exact decimal arithmetic
- DateRange: Inclusive range of rental days (start to end)
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from shared.domain.base import ValueObject

CENT = Decimal('0.01')


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are always Decimal and quantized to two places, so totals
    round-trip exactly through the database and the payment gateway.
    """
    amount: Decimal
    currency: str = 'IDR'

    def __post_init__(self):
        if isinstance(self.amount, float):
            raise TypeError("Money does not accept float amounts")
        amount = Decimal(self.amount).quantize(CENT, rounding=ROUND_HALF_UP)
        object.__setattr__(self, 'amount', amount)
        if amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")

    @classmethod
    def zero(cls, currency: str = 'IDR') -> 'Money':
        return cls(Decimal('0'), currency)

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> 'Money':
        """Multiply money by an integer or Decimal factor"""
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(self.amount * Decimal(factor), self.currency)

    def is_positive(self) -> bool:
        return self.amount > 0

    def to_gateway_amount(self) -> int:
        """Whole currency units, rounded half-up, as payment gateways expect"""
        return int(self.amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Both ends are inclusive: a booking from 1 Jan to 1 Jan lasts one day,
    1 Jan to 5 Jan lasts five days. There is no partial-day billing.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date is None or self.end_date is None:
            raise ValueError("Start date and end date are required")
        if self.start_date > self.end_date:
            raise ValueError(
                f"Start date ({self.start_date}) must be on or before end date ({self.end_date})"
            )

    @property
    def days(self) -> int:
        """Number of billable days, never less than one"""
        return max((self.end_date - self.start_date).days + 1, 1)

    def __len__(self) -> int:
        return self.days

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def __str__(self):
        return f"{self.start_date.isoformat()} s/d {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
