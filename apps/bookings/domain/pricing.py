"""
Pricing Engine

Pure functions computing booking item subtotals and booking totals.
Every amount is a Decimal quantized to two places; nothing here touches
the database, so callers pass in the rates they already loaded.

    subtotal = unit_rate * duration_days * quantity
    total    = sum(subtotals)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from shared.domain.value_objects import DateRange, Money


@dataclass(frozen=True)
class PriceLine:
    """One priced line: the frozen daily rate and how many units"""
    unit_rate: Decimal
    quantity: int = 1


@dataclass(frozen=True)
class PricingResult:
    subtotals: List[Money]
    total: Money


def duration_days(dates: DateRange) -> int:
    """Inclusive day count: same start and end date is one day"""
    return dates.days


def resolve_unit_rate(service_rate: Decimal, package_rate: Optional[Decimal] = None) -> Decimal:
    """A package's rate wins over the service's base rate"""
    rate = package_rate if package_rate is not None else service_rate
    return Money(rate).amount


def line_subtotal(line: PriceLine, days: int) -> Money:
    if line.quantity < 1:
        raise ValueError(f"Quantity must be a positive integer, got {line.quantity}")
    if days < 1:
        raise ValueError(f"Duration must be at least one day, got {days}")
    return Money(line.unit_rate) * days * line.quantity


def compute_total(lines: Iterable[PriceLine], days: int) -> PricingResult:
    """Subtotal every line for the given duration and sum them up"""
    subtotals = [line_subtotal(line, days) for line in lines]
    total = Money.zero()
    for subtotal in subtotals:
        total = total + subtotal
    return PricingResult(subtotals=subtotals, total=total)


def to_gateway_amount(amount: Decimal) -> int:
    """Whole-rupiah amount for the payment gateway, rounded half-up"""
    return Money(amount).to_gateway_amount()
