from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.domain import pricing
from shared.domain.value_objects import DateRange


def test_same_day_booking_lasts_one_day():
    assert pricing.duration_days(DateRange(date(2025, 3, 1), date(2025, 3, 1))) == 1
    assert pricing.duration_days(DateRange(date(2025, 3, 1), date(2025, 3, 3))) == 3


def test_package_rate_overrides_service_rate():
    assert pricing.resolve_unit_rate(Decimal("100000"), Decimal("250000")) == Decimal("250000.00")
    assert pricing.resolve_unit_rate(Decimal("100000")) == Decimal("100000.00")


def test_total_is_sum_of_rate_times_days_times_quantity():
    lines = [
        pricing.PriceLine(unit_rate=Decimal("150000.00"), quantity=2),
        pricing.PriceLine(unit_rate=Decimal("75000.50"), quantity=1),
    ]

    result = pricing.compute_total(lines, days=3)

    assert [s.amount for s in result.subtotals] == [Decimal("900000.00"), Decimal("225001.50")]
    assert result.total.amount == Decimal("1125001.50")


def test_empty_lines_total_zero():
    assert pricing.compute_total([], days=2).total.amount == Decimal("0.00")


def test_invalid_quantity_or_duration_rejected():
    with pytest.raises(ValueError):
        pricing.line_subtotal(pricing.PriceLine(unit_rate=Decimal("1"), quantity=0), days=1)
    with pytest.raises(ValueError):
        pricing.line_subtotal(pricing.PriceLine(unit_rate=Decimal("1")), days=0)


def test_gateway_amount_is_whole_rupiah():
    assert pricing.to_gateway_amount(Decimal("1125001.50")) == 1125002
