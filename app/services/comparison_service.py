"""
app/services/comparison_service.py

Comparison of a caller's rent against the market average.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.rental_record import AverageRentResult

ANNUAL_RENT_INCREASE = 0.05
ADJUSTMENT_MIN_AGE_MONTHS = 6


@dataclass(frozen=True)
class RentComparison:
    average: float
    delta: float
    percent: float
    data_age_months: int | None
    data_age_mention: str
    adjusted_average: float | None
    adjustment_applied: bool
    category: str | None = None


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def describe_data_age(months: int | None) -> str:
    """
    Human wording for a data age, e.g. "1 year and 3 months old".

    >>> describe_data_age(0)
    'current'
    >>> describe_data_age(14)
    '1 year and 2 months old'
    """

    if months is None:
        return "of unknown age"
    if months <= 0:
        return "current"
    years, remainder = divmod(months, 12)
    if years == 0:
        return f"{_plural(remainder, 'month')} old"
    if remainder == 0:
        return f"{_plural(years, 'year')} old"
    return f"{_plural(years, 'year')} and {_plural(remainder, 'month')} old"


def adjust_for_age(average: float, months: int | None) -> float | None:
    """
    Inflate a stale average at 5% a year, or None when the data is fresh.
    """

    if months is None or months <= ADJUSTMENT_MIN_AGE_MONTHS:
        return None
    return average * (1 + ANNUAL_RENT_INCREASE / 12 * months)


def build_comparison(result: AverageRentResult, price: float) -> RentComparison:
    """
    Compare a price against a non-empty lookup result.
    """

    if result.value is None or result.value <= 0:
        raise ValueError("Comparison requires a positive average rent")

    average = result.value
    delta = price - average
    adjusted = adjust_for_age(average, result.data_age_months)
    return RentComparison(
        average=average,
        delta=delta,
        percent=delta / average,
        data_age_months=result.data_age_months,
        data_age_mention=describe_data_age(result.data_age_months),
        adjusted_average=adjusted,
        adjustment_applied=adjusted is not None,
        category=result.category,
    )
