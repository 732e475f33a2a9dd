"""
Calendar and frequency helpers shared by envelopes and payoff projections.

Monthly-equivalent factors follow the budgeting convention of 52 weeks / 12
months (about 4.33 weeks and 2.17 fortnights per month).
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum


class Frequency(str, Enum):
    """How often a target or recurring amount repeats."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


_MONTHLY_FACTORS: dict[Frequency, Decimal] = {
    Frequency.WEEKLY: Decimal("4.33"),
    Frequency.BIWEEKLY: Decimal("2.17"),
    Frequency.MONTHLY: Decimal("1"),
}

_MONTHLY_DIVISORS: dict[Frequency, Decimal] = {
    Frequency.QUARTERLY: Decimal("3"),
    Frequency.YEARLY: Decimal("12"),
}


def monthly_equivalent(amount: Decimal, frequency: Frequency) -> Decimal:
    """
    Convert an amount repeating at `frequency` into its monthly equivalent.

    Raises ValueError for a frequency outside Frequency.
    """
    amount = Decimal(amount)
    frequency = Frequency(frequency)
    if frequency in _MONTHLY_FACTORS:
        return amount * _MONTHLY_FACTORS[frequency]
    if frequency in _MONTHLY_DIVISORS:
        return amount / _MONTHLY_DIVISORS[frequency]
    return amount


def add_months(start: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's end."""
    index = start.year * 12 + (start.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_occurrence(current: date, frequency: Frequency) -> date:
    """Get the next date after `current` for something repeating at `frequency`."""
    frequency = Frequency(frequency)
    if frequency == Frequency.WEEKLY:
        return current + timedelta(days=7)
    if frequency == Frequency.BIWEEKLY:
        return current + timedelta(days=14)
    if frequency == Frequency.QUARTERLY:
        return add_months(current, 3)
    if frequency == Frequency.YEARLY:
        return add_months(current, 12)
    return add_months(current, 1)
