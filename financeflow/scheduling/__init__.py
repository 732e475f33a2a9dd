"""Frequency and calendar helpers."""

from financeflow.scheduling.frequency import (
    Frequency,
    add_months,
    monthly_equivalent,
    next_occurrence,
)

__all__ = ["Frequency", "add_months", "monthly_equivalent", "next_occurrence"]
