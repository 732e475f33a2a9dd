"""
Debt Payoff Models for FinanceFlow

The plan only stores which debts are included and how to order them.
The order itself is always recomputed from current balances and rates.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PayoffStrategy(str, Enum):
    """How debts are prioritized for extra payments."""
    AVALANCHE = "avalanche"  # Highest interest rate first
    SNOWBALL = "snowball"    # Smallest balance first


class PayoffStatus(str, Enum):
    """
    Outcome of a payoff projection.

    NOT_PAYABLE means the debt was not cleared within the horizon.
    No payoff date is extrapolated for it.
    """
    PAID_OFF = "paid_off"
    NOT_PAYABLE = "not_payable_within_horizon"


class DebtPayoffPlan(BaseModel):
    """A user's debt payoff plan."""

    strategy: PayoffStrategy = PayoffStrategy.AVALANCHE
    extra_payment: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Monthly amount on top of all minimum payments"
    )
    debt_ids: list[str] = Field(
        default_factory=list,
        description="Liability account ids included in the plan"
    )

    @field_validator('debt_ids')
    @classmethod
    def dedupe_debt_ids(cls, v: list[str]) -> list[str]:
        """Keep the first occurrence of each id."""
        return list(dict.fromkeys(v))


class TimelineEntry(BaseModel):
    """End-of-month balance of every debt in a projection."""

    month: int = Field(..., ge=1)
    balances: dict[str, Decimal] = Field(default_factory=dict)

    @property
    def total_balance(self) -> Decimal:
        return sum(self.balances.values(), Decimal("0"))


class ProjectionResult(BaseModel):
    """Result of a multi-debt payoff simulation."""

    status: PayoffStatus
    months: int = Field(..., ge=0)
    total_interest: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    timeline: list[TimelineEntry] = Field(default_factory=list)
    payoff_order: list[str] = Field(default_factory=list)
    payoff_months: dict[str, int] = Field(
        default_factory=dict,
        description="Month in which each cleared debt reached zero"
    )

    @property
    def is_paid_off(self) -> bool:
        return self.status == PayoffStatus.PAID_OFF

    @property
    def remaining_balance(self) -> Decimal:
        """Total balance left at the end of the simulation."""
        if not self.timeline:
            return Decimal("0")
        return self.timeline[-1].total_balance


class PayoffEstimate(BaseModel):
    """Result of a single-debt payoff calculation."""

    debt_id: str
    status: PayoffStatus
    months: Optional[int] = Field(
        default=None,
        ge=0,
        description="Months until payoff; None when not payable"
    )
    total_interest: Decimal = Decimal("0")
    payoff_date: Optional[date] = None

    @property
    def is_paid_off(self) -> bool:
        return self.status == PayoffStatus.PAID_OFF
