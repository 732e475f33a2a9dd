"""Envelope (sub-budget) model."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from financeflow.scheduling import Frequency, monthly_equivalent


class Envelope(BaseModel):
    """
    A named sub-budget earmarking funds for a category or linked account.

    balance may go negative: an overdrawn envelope is a valid, flagged state.
    spent never drops below zero.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(default="", max_length=200)
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Available funds"
    )
    spent: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Period-to-date spending"
    )
    target_amount: Decimal = Field(default=Decimal("0"), ge=0)
    target_frequency: Frequency = Frequency.MONTHLY
    linked_category_id: Optional[str] = None

    @property
    def is_overdrawn(self) -> bool:
        return self.balance < 0

    @property
    def overdraft(self) -> Decimal:
        """Magnitude of the overdraft, zero when not overdrawn."""
        return -self.balance if self.balance < 0 else Decimal("0")

    @property
    def monthly_target(self) -> Decimal:
        """Target amount converted to a monthly figure."""
        return monthly_equivalent(self.target_amount, self.target_frequency)


class EnvelopeOverdrawn(BaseModel):
    """Signal raised when a transaction leaves an envelope below zero."""

    envelope_id: str
    overdraft: Decimal = Field(..., gt=0)
    transaction_id: str
