"""
Account Models for FinanceFlow

An Account is either an asset (money you hold) or a liability (money you owe).
Balances are signed by convention: an asset balance rises with inflows, a
liability balance rises with new debt.

DESIGN DECISION: History logs are maps keyed by an id derived from the
originating transaction id. Reversing a transaction removes its entry in
O(1) instead of scanning a list for a matching suffix.
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AccountKind(str, Enum):
    """Which side of the balance sheet an account sits on."""
    ASSET = "asset"
    LIABILITY = "liability"


class ContributionType(str, Enum):
    """
    Tax treatment of a contribution.

    PRETAX funds never pass through a tracked account, so nothing is debited.
    """
    PRETAX = "pretax"
    POSTTAX = "posttax"


class HistoryKind(str, Enum):
    """Suffix used to derive a history entry id from a transaction id."""
    CONTRIBUTION = "contribution"
    PAYMENT = "payment"
    WITHDRAWAL = "withdrawal"


def history_entry_id(transaction_id: str, kind: HistoryKind) -> str:
    """Derive the history entry id for a transaction."""
    return f"{transaction_id}:{HistoryKind(kind).value}"


# =============================================================================
# HISTORY ENTRIES - append-only logs
# =============================================================================

class ContributionEntry(BaseModel):
    """A contribution credited to an asset account."""

    id: str
    transaction_id: str
    amount: Decimal = Field(..., gt=0)
    date: datetime.date
    contrib_type: ContributionType = ContributionType.POSTTAX


class PaymentEntry(BaseModel):
    """
    A payment credited to a liability.

    balance_before is kept alongside balance_after so a floored payoff
    can be undone exactly.
    """

    id: str
    transaction_id: str
    amount: Decimal = Field(..., gt=0)
    principal: Decimal = Field(..., ge=0)
    interest: Decimal = Field(..., ge=0)
    balance_before: Decimal
    balance_after: Decimal
    date: datetime.date

    @property
    def balance_reduction(self) -> Decimal:
        """How much the payment actually lowered the balance."""
        return self.balance_before - self.balance_after


class WithdrawalEntry(BaseModel):
    """Money taken out of a contribution-tracked asset."""

    id: str
    transaction_id: str
    amount: Decimal = Field(..., gt=0)
    date: datetime.date


# =============================================================================
# ACCOUNT
# =============================================================================

class Account(BaseModel):
    """
    An asset or liability account owned by the host.

    The ledger engine mutates balance and the history maps in place.
    It never creates or deletes accounts.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique account ID"
    )
    name: str = Field(
        default="",
        max_length=200,
        description="Display name"
    )
    kind: AccountKind
    category: str = Field(
        default="other",
        description="Account category (e.g. checking, credit-card, auto-loan)"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Current balance, signed by convention"
    )

    # Debt terms
    interest_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Annual interest rate in percent"
    )
    min_payment: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Minimum monthly payment"
    )
    original_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Amount originally borrowed"
    )
    credit_limit: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Credit limit for revolving accounts"
    )

    # Contribution tracking (retirement / savings accounts)
    ytd_contribution: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Year-to-date contributions; None when not tracked"
    )

    # Append-only history, keyed by derived entry id
    contributions: dict[str, ContributionEntry] = Field(default_factory=dict)
    payments: dict[str, PaymentEntry] = Field(default_factory=dict)
    withdrawals: dict[str, WithdrawalEntry] = Field(default_factory=dict)

    @property
    def is_asset(self) -> bool:
        return self.kind == AccountKind.ASSET

    @property
    def is_liability(self) -> bool:
        return self.kind == AccountKind.LIABILITY

    @property
    def tracks_contributions(self) -> bool:
        """Accounts with a year-to-date counter log contributions and withdrawals."""
        return self.ytd_contribution is not None

    @property
    def monthly_rate(self) -> Decimal:
        """Monthly interest rate as a fraction (missing rate counts as 0)."""
        return (self.interest_rate or Decimal("0")) / Decimal("100") / Decimal("12")

    @property
    def credit_utilization(self) -> Optional[Decimal]:
        """Balance as a fraction of the credit limit, if a limit is set."""
        if not self.credit_limit:
            return None
        return self.balance / self.credit_limit

    def is_revolving(self, revolving_categories: frozenset[str]) -> bool:
        """Check if this liability's category is a revolving credit type."""
        return self.is_liability and self.category.strip().lower() in revolving_categories
