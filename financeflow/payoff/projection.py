"""
Debt Payoff Projection

Month-by-month amortization of a set of debts under a fixed payment budget.

Each simulated month:
1. Every open debt accrues interest, then pays its minimum.
2. A pool of extra_payment plus freed minimums cascades over the open debts
   in strategy order; each absorbs up to its balance, the rest rolls on.
3. Debts at or below the paid-off threshold are zeroed. Their minimums join
   the pool from the following month.
4. End-of-month balances are recorded in the timeline.

The simulation stops when every debt is cleared or at the horizon. A debt
still open at the horizon is reported as NOT_PAYABLE; nothing is
extrapolated past it.

DESIGN DECISION: Both operations work on cloned balances. They never touch
the Account records they are given.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from financeflow.config import EngineSettings, get_settings
from financeflow.errors import InvalidHorizonError
from financeflow.models.account import Account
from financeflow.models.debt import (
    DebtPayoffPlan,
    PayoffEstimate,
    PayoffStatus,
    ProjectionResult,
    TimelineEntry,
)
from financeflow.payoff.ordering import order_debts
from financeflow.scheduling import add_months


ZERO = Decimal("0")


@dataclass
class DebtState:
    """Simulation copy of a liability."""

    id: str
    balance: Decimal
    monthly_rate: Decimal
    min_payment: Decimal

    @classmethod
    def from_account(cls, account: Account) -> "DebtState":
        return cls(
            id=account.id,
            balance=Decimal(account.balance),
            monthly_rate=account.monthly_rate,
            min_payment=Decimal(account.min_payment or 0),
        )

    def accrue(self) -> Decimal:
        """Add one month of interest and return it."""
        interest = self.balance * self.monthly_rate
        self.balance += interest
        return interest

    def pay(self, amount: Decimal) -> Decimal:
        """Pay up to `amount` and return what was actually applied."""
        applied = min(amount, self.balance)
        self.balance -= applied
        return applied


DebtInput = Union[Account, DebtState]


def _resolve_horizon(horizon_months: Optional[int], settings: EngineSettings) -> int:
    """Use the configured horizon unless one is given; anything below 1 is rejected."""
    if horizon_months is None:
        return settings.payoff_horizon_months
    if horizon_months < 1:
        raise InvalidHorizonError(
            f"Projection horizon must be at least 1 month, got {horizon_months}"
        )
    return horizon_months


def _clone(debt: DebtInput) -> DebtState:
    if isinstance(debt, DebtState):
        return DebtState(
            id=debt.id,
            balance=debt.balance,
            monthly_rate=debt.monthly_rate,
            min_payment=debt.min_payment,
        )
    return DebtState.from_account(debt)


def project_payoff(
    ordered_debts: Sequence[DebtInput],
    extra_payment: Decimal = ZERO,
    horizon_months: Optional[int] = None,
    settings: Optional[EngineSettings] = None,
) -> ProjectionResult:
    """
    Simulate paying off `ordered_debts` (already in strategy order).

    Args:
        ordered_debts: Liabilities in payoff order
        extra_payment: Monthly amount on top of all minimums
        horizon_months: Simulation ceiling; defaults to the configured horizon
        settings: Engine settings; defaults to get_settings()

    Returns:
        ProjectionResult with months, totals and one timeline entry per month
    """
    settings = settings or get_settings()
    horizon = _resolve_horizon(horizon_months, settings)
    threshold = settings.paid_off_threshold
    extra = Decimal(extra_payment)

    debts = [_clone(d) for d in ordered_debts]
    # Debts that start cleared never pay a minimum, so they free nothing
    for debt in debts:
        if debt.balance <= threshold:
            debt.balance = ZERO

    freed = ZERO
    total_interest = ZERO
    total_paid = ZERO
    timeline: list[TimelineEntry] = []
    payoff_months: dict[str, int] = {}
    month = 0

    while month < horizon and any(d.balance > threshold for d in debts):
        month += 1
        active = [d for d in debts if d.balance > threshold]

        for debt in active:
            total_interest += debt.accrue()
            total_paid += debt.pay(debt.min_payment)

        pool = extra + freed
        for debt in active:
            if pool <= 0:
                break
            if debt.balance <= threshold:
                continue
            applied = debt.pay(pool)
            pool -= applied
            total_paid += applied

        for debt in active:
            if debt.balance <= threshold:
                debt.balance = ZERO
                freed += debt.min_payment
                payoff_months[debt.id] = month

        timeline.append(TimelineEntry(
            month=month,
            balances={d.id: d.balance for d in debts},
        ))

    cleared = all(d.balance <= threshold for d in debts)
    return ProjectionResult(
        status=PayoffStatus.PAID_OFF if cleared else PayoffStatus.NOT_PAYABLE,
        months=month,
        total_interest=total_interest,
        total_paid=total_paid,
        timeline=timeline,
        payoff_order=[d.id for d in debts],
        payoff_months=payoff_months,
    )


def calculate_payoff_date(
    debt: DebtInput,
    start_date: Optional[date] = None,
    horizon_months: Optional[int] = None,
    settings: Optional[EngineSettings] = None,
) -> PayoffEstimate:
    """
    Estimate when a single debt is cleared by its minimum payment alone.

    Returns NOT_PAYABLE immediately when the minimum does not exceed the
    first month's interest, instead of looping to the horizon.
    """
    settings = settings or get_settings()
    horizon = _resolve_horizon(horizon_months, settings)
    threshold = settings.paid_off_threshold
    start_date = start_date or date.today()
    state = _clone(debt)

    if state.balance <= threshold:
        return PayoffEstimate(
            debt_id=state.id,
            status=PayoffStatus.PAID_OFF,
            months=0,
            payoff_date=start_date,
        )

    if state.min_payment - state.balance * state.monthly_rate <= 0:
        return PayoffEstimate(debt_id=state.id, status=PayoffStatus.NOT_PAYABLE)

    months = 0
    total_interest = ZERO
    while state.balance > threshold and months < horizon:
        months += 1
        total_interest += state.accrue()
        state.pay(state.min_payment)

    if state.balance > threshold:
        return PayoffEstimate(
            debt_id=state.id,
            status=PayoffStatus.NOT_PAYABLE,
            total_interest=total_interest,
        )

    return PayoffEstimate(
        debt_id=state.id,
        status=PayoffStatus.PAID_OFF,
        months=months,
        total_interest=total_interest,
        payoff_date=add_months(start_date, months),
    )


def project_plan(
    plan: DebtPayoffPlan,
    accounts: Iterable[Account],
    extra_payment: Optional[Decimal] = None,
    settings: Optional[EngineSettings] = None,
) -> ProjectionResult:
    """
    Order the plan's liabilities by its strategy and project them.

    extra_payment overrides the plan's own extra payment for what-if runs.
    """
    debts = order_debts(plan, accounts)
    extra = plan.extra_payment if extra_payment is None else extra_payment
    return project_payoff(debts, extra, settings=settings)
