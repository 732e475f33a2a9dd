"""
Debt ordering by payoff strategy.

The order is a pure function of the plan and current balances/rates. It is
recomputed on every call and never cached across balance changes.
"""

from decimal import Decimal
from typing import Iterable

from financeflow.errors import InvalidStrategyError
from financeflow.models.account import Account
from financeflow.models.debt import DebtPayoffPlan, PayoffStrategy


def coerce_strategy(strategy) -> PayoffStrategy:
    """Turn a strategy value into a PayoffStrategy or fail loudly."""
    try:
        return PayoffStrategy(strategy)
    except ValueError:
        raise InvalidStrategyError(
            f"Unknown payoff strategy: {strategy!r}. "
            f"Allowed: {[s.value for s in PayoffStrategy]}"
        )


def order_debts(plan: DebtPayoffPlan, accounts: Iterable[Account]) -> list[Account]:
    """
    Get the plan's liabilities in payoff order.

    - avalanche: descending interest rate (missing rate counts as 0)
    - snowball: ascending balance

    Ties keep the relative order of `accounts`.
    """
    strategy = coerce_strategy(plan.strategy)
    included = set(plan.debt_ids)
    debts = [a for a in accounts if a.is_liability and a.id in included]

    if strategy == PayoffStrategy.AVALANCHE:
        return sorted(debts, key=lambda a: -(a.interest_rate or Decimal("0")))
    return sorted(debts, key=lambda a: a.balance)


def get_payoff_order(plan: DebtPayoffPlan, accounts: Iterable[Account]) -> list[str]:
    """Get the ids of the plan's liabilities in payoff order."""
    return [a.id for a in order_debts(plan, accounts)]
