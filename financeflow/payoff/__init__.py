"""Debt payoff ordering and projection package."""

from financeflow.payoff.ordering import coerce_strategy, get_payoff_order, order_debts
from financeflow.payoff.planner import DebtPayoffPlanner
from financeflow.payoff.projection import (
    DebtState,
    calculate_payoff_date,
    project_payoff,
    project_plan,
)

__all__ = [
    "DebtPayoffPlanner",
    "DebtState",
    "calculate_payoff_date",
    "coerce_strategy",
    "get_payoff_order",
    "order_debts",
    "project_payoff",
    "project_plan",
]
