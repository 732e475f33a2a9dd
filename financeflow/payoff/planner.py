"""
Debt Payoff Planner

Binds the pure ordering and projection functions to a store and an audit
logger. Every call reads a fresh snapshot of the liabilities, so the order
always reflects current balances and rates.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from financeflow.audit import AuditLogger
from financeflow.config import EngineSettings, get_settings
from financeflow.models.account import AccountKind
from financeflow.models.debt import (
    DebtPayoffPlan,
    PayoffEstimate,
    PayoffStatus,
    PayoffStrategy,
    ProjectionResult,
)
from financeflow.payoff.ordering import coerce_strategy, get_payoff_order
from financeflow.payoff.projection import calculate_payoff_date, project_plan
from financeflow.services.storage import LedgerStoreInterface, NotFoundError


class DebtPayoffPlanner:
    """Runs payoff projections against the liabilities in a store."""

    def __init__(
        self,
        store: LedgerStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings()

    def order(self, plan: DebtPayoffPlan) -> list[str]:
        """Get the plan's debt ids in payoff order."""
        return get_payoff_order(plan, self._store.list_accounts(AccountKind.LIABILITY))

    def project(
        self,
        plan: DebtPayoffPlan,
        extra_payment: Optional[Decimal] = None,
    ) -> ProjectionResult:
        """
        Project the plan.

        Args:
            plan: The payoff plan
            extra_payment: Override the plan's extra payment (what-if runs)
        """
        strategy = coerce_strategy(plan.strategy)
        result = project_plan(
            plan,
            self._store.list_accounts(AccountKind.LIABILITY),
            extra_payment=extra_payment,
            settings=self._settings,
        )

        self._audit_logger.log_projection(
            strategy=strategy.value,
            debt_count=len(result.payoff_order),
            months=result.months,
            total_interest=result.total_interest,
            reached_horizon=result.status == PayoffStatus.NOT_PAYABLE,
        )
        return result

    def compare_strategies(self, plan: DebtPayoffPlan) -> dict[str, ProjectionResult]:
        """Project the same debts under every strategy."""
        return {
            strategy.value: self.project(plan.model_copy(update={"strategy": strategy}))
            for strategy in PayoffStrategy
        }

    def estimate(self, debt_id: str, start_date: Optional[date] = None) -> PayoffEstimate:
        """
        Estimate a single debt's payoff date from its minimum payment.

        Raises:
            NotFoundError: If no liability has this id
        """
        account = self._store.get_account(debt_id)
        if account is None or not account.is_liability:
            raise NotFoundError(f"Liability not found: {debt_id}")
        return calculate_payoff_date(account, start_date=start_date, settings=self._settings)
