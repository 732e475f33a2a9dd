"""
Main Orchestrator for FinanceFlow

This module ties together all the components and defines the end-to-end
flows the host drives:
1. Record (validate → apply → snapshot net worth)
2. Edit (validate → reverse old + apply new, atomically → snapshot)
3. Delete (reverse → drop the record → snapshot)
4. Project (validate plan → order → simulate)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the ledger engine without pre-flight validation
- Persistence and sync only ever see the state after a call returns
- Every step is audited

The ledger engine stays advisory about funds; the orchestrator is where a
host chooses to block on errors and surface warnings.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Union

from financeflow.audit import AuditLogger
from financeflow.config import EngineSettings, get_settings
from financeflow.errors import TransactionRejectedError
from financeflow.ledger import LedgerEffectEngine, OverdrawnHandler
from financeflow.models.debt import DebtPayoffPlan, PayoffEstimate, ProjectionResult
from financeflow.models.envelope import EnvelopeOverdrawn
from financeflow.models.networth import NetWorthSnapshot
from financeflow.models.transaction import Transaction, parse_transaction
from financeflow.models.validation import ValidationResult
from financeflow.networth import NetWorthRecorder
from financeflow.payoff import DebtPayoffPlanner
from financeflow.services.storage import AuditSinkInterface, LedgerStoreInterface, NotFoundError
from financeflow.validation import TransactionValidator


TransactionInput = Union[Transaction, dict[str, Any]]


class LedgerSession:
    """
    Orchestrates ledger changes and projections for one store.

    Keeps the transaction register (id → transaction) so edits and deletes
    can look up the effect they supersede.
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        transactions: Optional[Iterable[Transaction]] = None,
        audit_sink: Optional[AuditSinkInterface] = None,
        settings: Optional[EngineSettings] = None,
        on_overdrawn: Optional[OverdrawnHandler] = None,
        record_networth: bool = True,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._audit_logger = AuditLogger(audit_sink)
        self._engine = LedgerEffectEngine(
            store,
            audit_logger=self._audit_logger,
            settings=self._settings,
            on_overdrawn=on_overdrawn,
        )
        self._validator = TransactionValidator(store, settings=self._settings)
        self._planner = DebtPayoffPlanner(
            store,
            audit_logger=self._audit_logger,
            settings=self._settings,
        )
        self._networth = NetWorthRecorder(
            store,
            audit_logger=self._audit_logger,
            settings=self._settings,
        )
        self._record_networth = record_networth
        # Already-applied transactions loaded from persistence
        self._transactions: dict[str, Transaction] = {
            t.id: t for t in transactions or ()
        }

    @property
    def engine(self) -> LedgerEffectEngine:
        return self._engine

    @property
    def validator(self) -> TransactionValidator:
        return self._validator

    @property
    def networth(self) -> NetWorthRecorder:
        return self._networth

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions.values())

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    # =========================================================================
    # LEDGER FLOWS
    # =========================================================================

    def _coerce(self, transaction: TransactionInput) -> Transaction:
        if isinstance(transaction, dict):
            return parse_transaction(transaction)
        return transaction

    def _require_valid(self, validation: ValidationResult) -> None:
        if validation.has_errors:
            self._audit_logger.log_transaction_rejected(
                transaction_id=validation.subject_id,
                issues=[issue.model_dump() for issue in validation.issues],
            )
            raise TransactionRejectedError(
                self._validator.get_user_friendly_summary(validation),
                validation=validation,
            )

    def _snapshot(self) -> None:
        if self._record_networth:
            self._networth.record()

    def record(
        self,
        transaction: TransactionInput,
    ) -> tuple[ValidationResult, list[EnvelopeOverdrawn]]:
        """
        Validate and apply a new transaction.

        Returns:
            (validation, overdraft_notices). Warnings in the validation do
            not block; the host may show them.

        Raises:
            InvalidTransactionError: malformed transaction
            TransactionRejectedError: blocking validation errors
        """
        transaction = self._coerce(transaction)
        if transaction.id in self._transactions:
            raise TransactionRejectedError(
                f"Transaction already recorded: {transaction.id}"
            )

        validation = self._validator.validate(transaction)
        self._require_valid(validation)

        notices = self._engine.apply_effect(transaction)
        self._transactions[transaction.id] = transaction
        self._snapshot()
        return validation, notices

    def edit(
        self,
        transaction_id: str,
        new_transaction: TransactionInput,
    ) -> tuple[ValidationResult, list[EnvelopeOverdrawn]]:
        """
        Replace a recorded transaction.

        The new transaction keeps the old id so its history entries stay
        addressable.

        Raises:
            NotFoundError: No recorded transaction with this id
            TransactionRejectedError: blocking validation errors
        """
        old = self._transactions.get(transaction_id)
        if old is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        new = self._coerce(new_transaction)
        if new.id != transaction_id:
            new = new.model_copy(update={"id": transaction_id})

        validation = self._validator.validate(new, replacing=old)
        self._require_valid(validation)

        notices = self._engine.edit_effect(old, new)
        self._transactions[transaction_id] = new
        self._snapshot()
        return validation, notices

    def delete(self, transaction_id: str) -> Transaction:
        """
        Reverse and drop a recorded transaction.

        Raises:
            NotFoundError: No recorded transaction with this id
        """
        existing = self._transactions.get(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        self._engine.delete_effect(existing)
        del self._transactions[transaction_id]
        self._snapshot()
        return existing

    # =========================================================================
    # PROJECTION FLOWS
    # =========================================================================

    def project(
        self,
        plan: DebtPayoffPlan,
        extra_payment: Optional[Decimal] = None,
    ) -> ProjectionResult:
        """
        Validate and project a payoff plan.

        Raises:
            TransactionRejectedError: the plan names missing or non-liability debts
        """
        validation = self._validator.validate_plan(plan)
        if validation.has_errors:
            raise TransactionRejectedError(
                self._validator.get_user_friendly_summary(validation),
                validation=validation,
            )
        return self._planner.project(plan, extra_payment=extra_payment)

    def payoff_order(self, plan: DebtPayoffPlan) -> list[str]:
        return self._planner.order(plan)

    def estimate_payoff(self, debt_id: str, start_date: Optional[date] = None) -> PayoffEstimate:
        return self._planner.estimate(debt_id, start_date=start_date)

    def record_networth(self, today: Optional[date] = None) -> NetWorthSnapshot:
        return self._networth.record(today)
