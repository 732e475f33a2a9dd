"""
Ledger Effect Engine

Applies and reverses the effect of a transaction on the account and envelope
store. apply_effect and reverse_effect are the only way balances change in
response to a transaction:

- edit   = reverse_effect(old) then apply_effect(new)
- delete = reverse_effect(existing), then the host drops the record

DESIGN DECISION: The engine is advisory about money, strict about shape.
- It never rejects an amount larger than the source balance. Funds checks
  belong to the caller (see financeflow.validation).
- An overdrawn envelope is allowed and reported through EnvelopeOverdrawn.
- An id that matches no record skips that slot. The skip is logged, not fixed.
- An unknown type or a non-positive amount raises InvalidTransactionError
  before anything is touched.
"""

import threading
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional
from uuid import UUID

from pydantic import BaseModel

from financeflow.audit import AuditLogger, create_correlation_id
from financeflow.config import EngineSettings, get_settings
from financeflow.errors import InvalidTransactionError
from financeflow.models.account import (
    Account,
    ContributionEntry,
    ContributionType,
    HistoryKind,
    PaymentEntry,
    WithdrawalEntry,
    history_entry_id,
)
from financeflow.models.envelope import Envelope, EnvelopeOverdrawn
from financeflow.models.transaction import Transaction, TransactionType
from financeflow.services.storage import LedgerStoreInterface


ZERO = Decimal("0")

OverdrawnHandler = Callable[[EnvelopeOverdrawn], None]


def _debit(account: Account, amount: Decimal) -> None:
    """Money leaves the account: assets shrink, liabilities grow."""
    if account.is_asset:
        account.balance -= amount
    else:
        account.balance += amount


def _credit(account: Account, amount: Decimal) -> None:
    """Money enters the account: assets grow, liabilities shrink."""
    if account.is_asset:
        account.balance += amount
    else:
        account.balance -= amount


class LedgerEffectEngine:
    """
    Applies transaction effects to an explicit store.

    The engine holds no balances of its own. All state lives in the store
    passed in, and every call runs to completion under a re-entrant lock so
    an edit (reverse + apply) is atomic for any concurrent reader.
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[EngineSettings] = None,
        on_overdrawn: Optional[OverdrawnHandler] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings()
        self._on_overdrawn = on_overdrawn
        self._lock = threading.RLock()

        self._appliers = {
            TransactionType.EXPENSE: self._apply_expense,
            TransactionType.INCOME: self._apply_income,
            TransactionType.TRANSFER: self._apply_transfer,
            TransactionType.PAYMENT: self._apply_payment,
            TransactionType.CONTRIBUTION: self._apply_contribution,
        }
        self._reversers = {
            TransactionType.EXPENSE: self._reverse_expense,
            TransactionType.INCOME: self._reverse_income,
            TransactionType.TRANSFER: self._reverse_transfer,
            TransactionType.PAYMENT: self._reverse_payment,
            TransactionType.CONTRIBUTION: self._reverse_contribution,
        }

    @property
    def store(self) -> LedgerStoreInterface:
        return self._store

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def apply_effect(
        self,
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> list[EnvelopeOverdrawn]:
        """
        Apply a transaction's effect to the store.

        Returns:
            Overdraft notices for envelopes left below zero (possibly empty).
            Each notice is also passed to the on_overdrawn handler.

        Raises:
            InvalidTransactionError: unknown type or non-positive amount
        """
        txn_type, amount = self._check(transaction)

        with self._lock:
            notices = self._appliers[txn_type](transaction, amount, correlation_id)

        self._audit_logger.log_effect_applied(
            transaction_id=transaction.id,
            transaction_type=txn_type.value,
            amount=amount,
            correlation_id=correlation_id,
        )
        for notice in notices:
            self._audit_logger.log_envelope_overdrawn(
                envelope_id=notice.envelope_id,
                overdraft=notice.overdraft,
                transaction_id=notice.transaction_id,
                correlation_id=correlation_id,
            )
            if self._on_overdrawn:
                self._on_overdrawn(notice)

        return notices

    def reverse_effect(
        self,
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Undo a previously applied transaction.

        Restores every touched balance and removes history entries whose
        id derives from this transaction's id.

        Raises:
            InvalidTransactionError: unknown type or non-positive amount
        """
        txn_type, amount = self._check(transaction)

        with self._lock:
            self._reversers[txn_type](transaction, amount, correlation_id)

        self._audit_logger.log_effect_reversed(
            transaction_id=transaction.id,
            transaction_type=txn_type.value,
            amount=amount,
            correlation_id=correlation_id,
        )

    def edit_effect(
        self,
        old: Transaction,
        new: Transaction,
    ) -> list[EnvelopeOverdrawn]:
        """
        Replace the effect of `old` with the effect of `new` atomically.

        Every record either transaction touches is snapshotted first. If
        anything fails, including the on_overdrawn handler, the records are
        restored before the error propagates, leaving only `old` applied.
        """
        self._check(old)
        self._check(new)
        correlation_id = create_correlation_id()

        with self._lock:
            snapshot = self._snapshot(old, new)
            try:
                self.reverse_effect(old, correlation_id)
                return self.apply_effect(new, correlation_id)
            except Exception:
                self._restore(snapshot)
                raise

    def delete_effect(self, transaction: Transaction) -> None:
        """Undo the effect of a transaction that is being deleted."""
        self.reverse_effect(transaction)

    # =========================================================================
    # VALIDATION & LOOKUPS
    # =========================================================================

    def _check(self, transaction: Transaction) -> tuple[TransactionType, Decimal]:
        """
        Reject malformed transactions.

        Models built with model_construct skip pydantic validation, so the
        type and amount are checked again here.
        """
        raw_type = getattr(transaction, "type", None)
        try:
            txn_type = TransactionType(raw_type)
        except ValueError:
            raise InvalidTransactionError(f"Unknown transaction type: {raw_type!r}")

        raw_amount = getattr(transaction, "amount", None)
        try:
            amount = Decimal(str(raw_amount))
        except (InvalidOperation, ValueError):
            raise InvalidTransactionError(f"Invalid transaction amount: {raw_amount!r}")
        if not amount.is_finite() or amount <= 0:
            raise InvalidTransactionError(
                f"Transaction amount must be positive, got {raw_amount!r}"
            )

        if not getattr(transaction, "id", None):
            raise InvalidTransactionError("Transaction id is required")

        return txn_type, amount

    def _account(
        self,
        transaction: Transaction,
        slot: str,
        correlation_id: Optional[UUID],
    ) -> Optional[Account]:
        account_id = getattr(transaction, slot, None)
        if not account_id:
            return None
        account = self._store.get_account(account_id)
        if account is None:
            self._audit_logger.log_reference_unresolved(
                transaction_id=transaction.id,
                slot=slot,
                reference_id=account_id,
                correlation_id=correlation_id,
            )
        return account

    def _envelope(
        self,
        transaction: Transaction,
        correlation_id: Optional[UUID],
    ) -> Optional[Envelope]:
        envelope_id = getattr(transaction, "envelope_id", None)
        if not envelope_id:
            return None
        envelope = self._store.get_envelope(envelope_id)
        if envelope is None:
            self._audit_logger.log_reference_unresolved(
                transaction_id=transaction.id,
                slot="envelope_id",
                reference_id=envelope_id,
                correlation_id=correlation_id,
            )
        return envelope

    def _snapshot(self, *transactions: Transaction) -> list[tuple[BaseModel, BaseModel]]:
        """Deep copies of every account and envelope the transactions reference."""
        seen = set()
        pairs = []
        for transaction in transactions:
            for slot in ("from_account_id", "to_account_id"):
                account_id = getattr(transaction, slot, None)
                account = self._store.get_account(account_id) if account_id else None
                if account is not None and id(account) not in seen:
                    seen.add(id(account))
                    pairs.append((account, account.model_copy(deep=True)))

            envelope_id = getattr(transaction, "envelope_id", None)
            envelope = self._store.get_envelope(envelope_id) if envelope_id else None
            if envelope is not None and id(envelope) not in seen:
                seen.add(id(envelope))
                pairs.append((envelope, envelope.model_copy(deep=True)))
        return pairs

    @staticmethod
    def _restore(snapshot: list[tuple[BaseModel, BaseModel]]) -> None:
        # Restore in place; the store hands out live records
        for live, saved in snapshot:
            for name in type(live).model_fields:
                setattr(live, name, getattr(saved, name))

    # =========================================================================
    # SHARED MOVES
    # =========================================================================

    def _debit_source(self, transaction: Transaction, account: Account, amount: Decimal) -> None:
        """Debit a source account, logging a withdrawal on contribution-tracked assets."""
        _debit(account, amount)
        if account.is_asset and account.tracks_contributions:
            entry_id = history_entry_id(transaction.id, HistoryKind.WITHDRAWAL)
            account.withdrawals[entry_id] = WithdrawalEntry(
                id=entry_id,
                transaction_id=transaction.id,
                amount=amount,
                date=transaction.date,
            )

    def _undo_debit_source(self, transaction: Transaction, account: Account, amount: Decimal) -> None:
        _credit(account, amount)
        account.withdrawals.pop(history_entry_id(transaction.id, HistoryKind.WITHDRAWAL), None)

    def _spend_envelope(
        self,
        transaction: Transaction,
        envelope: Envelope,
        amount: Decimal,
    ) -> list[EnvelopeOverdrawn]:
        envelope.balance -= amount
        envelope.spent += amount
        if envelope.is_overdrawn:
            return [EnvelopeOverdrawn(
                envelope_id=envelope.id,
                overdraft=envelope.overdraft,
                transaction_id=transaction.id,
            )]
        return []

    # =========================================================================
    # EXPENSE
    # =========================================================================

    def _apply_expense(self, txn, amount, correlation_id) -> list[EnvelopeOverdrawn]:
        # No source account means untracked cash
        source = self._account(txn, "from_account_id", correlation_id)
        if source:
            self._debit_source(txn, source, amount)

        envelope = self._envelope(txn, correlation_id)
        if envelope:
            return self._spend_envelope(txn, envelope, amount)
        return []

    def _reverse_expense(self, txn, amount, correlation_id) -> None:
        source = self._account(txn, "from_account_id", correlation_id)
        if source:
            self._undo_debit_source(txn, source, amount)

        envelope = self._envelope(txn, correlation_id)
        if envelope:
            envelope.balance += amount
            envelope.spent = max(ZERO, envelope.spent - amount)

    # =========================================================================
    # INCOME
    # =========================================================================

    def _apply_income(self, txn, amount, correlation_id) -> list[EnvelopeOverdrawn]:
        target = self._account(txn, "to_account_id", correlation_id)
        if target:
            _credit(target, amount)
        return []

    def _reverse_income(self, txn, amount, correlation_id) -> None:
        target = self._account(txn, "to_account_id", correlation_id)
        if target:
            _debit(target, amount)

    # =========================================================================
    # TRANSFER
    # =========================================================================

    def _apply_transfer(self, txn, amount, correlation_id) -> list[EnvelopeOverdrawn]:
        source = self._account(txn, "from_account_id", correlation_id)
        if source:
            self._debit_source(txn, source, amount)

        target = self._account(txn, "to_account_id", correlation_id)
        if target:
            _credit(target, amount)

        # Purpose-tracking transfers fund the envelope
        envelope = self._envelope(txn, correlation_id)
        if envelope:
            envelope.balance += amount
        return []

    def _reverse_transfer(self, txn, amount, correlation_id) -> None:
        source = self._account(txn, "from_account_id", correlation_id)
        if source:
            self._undo_debit_source(txn, source, amount)

        target = self._account(txn, "to_account_id", correlation_id)
        if target:
            _debit(target, amount)

        envelope = self._envelope(txn, correlation_id)
        if envelope:
            envelope.balance -= amount

    # =========================================================================
    # PAYMENT
    # =========================================================================

    def _apply_payment(self, txn, amount, correlation_id) -> list[EnvelopeOverdrawn]:
        source = self._account(txn, "from_account_id", correlation_id)
        if source:
            self._debit_source(txn, source, amount)

        target = self._account(txn, "to_account_id", correlation_id)
        if target is None:
            return []

        if target.is_asset:
            _credit(target, amount)
            return []

        balance_before = target.balance
        if target.is_revolving(self._settings.revolving_categories_set):
            # Revolving credit: no monthly accrual at payment time
            interest = ZERO
            principal = amount
        else:
            interest = max(balance_before, ZERO) * target.monthly_rate
            principal = max(ZERO, amount - interest)
        balance_after = max(ZERO, balance_before - principal)
        target.balance = balance_after

        entry_id = history_entry_id(txn.id, HistoryKind.PAYMENT)
        target.payments[entry_id] = PaymentEntry(
            id=entry_id,
            transaction_id=txn.id,
            amount=amount,
            principal=principal,
            interest=interest,
            balance_before=balance_before,
            balance_after=balance_after,
            date=txn.date,
        )
        return []

    def _reverse_payment(self, txn, amount, correlation_id) -> None:
        source = self._account(txn, "from_account_id", correlation_id)
        if source:
            self._undo_debit_source(txn, source, amount)

        target = self._account(txn, "to_account_id", correlation_id)
        if target is None:
            return

        if target.is_asset:
            _debit(target, amount)
            return

        entry = target.payments.pop(history_entry_id(txn.id, HistoryKind.PAYMENT), None)
        if entry is None:
            # Nothing was recorded against this account, so nothing to restore
            self._audit_logger.log_reference_unresolved(
                transaction_id=txn.id,
                slot="payments",
                reference_id=history_entry_id(txn.id, HistoryKind.PAYMENT),
                correlation_id=correlation_id,
            )
            return
        target.balance += entry.balance_reduction

    # =========================================================================
    # CONTRIBUTION
    # =========================================================================

    def _apply_contribution(self, txn, amount, correlation_id) -> list[EnvelopeOverdrawn]:
        target = self._account(txn, "to_account_id", correlation_id)
        if target:
            _credit(target, amount)
            entry_id = history_entry_id(txn.id, HistoryKind.CONTRIBUTION)
            target.contributions[entry_id] = ContributionEntry(
                id=entry_id,
                transaction_id=txn.id,
                amount=amount,
                date=txn.date,
                contrib_type=txn.contrib_type or ContributionType.POSTTAX,
            )
            if target.tracks_contributions:
                target.ytd_contribution += amount

        # Pre-tax money never passed through a tracked account
        if txn.contrib_type != ContributionType.PRETAX:
            source = self._account(txn, "from_account_id", correlation_id)
            if source:
                self._debit_source(txn, source, amount)
        return []

    def _reverse_contribution(self, txn, amount, correlation_id) -> None:
        target = self._account(txn, "to_account_id", correlation_id)
        if target:
            _debit(target, amount)
            target.contributions.pop(history_entry_id(txn.id, HistoryKind.CONTRIBUTION), None)
            if target.tracks_contributions:
                target.ytd_contribution = max(ZERO, target.ytd_contribution - amount)

        if txn.contrib_type != ContributionType.PRETAX:
            source = self._account(txn, "from_account_id", correlation_id)
            if source:
                self._undo_debit_source(txn, source, amount)
