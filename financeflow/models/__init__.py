"""
Data Models Package

This package contains all Pydantic models used by FinanceFlow.
All data flowing through the core must conform to these schemas.
"""

from financeflow.models.account import (
    Account,
    AccountKind,
    ContributionEntry,
    ContributionType,
    HistoryKind,
    PaymentEntry,
    WithdrawalEntry,
    history_entry_id,
)
from financeflow.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditSeverity,
    LedgerEventType,
)
from financeflow.models.debt import (
    DebtPayoffPlan,
    PayoffEstimate,
    PayoffStatus,
    PayoffStrategy,
    ProjectionResult,
    TimelineEntry,
)
from financeflow.models.envelope import Envelope, EnvelopeOverdrawn
from financeflow.models.networth import NetWorthSnapshot
from financeflow.models.transaction import (
    ContributionTransaction,
    ExpenseTransaction,
    IncomeTransaction,
    PaymentTransaction,
    Transaction,
    TransactionType,
    TransferTransaction,
    parse_transaction,
)
from financeflow.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Account models
    "Account",
    "AccountKind",
    "ContributionEntry",
    "ContributionType",
    "HistoryKind",
    "PaymentEntry",
    "WithdrawalEntry",
    "history_entry_id",
    # Envelope models
    "Envelope",
    "EnvelopeOverdrawn",
    # Transaction models
    "ContributionTransaction",
    "ExpenseTransaction",
    "IncomeTransaction",
    "PaymentTransaction",
    "Transaction",
    "TransactionType",
    "TransferTransaction",
    "parse_transaction",
    # Debt models
    "DebtPayoffPlan",
    "PayoffEstimate",
    "PayoffStatus",
    "PayoffStrategy",
    "ProjectionResult",
    "TimelineEntry",
    # Net worth
    "NetWorthSnapshot",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditSeverity",
    "LedgerEventType",
]
