"""
Pre-flight Validation

DESIGN DECISION: The ledger engine deliberately performs no balance checks.
Insufficient funds, dangling ids and wrong account kinds are the caller's
responsibility, checked here BEFORE apply_effect runs.

Validation happens in two stages:

STAGE 1 - REFERENCE VALIDATION:
- Every referenced account/envelope exists
- Account kinds fit the transaction type
- A transfer does not loop back to its source

STAGE 2 - FUNDS VALIDATION:
- Source asset covers the amount
- Credit limit is not exceeded
- Envelope is not overdrawn
- Yearly contribution cap is respected

Stage 2 only runs when stage 1 passes. Stage 2 only produces warnings:
the engine accepts overdrafts, the host decides whether to ask the user.

IMPORTANT: Validation NEVER fixes data. It reports issues for review.
"""

from decimal import Decimal
from typing import Iterable, Optional

from financeflow.config import EngineSettings, get_settings
from financeflow.models.account import Account, AccountKind, ContributionType
from financeflow.models.debt import DebtPayoffPlan, PayoffStrategy
from financeflow.models.transaction import Transaction, TransactionType
from financeflow.models.validation import ValidationIssue, ValidationResult
from financeflow.services.storage import LedgerStoreInterface


# Which account kind each slot must hold, per transaction type.
# None means either kind is accepted.
_REQUIRED_KINDS: dict[TransactionType, dict[str, Optional[AccountKind]]] = {
    TransactionType.EXPENSE: {"from_account_id": None},
    TransactionType.INCOME: {"to_account_id": AccountKind.ASSET},
    TransactionType.TRANSFER: {
        "from_account_id": AccountKind.ASSET,
        "to_account_id": AccountKind.ASSET,
    },
    TransactionType.PAYMENT: {
        "from_account_id": AccountKind.ASSET,
        "to_account_id": AccountKind.LIABILITY,
    },
    TransactionType.CONTRIBUTION: {
        "from_account_id": AccountKind.ASSET,
        "to_account_id": AccountKind.ASSET,
    },
}


def _debits_source(transaction: Transaction) -> bool:
    """Does applying this transaction take money out of from_account_id?"""
    if not getattr(transaction, "from_account_id", None):
        return False
    if transaction.type == TransactionType.CONTRIBUTION:
        return transaction.contrib_type != ContributionType.PRETAX
    return True


class TransactionValidator:
    """
    Validates transactions and payoff plans against the current store.
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        settings: Optional[EngineSettings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings()

    def _validate_references(
        self,
        transaction: Transaction,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Reference validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        txn_type = TransactionType(transaction.type)

        for slot, required_kind in _REQUIRED_KINDS[txn_type].items():
            account_id = getattr(transaction, slot, None)
            if not account_id:
                continue

            if slot == "from_account_id" and not _debits_source(transaction):
                issues.append(ValidationIssue(
                    field=slot,
                    issue_type="ignored",
                    message="Pre-tax contributions do not debit a source account",
                    severity="info",
                ))
                continue

            account = self._store.get_account(account_id)
            if account is None:
                issues.append(ValidationIssue(
                    field=slot,
                    issue_type="unresolved",
                    message=f"Account {account_id} does not exist",
                    severity="error",
                    suggested_fix="Pick an existing account",
                ))
                continue

            if required_kind is not None and account.kind != required_kind:
                issues.append(ValidationIssue(
                    field=slot,
                    issue_type="wrong_kind",
                    message=(
                        f"A {txn_type.value} needs an {required_kind.value} account "
                        f"here, but {account_id} is a {account.kind.value}"
                    ),
                    severity="error",
                ))

        envelope_id = getattr(transaction, "envelope_id", None)
        if envelope_id and self._store.get_envelope(envelope_id) is None:
            issues.append(ValidationIssue(
                field="envelope_id",
                issue_type="unresolved",
                message=f"Envelope {envelope_id} does not exist",
                severity="error",
                suggested_fix="Pick an existing envelope or leave it empty",
            ))

        if (
            txn_type == TransactionType.TRANSFER
            and transaction.from_account_id == transaction.to_account_id
        ):
            issues.append(ValidationIssue(
                field="to_account_id",
                issue_type="same_account",
                message="Cannot transfer to the same account",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_funds(
        self,
        transaction: Transaction,
        replacing: Optional[Transaction] = None,
    ) -> list[ValidationIssue]:
        """
        Stage 2: Funds validation.

        `replacing` is the transaction being edited; its effect is credited
        back before checking, because the edit reverses it first.
        """
        issues = []
        amount = Decimal(transaction.amount)

        if _debits_source(transaction):
            source = self._store.get_account(transaction.from_account_id)
            issues.extend(self._check_source(source, amount, transaction, replacing))

        envelope_id = getattr(transaction, "envelope_id", None)
        if transaction.type == TransactionType.EXPENSE and envelope_id:
            envelope = self._store.get_envelope(envelope_id)
            available = envelope.balance
            if replacing is not None and getattr(replacing, "envelope_id", None) == envelope_id:
                if replacing.type == TransactionType.EXPENSE:
                    available += replacing.amount
            if available - amount < 0:
                issues.append(ValidationIssue(
                    field="envelope_id",
                    issue_type="overdraft",
                    message=(
                        f"Envelope {envelope_id} would be overdrawn by "
                        f"{amount - available:.2f}"
                    ),
                    severity="warning",
                    suggested_fix="Move funds into the envelope first",
                ))

        if transaction.type == TransactionType.PAYMENT:
            target = self._store.get_account(transaction.to_account_id)
            if amount > target.balance:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="overpayment",
                    message=(
                        f"Payment exceeds the {target.balance:.2f} owed; "
                        "the balance will stop at zero"
                    ),
                    severity="info",
                ))

        if transaction.type == TransactionType.CONTRIBUTION:
            cap = self._settings.yearly_contribution_cap
            target = self._store.get_account(transaction.to_account_id)
            if cap is not None and target.tracks_contributions:
                if target.ytd_contribution + amount > cap:
                    issues.append(ValidationIssue(
                        field="amount",
                        issue_type="over_cap",
                        message=(
                            f"Contribution would bring the year to "
                            f"{target.ytd_contribution + amount:.2f}, above the "
                            f"{cap:.2f} limit"
                        ),
                        severity="warning",
                    ))

        return issues

    def _check_source(
        self,
        source: Account,
        amount: Decimal,
        transaction: Transaction,
        replacing: Optional[Transaction],
    ) -> list[ValidationIssue]:
        restored = Decimal("0")
        if (
            replacing is not None
            and _debits_source(replacing)
            and replacing.from_account_id == source.id
        ):
            restored = Decimal(replacing.amount)

        if source.is_asset:
            available = source.balance + restored
            if available < amount:
                return [ValidationIssue(
                    field="from_account_id",
                    issue_type="insufficient_funds",
                    message=(
                        f"Account {source.id} has {available:.2f}, "
                        f"less than {amount:.2f}"
                    ),
                    severity="warning",
                    suggested_fix="Lower the amount or pick another account",
                )]
            return []

        if source.credit_limit is not None:
            owed = source.balance - restored + amount
            if owed > source.credit_limit:
                return [ValidationIssue(
                    field="from_account_id",
                    issue_type="over_limit",
                    message=(
                        f"Account {source.id} would owe {owed:.2f}, above its "
                        f"{source.credit_limit:.2f} limit"
                    ),
                    severity="warning",
                )]
        return []

    def validate(
        self,
        transaction: Transaction,
        replacing: Optional[Transaction] = None,
    ) -> ValidationResult:
        """
        Run the two-stage validation pipeline.

        Args:
            transaction: The transaction about to be applied
            replacing: The transaction it replaces, when editing

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        references_valid, reference_issues = self._validate_references(transaction)
        all_issues.extend(reference_issues)

        if references_valid:
            all_issues.extend(self._validate_funds(transaction, replacing))

        return ValidationResult(subject_id=transaction.id, issues=all_issues)

    def validate_plan(
        self,
        plan: DebtPayoffPlan,
        accounts: Optional[Iterable[Account]] = None,
    ) -> ValidationResult:
        """
        Check a payoff plan against the accounts that exist.

        debt_ids must all name existing liabilities.
        """
        issues = []
        by_id = {
            a.id: a
            for a in (accounts if accounts is not None else self._store.list_accounts())
        }

        try:
            PayoffStrategy(plan.strategy)
        except ValueError:
            issues.append(ValidationIssue(
                field="strategy",
                issue_type="invalid_value",
                message=f"Unknown payoff strategy: {plan.strategy!r}",
                severity="error",
            ))

        if plan.extra_payment < 0:
            issues.append(ValidationIssue(
                field="extra_payment",
                issue_type="invalid_value",
                message="Extra payment cannot be negative",
                severity="error",
            ))

        for debt_id in plan.debt_ids:
            account = by_id.get(debt_id)
            if account is None:
                issues.append(ValidationIssue(
                    field="debt_ids",
                    issue_type="unresolved",
                    message=f"Debt {debt_id} does not exist",
                    severity="error",
                    suggested_fix="Remove it from the plan",
                ))
            elif not account.is_liability:
                issues.append(ValidationIssue(
                    field="debt_ids",
                    issue_type="wrong_kind",
                    message=f"Account {debt_id} is not a liability",
                    severity="error",
                ))
            elif not account.min_payment:
                issues.append(ValidationIssue(
                    field="debt_ids",
                    issue_type="missing_terms",
                    message=f"Debt {debt_id} has no minimum payment",
                    severity="warning",
                    suggested_fix="Set a minimum payment for a realistic projection",
                ))

        return ValidationResult(subject_id="plan", issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a short summary of validation results for display.
        """
        if not result.issues:
            return "All checks passed."

        lines = []
        if result.has_errors:
            lines.append("Cannot continue:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"  - {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"    {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify:")
            for warning in result.warnings:
                lines.append(f"  - {warning}")

        return "\n".join(lines)
