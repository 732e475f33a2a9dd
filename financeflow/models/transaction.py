"""
Transaction Models for FinanceFlow

DESIGN DECISION: A transaction is a closed tagged union with one variant per
type. Each variant carries exactly the fields its type needs and forbids the
rest, so a payment can never carry a category and an income can never touch
an envelope.
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from financeflow.errors import InvalidTransactionError
from financeflow.models.account import ContributionType


class TransactionType(str, Enum):
    """Supported transaction types."""
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"
    PAYMENT = "payment"
    CONTRIBUTION = "contribution"


class TransactionBase(BaseModel):
    """Fields shared by every transaction variant."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    id: str = Field(
        ...,
        min_length=1,
        description="Unique transaction ID"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Transaction amount, always positive"
    )
    date: datetime.date = Field(
        default_factory=datetime.date.today,
        description="Date the transaction happened"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500
    )


class ExpenseTransaction(TransactionBase):
    """Money spent. Without a source account it is untracked cash."""
    type: Literal["expense"] = "expense"
    from_account_id: Optional[str] = None
    envelope_id: Optional[str] = None
    category_id: Optional[str] = None


class IncomeTransaction(TransactionBase):
    """Money received into an asset account."""
    type: Literal["income"] = "income"
    to_account_id: str
    category_id: Optional[str] = None


class TransferTransaction(TransactionBase):
    """Money moved between two accounts, optionally funding an envelope."""
    type: Literal["transfer"] = "transfer"
    from_account_id: str
    to_account_id: str
    envelope_id: Optional[str] = None


class PaymentTransaction(TransactionBase):
    """A payment towards a liability."""
    type: Literal["payment"] = "payment"
    from_account_id: Optional[str] = None
    to_account_id: str


class ContributionTransaction(TransactionBase):
    """A contribution into a savings or retirement asset."""
    type: Literal["contribution"] = "contribution"
    to_account_id: str
    from_account_id: Optional[str] = None
    contrib_type: ContributionType = ContributionType.POSTTAX


Transaction = Annotated[
    Union[
        ExpenseTransaction,
        IncomeTransaction,
        TransferTransaction,
        PaymentTransaction,
        ContributionTransaction,
    ],
    Field(discriminator="type"),
]

_transaction_adapter: TypeAdapter = TypeAdapter(Transaction)


def parse_transaction(data: dict[str, Any]) -> Transaction:
    """
    Build the right transaction variant from a mapping.

    Raises:
        InvalidTransactionError: unknown type, non-positive amount,
            missing required field or a field foreign to the type.
    """
    try:
        return _transaction_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidTransactionError(f"Invalid transaction: {e}") from e
