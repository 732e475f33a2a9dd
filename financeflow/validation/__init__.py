"""Pre-flight validation package."""

from financeflow.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
