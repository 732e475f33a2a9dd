"""
Exceptions raised by the FinanceFlow core.

Only malformed input is a hard error. Unresolved references, overdrafts and
insufficient funds are advisory and never raise inside the engines.
"""


class FinanceFlowError(Exception):
    """Base class for all FinanceFlow errors."""
    pass


class LedgerError(FinanceFlowError):
    """Error while applying or reversing a transaction effect."""
    pass


class InvalidTransactionError(LedgerError, ValueError):
    """Transaction has an unknown type, a non-positive amount or foreign fields."""
    pass


class TransactionRejectedError(LedgerError):
    """Pre-flight validation found blocking issues."""

    def __init__(self, message: str, validation=None):
        super().__init__(message)
        self.validation = validation


class PayoffError(FinanceFlowError):
    """Error during payoff ordering or projection."""
    pass


class InvalidStrategyError(PayoffError, ValueError):
    """Payoff strategy is not one of the supported values."""
    pass


class InvalidHorizonError(PayoffError, ValueError):
    """Projection horizon is shorter than one month."""
    pass
