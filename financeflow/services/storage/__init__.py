"""
Storage Services Package

Provides abstract interfaces and an in-memory implementation for the
account/envelope store and the audit sink.
"""

from financeflow.services.storage.interface import (
    AuditSinkInterface,
    DuplicateError,
    LedgerStoreInterface,
    NotFoundError,
    StorageError,
)
from financeflow.services.storage.memory import (
    InMemoryAuditSink,
    InMemoryLedgerStore,
)

__all__ = [
    # Interfaces
    "AuditSinkInterface",
    "LedgerStoreInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditSink",
    "InMemoryLedgerStore",
]
