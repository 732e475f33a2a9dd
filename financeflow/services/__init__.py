"""Services package."""

from financeflow.services.storage import (
    AuditSinkInterface,
    DuplicateError,
    InMemoryAuditSink,
    InMemoryLedgerStore,
    LedgerStoreInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditSinkInterface",
    "DuplicateError",
    "InMemoryAuditSink",
    "InMemoryLedgerStore",
    "LedgerStoreInterface",
    "NotFoundError",
    "StorageError",
]
