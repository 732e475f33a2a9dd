"""
Abstract Storage Interface

DESIGN DECISION: The ledger engine never reaches for a process-wide store.
Every core component receives an explicit store reference. This allows us to:
1. Keep the core free of persistence and sync concerns
2. Use in-memory storage for testing
3. Let the host back the store with whatever it persists to

The engine only reads records and mutates them in place. Creating and
deleting accounts and envelopes is host lifecycle, done through this
interface but never by the engine itself.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from financeflow.errors import FinanceFlowError
from financeflow.models.account import Account, AccountKind
from financeflow.models.audit import AuditEvent
from financeflow.models.envelope import Envelope


class LedgerStoreInterface(ABC):
    """
    Abstract interface for the account and envelope store.

    Lookups return the live record so the engine can mutate it in place.
    """

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """
        Retrieve an account by its ID.

        Returns:
            The account if found, None otherwise
        """
        pass

    @abstractmethod
    def get_envelope(self, envelope_id: str) -> Optional[Envelope]:
        """
        Retrieve an envelope by its ID.

        Returns:
            The envelope if found, None otherwise
        """
        pass

    @abstractmethod
    def list_accounts(self, kind: Optional[AccountKind] = None) -> list[Account]:
        """
        List accounts, optionally filtered by kind, in insertion order.
        """
        pass

    @abstractmethod
    def list_envelopes(self) -> list[Envelope]:
        """List envelopes in insertion order."""
        pass

    @abstractmethod
    def add_account(self, account: Account) -> None:
        """
        Add a new account.

        Raises:
            DuplicateError: If an account with the same id exists
        """
        pass

    @abstractmethod
    def add_envelope(self, envelope: Envelope) -> None:
        """
        Add a new envelope.

        Raises:
            DuplicateError: If an envelope with the same id exists
        """
        pass

    @abstractmethod
    def remove_account(self, account_id: str) -> None:
        """
        Remove an account.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        pass

    @abstractmethod
    def remove_envelope(self, envelope_id: str) -> None:
        """
        Remove an envelope.

        Raises:
            NotFoundError: If the envelope doesn't exist
        """
        pass


class AuditSinkInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., both halves of one edit),
        in chronological order.
        """
        pass

    @abstractmethod
    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        """Get all events for a specific entity in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(FinanceFlowError):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
