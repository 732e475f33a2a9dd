"""
In-Memory Storage

Reference implementation of the storage interfaces. Hosts that persist
elsewhere load their records into an InMemoryLedgerStore, run the core, and
write the mutated records back.
"""

from typing import Iterable, Optional
from uuid import UUID

from financeflow.models.account import Account, AccountKind
from financeflow.models.audit import AuditEvent
from financeflow.models.envelope import Envelope
from financeflow.services.storage.interface import (
    AuditSinkInterface,
    DuplicateError,
    LedgerStoreInterface,
    NotFoundError,
)


class InMemoryLedgerStore(LedgerStoreInterface):
    """Dict-backed account and envelope store."""

    def __init__(
        self,
        accounts: Optional[Iterable[Account]] = None,
        envelopes: Optional[Iterable[Envelope]] = None,
    ):
        self._accounts: dict[str, Account] = {}
        self._envelopes: dict[str, Envelope] = {}
        for account in accounts or ():
            self.add_account(account)
        for envelope in envelopes or ():
            self.add_envelope(envelope)

    def get_account(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    def get_envelope(self, envelope_id: str) -> Optional[Envelope]:
        return self._envelopes.get(envelope_id)

    def list_accounts(self, kind: Optional[AccountKind] = None) -> list[Account]:
        if kind is None:
            return list(self._accounts.values())
        return [a for a in self._accounts.values() if a.kind == kind]

    def list_envelopes(self) -> list[Envelope]:
        return list(self._envelopes.values())

    def add_account(self, account: Account) -> None:
        if account.id in self._accounts:
            raise DuplicateError(f"Account already exists: {account.id}")
        self._accounts[account.id] = account

    def add_envelope(self, envelope: Envelope) -> None:
        if envelope.id in self._envelopes:
            raise DuplicateError(f"Envelope already exists: {envelope.id}")
        self._envelopes[envelope.id] = envelope

    def remove_account(self, account_id: str) -> None:
        if account_id not in self._accounts:
            raise NotFoundError(f"Account not found: {account_id}")
        del self._accounts[account_id]

    def remove_envelope(self, envelope_id: str) -> None:
        if envelope_id not in self._envelopes:
            raise NotFoundError(f"Envelope not found: {envelope_id}")
        del self._envelopes[envelope_id]


class InMemoryAuditSink(AuditSinkInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
