"""
Audit Models for FinanceFlow

Every balance mutation and every projection is logged for audit purposes.
This provides:
1. Traceability of how each balance got to its value
2. Debugging information for surprising projections
3. An observable signal for advisory conditions (overdrafts, dangling ids)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import datetime
import json
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Ledger effects
    EFFECT_APPLIED = "effect_applied"
    EFFECT_REVERSED = "effect_reversed"
    ENVELOPE_OVERDRAWN = "envelope_overdrawn"
    REFERENCE_UNRESOLVED = "reference_unresolved"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Payoff projections
    PROJECTION_COMPLETED = "projection_completed"
    PROJECTION_HORIZON_REACHED = "projection_horizon_reached"

    # Net worth
    NETWORTH_RECORDED = "networth_recorded"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: LedgerEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'envelope', 'plan')"
    )
    entity_id: Optional[str] = None

    # For tracking related events (e.g. the reverse and apply of one edit)
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
        }

    def to_row(self) -> list:
        """
        Convert to a flat row for tabular export.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
        ]


def _money(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.effect_applied("t-1", "expense", amount)
        event = AuditEventBuilder.envelope_overdrawn("groceries", overdraft, "t-1")
    """

    @staticmethod
    def effect_applied(
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=LedgerEventType.EFFECT_APPLIED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Applied {transaction_type} of {_money(amount)}",
            details={
                "transaction_type": transaction_type,
                "amount": _money(amount),
            },
        )

    @staticmethod
    def effect_reversed(
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=LedgerEventType.EFFECT_REVERSED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Reversed {transaction_type} of {_money(amount)}",
            details={
                "transaction_type": transaction_type,
                "amount": _money(amount),
            },
        )

    @staticmethod
    def envelope_overdrawn(
        envelope_id: str,
        overdraft: Decimal,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=LedgerEventType.ENVELOPE_OVERDRAWN,
            severity=AuditSeverity.WARNING,
            entity_type="envelope",
            entity_id=envelope_id,
            correlation_id=correlation_id,
            description=f"Envelope overdrawn by {_money(overdraft)}",
            details={
                "overdraft": _money(overdraft),
                "transaction_id": transaction_id,
            },
        )

    @staticmethod
    def reference_unresolved(
        transaction_id: str,
        slot: str,
        reference_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=LedgerEventType.REFERENCE_UNRESOLVED,
            severity=AuditSeverity.DEBUG,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Skipped {slot}: no record with id {reference_id}",
            details={
                "slot": slot,
                "reference_id": reference_id,
            },
        )

    @staticmethod
    def transaction_rejected(
        transaction_id: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=LedgerEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def projection_completed(
        strategy: Optional[str],
        debt_count: int,
        months: int,
        total_interest: Decimal,
        reached_horizon: bool,
    ) -> AuditEvent:
        event_type = (
            LedgerEventType.PROJECTION_HORIZON_REACHED
            if reached_horizon
            else LedgerEventType.PROJECTION_COMPLETED
        )
        description = (
            f"Debts not cleared within {months} months"
            if reached_horizon
            else f"Debts cleared in {months} months"
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING if reached_horizon else AuditSeverity.INFO,
            entity_type="plan",
            description=description,
            details={
                "strategy": strategy,
                "debt_count": debt_count,
                "months": months,
                "total_interest": _money(total_interest),
            },
        )

    @staticmethod
    def networth_recorded(
        snapshot_date: datetime.date,
        net_worth: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=LedgerEventType.NETWORTH_RECORDED,
            entity_type="networth",
            entity_id=snapshot_date.isoformat(),
            description=f"Net worth recorded: {_money(net_worth)}",
            details={
                "net_worth": _money(net_worth),
            },
        )
