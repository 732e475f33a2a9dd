"""
Audit Logger

DESIGN DECISION: Every balance mutation in the system is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. An observable signal for advisory conditions the engine does not block

The audit logger:
- Is synchronous, like the core it observes
- Gracefully handles sink failures (never breaks a ledger operation)
- Supports correlation IDs to trace related events
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from financeflow.config import get_settings
from financeflow.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from financeflow.services.storage import AuditSinkInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: Optional[str] = None) -> None:
    """Route structured logs to stderr at the given or configured level."""
    level = level or get_settings().log_level
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit sink (for persistence and user visibility), if configured
    """

    def __init__(
        self,
        sink: Optional[AuditSinkInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Storage backend for audit events.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = structlog.get_logger("financeflow.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to the sink if available.

        Returns True if the sink write succeeded (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                return self._sink.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_effect_applied(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a transaction effect being applied."""
        self.log(AuditEventBuilder.effect_applied(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_effect_reversed(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a transaction effect being reversed."""
        self.log(AuditEventBuilder.effect_reversed(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_envelope_overdrawn(
        self,
        envelope_id: str,
        overdraft: Decimal,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an envelope going negative."""
        self.log(AuditEventBuilder.envelope_overdrawn(
            envelope_id=envelope_id,
            overdraft=overdraft,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    def log_reference_unresolved(
        self,
        transaction_id: str,
        slot: str,
        reference_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a skipped slot whose id matched no record."""
        self.log(AuditEventBuilder.reference_unresolved(
            transaction_id=transaction_id,
            slot=slot,
            reference_id=reference_id,
            correlation_id=correlation_id,
        ))

    def log_transaction_rejected(
        self,
        transaction_id: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a transaction blocked by pre-flight validation."""
        self.log(AuditEventBuilder.transaction_rejected(
            transaction_id=transaction_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_projection(
        self,
        strategy: Optional[str],
        debt_count: int,
        months: int,
        total_interest: Decimal,
        reached_horizon: bool,
    ) -> None:
        """Log a finished payoff projection."""
        self.log(AuditEventBuilder.projection_completed(
            strategy=strategy,
            debt_count=debt_count,
            months=months,
            total_interest=total_interest,
            reached_horizon=reached_horizon,
        ))

    def log_networth_recorded(self, snapshot_date, net_worth: Decimal) -> None:
        """Log a net-worth snapshot."""
        self.log(AuditEventBuilder.networth_recorded(
            snapshot_date=snapshot_date,
            net_worth=net_worth,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a compound action (e.g., an edit).
    Pass it through all subsequent operations.
    """
    return uuid4()
