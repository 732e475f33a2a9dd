"""
Net-Worth Snapshot Recorder

Sums asset and liability balances into a dated time series. One snapshot is
kept per day: recording again on the same day replaces the earlier one.
Snapshots older than the retention window are dropped.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from financeflow.audit import AuditLogger
from financeflow.config import EngineSettings, get_settings
from financeflow.models.account import AccountKind
from financeflow.models.networth import NetWorthSnapshot
from financeflow.services.storage import LedgerStoreInterface


class NetWorthRecorder:
    """Records net-worth snapshots from the accounts in a store."""

    def __init__(
        self,
        store: LedgerStoreInterface,
        history: Optional[Iterable[NetWorthSnapshot]] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self._store = store
        self._history: list[NetWorthSnapshot] = sorted(history or [], key=lambda s: s.date)
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings()

    @property
    def history(self) -> list[NetWorthSnapshot]:
        """Snapshots in chronological order."""
        return list(self._history)

    def totals(self) -> tuple[Decimal, Decimal]:
        """Current (assets, liabilities) totals."""
        assets = sum(
            (a.balance for a in self._store.list_accounts(AccountKind.ASSET)),
            Decimal("0"),
        )
        liabilities = sum(
            (a.balance for a in self._store.list_accounts(AccountKind.LIABILITY)),
            Decimal("0"),
        )
        return assets, liabilities

    def record(self, today: Optional[date] = None) -> NetWorthSnapshot:
        """Record today's snapshot, replacing any earlier one for the same day."""
        today = today or date.today()
        assets, liabilities = self.totals()
        snapshot = NetWorthSnapshot(
            date=today,
            assets=assets,
            liabilities=liabilities,
            net_worth=assets - liabilities,
        )

        cutoff = today - timedelta(days=self._settings.networth_retention_days)
        kept = [s for s in self._history if s.date != today and s.date >= cutoff]
        kept.append(snapshot)
        self._history = sorted(kept, key=lambda s: s.date)

        self._audit_logger.log_networth_recorded(snapshot.date, snapshot.net_worth)
        return snapshot

    def latest(self) -> Optional[NetWorthSnapshot]:
        return self._history[-1] if self._history else None
