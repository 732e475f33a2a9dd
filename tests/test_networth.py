"""
Tests for net-worth snapshots.
"""

from datetime import date, timedelta
from decimal import Decimal

from financeflow.audit import AuditLogger
from financeflow.models import LedgerEventType, NetWorthSnapshot
from financeflow.networth import NetWorthRecorder


def snapshot(day, net_worth="0"):
    return NetWorthSnapshot(
        date=day,
        assets=Decimal(net_worth),
        liabilities=Decimal("0"),
        net_worth=Decimal(net_worth),
    )


class TestNetWorthRecorder:
    """Tests for NetWorthRecorder."""

    def test_totals(self, store, settings):
        recorder = NetWorthRecorder(store, settings=settings)
        assets, liabilities = recorder.totals()
        assert assets == Decimal("1500")
        assert liabilities == Decimal("10300")

    def test_record_computes_net_worth(self, store, settings):
        recorder = NetWorthRecorder(store, settings=settings)
        result = recorder.record(date(2024, 6, 15))

        assert result.net_worth == Decimal("-8800")
        assert recorder.latest() == result

    def test_same_day_replaces(self, store, settings):
        recorder = NetWorthRecorder(store, settings=settings)
        recorder.record(date(2024, 6, 15))
        store.get_account("checking").balance = Decimal("2000")
        recorder.record(date(2024, 6, 15))

        assert len(recorder.history) == 1
        assert recorder.latest().assets == Decimal("2500")

    def test_retention_drops_old_snapshots(self, store, settings):
        today = date(2024, 6, 15)
        history = [
            snapshot(today - timedelta(days=400)),
            snapshot(today - timedelta(days=365)),
            snapshot(today - timedelta(days=30)),
        ]
        recorder = NetWorthRecorder(store, history=history, settings=settings)
        recorder.record(today)

        assert [s.date for s in recorder.history] == [
            today - timedelta(days=365),
            today - timedelta(days=30),
            today,
        ]

    def test_history_is_chronological(self, store, settings):
        history = [snapshot(date(2024, 6, 10)), snapshot(date(2024, 6, 1))]
        recorder = NetWorthRecorder(store, history=history, settings=settings)
        assert [s.date for s in recorder.history] == [date(2024, 6, 1), date(2024, 6, 10)]

    def test_empty_history(self, store, settings):
        assert NetWorthRecorder(store, settings=settings).latest() is None

    def test_record_is_audited(self, store, settings, audit_sink):
        recorder = NetWorthRecorder(store, audit_logger=AuditLogger(audit_sink), settings=settings)
        recorder.record(date(2024, 6, 15))
        assert audit_sink.events[-1].event_type == LedgerEventType.NETWORTH_RECORDED
