"""Net-worth snapshot package."""

from financeflow.networth.recorder import NetWorthRecorder

__all__ = ["NetWorthRecorder"]
