"""Ledger effect engine package."""

from financeflow.ledger.engine import LedgerEffectEngine, OverdrawnHandler

__all__ = ["LedgerEffectEngine", "OverdrawnHandler"]
