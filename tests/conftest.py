"""Shared fixtures for FinanceFlow tests."""

from datetime import date
from decimal import Decimal

import pytest

from financeflow.config import EngineSettings
from financeflow.models import Account, AccountKind, Envelope
from financeflow.scheduling import Frequency
from financeflow.services.storage import InMemoryAuditSink, InMemoryLedgerStore


TODAY = date(2024, 6, 15)


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(
        payoff_horizon_months=360,
        paid_off_threshold=Decimal("0.01"),
        revolving_categories="credit-card,store-card",
        networth_retention_days=365,
    )


def build_accounts() -> list[Account]:
    return [
        Account(id="checking", name="Checking", kind=AccountKind.ASSET,
                category="checking", balance=Decimal("1000")),
        Account(id="savings", name="Savings", kind=AccountKind.ASSET,
                category="savings", balance=Decimal("500")),
        Account(id="visa", name="Visa", kind=AccountKind.LIABILITY,
                category="credit-card", balance=Decimal("300"),
                interest_rate=Decimal("24"), min_payment=Decimal("35"),
                credit_limit=Decimal("1000")),
        Account(id="car", name="Car loan", kind=AccountKind.LIABILITY,
                category="auto-loan", balance=Decimal("10000"),
                interest_rate=Decimal("6"), min_payment=Decimal("250"),
                original_amount=Decimal("15000")),
        Account(id="401k", name="401k", kind=AccountKind.ASSET,
                category="retirement", balance=Decimal("0"),
                ytd_contribution=Decimal("0")),
    ]


def build_envelopes() -> list[Envelope]:
    return [
        Envelope(id="groceries", name="Groceries", balance=Decimal("200"),
                 target_amount=Decimal("400"), target_frequency=Frequency.MONTHLY,
                 linked_category_id="groceries"),
        Envelope(id="vacation", name="Vacation", balance=Decimal("0"),
                 target_amount=Decimal("1200"), target_frequency=Frequency.YEARLY),
    ]


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore(accounts=build_accounts(), envelopes=build_envelopes())


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


def dump_state(store: InMemoryLedgerStore) -> dict:
    """Comparable snapshot of every account and envelope."""
    return {
        "accounts": {a.id: a.model_dump() for a in store.list_accounts()},
        "envelopes": {e.id: e.model_dump() for e in store.list_envelopes()},
    }
