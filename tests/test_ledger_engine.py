"""
Tests for the ledger effect engine.

Every rule is checked on apply, and every apply is checked to be undone
exactly by reverse.
"""

from decimal import Decimal

import pytest

from conftest import TODAY, dump_state
from financeflow.errors import InvalidTransactionError
from financeflow.ledger import LedgerEffectEngine
from financeflow.models import (
    ContributionTransaction,
    ContributionType,
    ExpenseTransaction,
    IncomeTransaction,
    PaymentTransaction,
    TransferTransaction,
)


@pytest.fixture
def engine(store, settings):
    return LedgerEffectEngine(store, settings=settings)


def balance(store, account_id):
    return store.get_account(account_id).balance


class TestExpense:
    """Tests for expense effects."""

    def test_expense_from_asset_debits_balance(self, engine, store):
        """Test that an expense lowers an asset balance."""
        engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("50"), date=TODAY, from_account_id="checking",
        ))
        assert balance(store, "checking") == Decimal("950")

    def test_expense_on_credit_card_increases_debt(self, engine, store):
        """Test that borrowing on a liability raises its balance."""
        engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("40"), date=TODAY, from_account_id="visa",
        ))
        assert balance(store, "visa") == Decimal("340")

    def test_expense_updates_envelope(self, engine, store):
        """Test envelope balance and spent counter."""
        engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("50"), date=TODAY,
            from_account_id="checking", envelope_id="groceries",
        ))
        envelope = store.get_envelope("groceries")
        assert envelope.balance == Decimal("150")
        assert envelope.spent == Decimal("50")

    def test_untracked_cash_expense_only_touches_envelope(self, engine, store):
        """Test that an expense without a source account leaves accounts alone."""
        before = {a.id: a.balance for a in store.list_accounts()}
        engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("20"), date=TODAY, envelope_id="groceries",
        ))
        assert {a.id: a.balance for a in store.list_accounts()} == before
        assert store.get_envelope("groceries").balance == Decimal("180")

    def test_reverse_clamps_spent_at_zero(self, engine, store):
        """Test that spent never goes negative on reverse."""
        txn = ExpenseTransaction(
            id="t1", amount=Decimal("50"), date=TODAY, envelope_id="groceries",
        )
        engine.apply_effect(txn)
        # Host starts a new period between apply and reverse
        store.get_envelope("groceries").spent = Decimal("0")
        engine.reverse_effect(txn)
        envelope = store.get_envelope("groceries")
        assert envelope.spent == Decimal("0")
        assert envelope.balance == Decimal("200")


class TestOverdraft:
    """Tests for the overdrawn-envelope signal."""

    def test_overdraft_is_allowed_and_signalled(self, store, settings):
        """Test that overdrawing returns a notice and calls the handler."""
        received = []
        engine = LedgerEffectEngine(store, settings=settings, on_overdrawn=received.append)

        notices = engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("250"), date=TODAY,
            from_account_id="checking", envelope_id="groceries",
        ))

        assert store.get_envelope("groceries").balance == Decimal("-50")
        assert len(notices) == 1
        assert notices[0].envelope_id == "groceries"
        assert notices[0].overdraft == Decimal("50")
        assert received == notices

    def test_no_notice_when_envelope_stays_positive(self, engine):
        """Test that normal spending emits nothing."""
        notices = engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("10"), date=TODAY, envelope_id="groceries",
        ))
        assert notices == []

    def test_engine_does_not_block_insufficient_funds(self, engine, store):
        """Test that an asset may go negative."""
        engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("5000"), date=TODAY, from_account_id="checking",
        ))
        assert balance(store, "checking") == Decimal("-4000")


class TestIncomeAndTransfer:
    """Tests for income and transfer effects."""

    def test_income_credits_asset(self, engine, store):
        engine.apply_effect(IncomeTransaction(
            id="t1", amount=Decimal("1000"), date=TODAY, to_account_id="checking",
        ))
        assert balance(store, "checking") == Decimal("2000")

    def test_transfer_moves_money(self, engine, store):
        engine.apply_effect(TransferTransaction(
            id="t1", amount=Decimal("100"), date=TODAY,
            from_account_id="checking", to_account_id="savings",
        ))
        assert balance(store, "checking") == Decimal("900")
        assert balance(store, "savings") == Decimal("600")

    def test_transfer_with_envelope_funds_it(self, engine, store):
        """Test that a purpose-tracking transfer funds the envelope."""
        engine.apply_effect(TransferTransaction(
            id="t1", amount=Decimal("100"), date=TODAY,
            from_account_id="checking", to_account_id="savings",
            envelope_id="vacation",
        ))
        envelope = store.get_envelope("vacation")
        assert envelope.balance == Decimal("100")
        assert envelope.spent == Decimal("0")

    def test_transfer_out_of_tracked_account_logs_withdrawal(self, engine, store):
        """Test that contribution-tracked assets record withdrawals."""
        store.get_account("401k").balance = Decimal("1000")
        txn = TransferTransaction(
            id="t1", amount=Decimal("300"), date=TODAY,
            from_account_id="401k", to_account_id="checking",
        )
        engine.apply_effect(txn)

        withdrawals = store.get_account("401k").withdrawals
        assert list(withdrawals) == ["t1:withdrawal"]
        assert withdrawals["t1:withdrawal"].amount == Decimal("300")

        engine.reverse_effect(txn)
        assert store.get_account("401k").withdrawals == {}
        assert balance(store, "401k") == Decimal("1000")


class TestPayment:
    """Tests for payment effects."""

    def test_amortizing_payment_splits_interest(self, engine, store):
        """Test interest = balance * rate/12 and principal = amount - interest."""
        engine.apply_effect(PaymentTransaction(
            id="p1", amount=Decimal("500"), date=TODAY,
            from_account_id="checking", to_account_id="car",
        ))

        car = store.get_account("car")
        entry = car.payments["p1:payment"]
        assert entry.interest == Decimal("50")
        assert entry.principal == Decimal("450")
        assert entry.balance_after == Decimal("9550")
        assert car.balance == Decimal("9550")
        assert balance(store, "checking") == Decimal("500")

    def test_credit_card_payment_is_all_principal(self, engine, store):
        """Test that revolving payments ignore the interest rate."""
        engine.apply_effect(PaymentTransaction(
            id="p1", amount=Decimal("100"), date=TODAY,
            from_account_id="checking", to_account_id="visa",
        ))

        visa = store.get_account("visa")
        entry = visa.payments["p1:payment"]
        assert entry.interest == Decimal("0")
        assert entry.principal == Decimal("100")
        assert visa.balance == Decimal("200")

    def test_payoff_floors_balance_at_zero(self, engine, store):
        """Test that overpaying leaves a zero balance, not a negative one."""
        store.get_account("car").balance = Decimal("100")
        engine.apply_effect(PaymentTransaction(
            id="p1", amount=Decimal("500"), date=TODAY, to_account_id="car",
        ))
        assert balance(store, "car") == Decimal("0")

    def test_floored_payoff_reverses_exactly(self, engine, store):
        """Test that reversing a floored payment restores the old balance."""
        store.get_account("car").balance = Decimal("100")
        txn = PaymentTransaction(
            id="p1", amount=Decimal("500"), date=TODAY,
            from_account_id="checking", to_account_id="car",
        )
        engine.apply_effect(txn)
        engine.reverse_effect(txn)

        car = store.get_account("car")
        assert car.balance == Decimal("100")
        assert car.payments == {}
        assert balance(store, "checking") == Decimal("1000")

    def test_payment_below_interest_leaves_balance(self, engine, store):
        """Test that a payment smaller than interest reduces nothing."""
        engine.apply_effect(PaymentTransaction(
            id="p1", amount=Decimal("30"), date=TODAY, to_account_id="car",
        ))
        car = store.get_account("car")
        assert car.balance == Decimal("10000")
        assert car.payments["p1:payment"].principal == Decimal("0")


class TestContribution:
    """Tests for contribution effects."""

    def test_posttax_contribution_debits_source(self, engine, store):
        engine.apply_effect(ContributionTransaction(
            id="c1", amount=Decimal("200"), date=TODAY,
            from_account_id="checking", to_account_id="401k",
            contrib_type=ContributionType.POSTTAX,
        ))

        retirement = store.get_account("401k")
        assert retirement.balance == Decimal("200")
        assert retirement.ytd_contribution == Decimal("200")
        assert "c1:contribution" in retirement.contributions
        assert balance(store, "checking") == Decimal("800")

    def test_pretax_contribution_skips_source(self, engine, store):
        """Test that pre-tax money is never debited from a tracked account."""
        engine.apply_effect(ContributionTransaction(
            id="c1", amount=Decimal("200"), date=TODAY,
            from_account_id="checking", to_account_id="401k",
            contrib_type=ContributionType.PRETAX,
        ))
        assert balance(store, "checking") == Decimal("1000")
        assert balance(store, "401k") == Decimal("200")

    def test_untracked_target_keeps_no_ytd(self, engine, store):
        """Test that ytd stays None on accounts without a yearly counter."""
        engine.apply_effect(ContributionTransaction(
            id="c1", amount=Decimal("200"), date=TODAY, to_account_id="savings",
        ))
        savings = store.get_account("savings")
        assert savings.ytd_contribution is None
        assert savings.balance == Decimal("700")

    def test_reverse_removes_contribution_entry(self, engine, store):
        txn = ContributionTransaction(
            id="c1", amount=Decimal("200"), date=TODAY,
            from_account_id="checking", to_account_id="401k",
        )
        engine.apply_effect(txn)
        engine.reverse_effect(txn)

        retirement = store.get_account("401k")
        assert retirement.contributions == {}
        assert retirement.ytd_contribution == Decimal("0")


class TestUnresolvedReferences:
    """Tests that dangling ids skip only their slot."""

    def test_unknown_source_is_skipped(self, engine, store):
        engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("50"), date=TODAY,
            from_account_id="ghost", envelope_id="groceries",
        ))
        assert store.get_envelope("groceries").balance == Decimal("150")

    def test_unknown_envelope_is_skipped(self, engine, store):
        engine.apply_effect(ExpenseTransaction(
            id="t1", amount=Decimal("50"), date=TODAY,
            from_account_id="checking", envelope_id="ghost",
        ))
        assert balance(store, "checking") == Decimal("950")

    def test_unknown_payment_target_still_debits_source(self, engine, store):
        engine.apply_effect(PaymentTransaction(
            id="p1", amount=Decimal("50"), date=TODAY,
            from_account_id="checking", to_account_id="ghost",
        ))
        assert balance(store, "checking") == Decimal("950")


class TestInvalidTransactions:
    """Tests for hard errors."""

    def test_unknown_type_is_rejected(self, engine, store):
        before = dump_state(store)
        bogus = ExpenseTransaction.model_construct(
            id="t1", amount=Decimal("10"), date=TODAY, type="refund",
        )
        with pytest.raises(InvalidTransactionError, match="Unknown transaction type"):
            engine.apply_effect(bogus)
        assert dump_state(store) == before

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount_is_rejected(self, engine, amount):
        bogus = ExpenseTransaction.model_construct(
            id="t1", amount=amount, date=TODAY, from_account_id="checking",
        )
        with pytest.raises(InvalidTransactionError, match="must be positive"):
            engine.apply_effect(bogus)

    def test_reverse_also_validates(self, engine):
        bogus = IncomeTransaction.model_construct(
            id="t1", amount=Decimal("0"), date=TODAY, to_account_id="checking",
        )
        with pytest.raises(InvalidTransactionError):
            engine.reverse_effect(bogus)


ROUND_TRIP_TRANSACTIONS = [
    ExpenseTransaction(id="e1", amount=Decimal("75.25"), date=TODAY,
                       from_account_id="checking", envelope_id="groceries"),
    ExpenseTransaction(id="e2", amount=Decimal("260"), date=TODAY,
                       from_account_id="visa", envelope_id="groceries"),
    IncomeTransaction(id="i1", amount=Decimal("1234.56"), date=TODAY,
                      to_account_id="checking"),
    TransferTransaction(id="x1", amount=Decimal("99.99"), date=TODAY,
                        from_account_id="checking", to_account_id="savings",
                        envelope_id="vacation"),
    PaymentTransaction(id="p1", amount=Decimal("333.33"), date=TODAY,
                       from_account_id="checking", to_account_id="car"),
    PaymentTransaction(id="p2", amount=Decimal("450"), date=TODAY,
                       from_account_id="savings", to_account_id="visa"),
    ContributionTransaction(id="c1", amount=Decimal("150"), date=TODAY,
                            from_account_id="checking", to_account_id="401k"),
    ContributionTransaction(id="c2", amount=Decimal("150"), date=TODAY,
                            from_account_id="checking", to_account_id="401k",
                            contrib_type=ContributionType.PRETAX),
]


class TestReversibility:
    """Tests that reverse is the exact inverse of apply."""

    @pytest.mark.parametrize("txn", ROUND_TRIP_TRANSACTIONS, ids=lambda t: t.id)
    def test_round_trip_restores_state(self, engine, store, txn):
        before = dump_state(store)
        engine.apply_effect(txn)
        assert dump_state(store) != before
        engine.reverse_effect(txn)
        assert dump_state(store) == before

    def test_interleaved_round_trip(self, engine, store):
        """Test reversing in a different order than applied."""
        before = dump_state(store)
        for txn in ROUND_TRIP_TRANSACTIONS:
            engine.apply_effect(txn)
        for txn in ROUND_TRIP_TRANSACTIONS[::2] + ROUND_TRIP_TRANSACTIONS[1::2]:
            engine.reverse_effect(txn)
        assert dump_state(store) == before

    def test_edit_equals_reverse_then_apply(self, settings):
        """Test that edit A→B matches reverse(A) then apply(B)."""
        from conftest import build_accounts, build_envelopes
        from financeflow.services.storage import InMemoryLedgerStore

        old = ExpenseTransaction(id="t1", amount=Decimal("80"), date=TODAY,
                                 from_account_id="checking", envelope_id="groceries")
        new = ExpenseTransaction(id="t1", amount=Decimal("30"), date=TODAY,
                                 from_account_id="visa", envelope_id="groceries")

        edited = InMemoryLedgerStore(build_accounts(), build_envelopes())
        engine = LedgerEffectEngine(edited, settings=settings)
        engine.apply_effect(old)
        engine.edit_effect(old, new)

        manual = InMemoryLedgerStore(build_accounts(), build_envelopes())
        engine = LedgerEffectEngine(manual, settings=settings)
        engine.apply_effect(old)
        engine.reverse_effect(old)
        engine.apply_effect(new)

        fresh = InMemoryLedgerStore(build_accounts(), build_envelopes())
        LedgerEffectEngine(fresh, settings=settings).apply_effect(new)

        assert dump_state(edited) == dump_state(manual) == dump_state(fresh)

    def test_failed_edit_restores_old_effect(self, engine, store):
        """Test that an edit to an invalid transaction leaves the old effect in place."""
        old = ExpenseTransaction(id="t1", amount=Decimal("80"), date=TODAY,
                                 from_account_id="checking")
        engine.apply_effect(old)
        after_old = dump_state(store)

        bogus = ExpenseTransaction.model_construct(
            id="t1", amount=Decimal("0"), date=TODAY, from_account_id="checking",
        )
        with pytest.raises(InvalidTransactionError):
            engine.edit_effect(old, bogus)
        assert dump_state(store) == after_old

    def test_raising_overdraft_handler_rolls_back_edit(self, store, settings):
        """Test that a handler failing after the new effect landed undoes the edit."""
        def refuse(notice):
            raise RuntimeError("overdraft refused")

        engine = LedgerEffectEngine(store, settings=settings, on_overdrawn=refuse)
        old = ExpenseTransaction(id="t1", amount=Decimal("80"), date=TODAY,
                                 from_account_id="checking")
        new = ExpenseTransaction(id="t1", amount=Decimal("300"), date=TODAY,
                                 from_account_id="checking", envelope_id="groceries")
        engine.apply_effect(old)
        after_old = dump_state(store)

        with pytest.raises(RuntimeError):
            engine.edit_effect(old, new)

        assert dump_state(store) == after_old
        groceries = store.get_envelope("groceries")
        assert store.get_account("checking").balance == Decimal("920")
        assert groceries.balance == Decimal("200")
        assert groceries.spent == Decimal("0")

    def test_edit_failing_mid_apply_rolls_back(self, engine, store):
        """Test that a failure after the first balance move restores every record."""
        old = ContributionTransaction(id="c1", amount=Decimal("100"), date=TODAY,
                                      from_account_id="checking", to_account_id="401k")
        engine.apply_effect(old)
        after_old = dump_state(store)

        # No date: the history entry fails to build after the target is credited
        broken = ContributionTransaction.model_construct(
            id="c1", amount=Decimal("50"), date=None,
            from_account_id="savings", to_account_id="401k",
        )
        with pytest.raises(ValueError):
            engine.edit_effect(old, broken)

        assert dump_state(store) == after_old
        assert store.get_account("401k").ytd_contribution == Decimal("100")
        assert "c1:contribution" in store.get_account("401k").contributions

    def test_delete_reverses(self, engine, store):
        before = dump_state(store)
        txn = PaymentTransaction(id="p1", amount=Decimal("100"), date=TODAY,
                                 from_account_id="checking", to_account_id="car")
        engine.apply_effect(txn)
        engine.delete_effect(txn)
        assert dump_state(store) == before
