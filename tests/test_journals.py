"""Tests for journal entry generation — every set balances on its own."""

from datetime import date

import pytest

from lease_engine.config import PolicyConfig
from lease_engine.config.policy import ChartOfAccounts
from lease_engine.engine.journals import JournalGenerator, generate_journal_entries, verify_balance
from lease_engine.engine.orchestrator import run_lease_engine
from lease_engine.models.results import (
    CashflowRow,
    DepreciationRow,
    JournalEntry,
    JournalEntrySet,
)


@pytest.fixture
def result(advance_lease):
    return run_lease_engine(advance_lease)


class TestEntrySets:
    def test_counts_by_kind(self, result):
        kinds = [s.kind for s in result.journal_sets]
        assert kinds.count("recognition") == 1
        assert kinds.count("payment") == 60
        assert kinds.count("depreciation") == 60

    def test_every_set_balances(self, result):
        assert verify_balance(result.journal_sets)
        for entry_set in result.journal_sets:
            assert entry_set.total_debits == pytest.approx(entry_set.total_credits, abs=0.001)

    def test_exactly_one_side_per_line(self, result):
        for line in result.journal_entries:
            assert (line.debit > 0) != (line.credit > 0)
            assert line.debit >= 0 and line.credit >= 0

    def test_chronological_order(self, result):
        dates = [s.posting_date for s in result.journal_sets]
        assert dates == sorted(dates)
        assert result.journal_sets[0].kind == "recognition"

    def test_payment_before_depreciation_on_same_date(self, result):
        feb = [s.kind for s in result.journal_sets if s.posting_date == date(2024, 2, 1)]
        assert feb == ["payment", "depreciation"]


class TestRecognition:
    def test_rou_against_liability(self, result):
        recognition = result.journal_sets[0]
        by_account = {line.account: line for line in recognition.lines}
        accounts = ChartOfAccounts()

        assert by_account[accounts.rou_asset].debit == result.initial_rou_asset
        assert by_account[accounts.lease_liability].credit == result.initial_lease_liability
        assert len(recognition.lines) == 2

    def test_rou_adjustments_stay_balanced(self, full_lease):
        full = run_lease_engine(full_lease)
        recognition = full.journal_sets[0]
        accounts = ChartOfAccounts()

        assert recognition.is_balanced
        prepaid = [line for line in recognition.lines if line.account == accounts.prepaid_lease_payments]
        assert prepaid[0].credit == 50_000
        cash_lines = [line for line in recognition.lines if line.account == accounts.cash]
        assert sorted((line.debit, line.credit) for line in cash_lines) == [(0.0, 20_000), (30_000, 0.0)]


class TestPaymentSets:
    def test_first_advance_payment_is_principal_only(self, result):
        first = next(s for s in result.journal_sets if s.kind == "payment")
        accounts = ChartOfAccounts()

        assert first.period == 1
        assert [line.account for line in first.lines] == [accounts.lease_liability, accounts.cash]
        assert first.is_balanced

    def test_interest_principal_cash_split(self, result):
        row = result.cashflow_schedule[5]
        entry_set = next(s for s in result.journal_sets if s.kind == "payment" and s.period == row.period)
        amounts = {line.account: (line.debit, line.credit) for line in entry_set.lines}
        accounts = ChartOfAccounts()

        assert amounts[accounts.interest_expense] == (row.interest, 0.0)
        assert amounts[accounts.lease_liability] == (row.principal, 0.0)
        assert amounts[accounts.cash] == (0.0, row.rent)

    def test_negative_interest_flips_side(self, advance_lease):
        row = CashflowRow(
            period=3, due_date=date(2024, 3, 1), opening_balance=100.40,
            rent=100.0, interest=-0.40, principal=100.40, closing_balance=0.0,
        )
        sets = JournalGenerator(advance_lease)._payment_set(row, 3)
        interest_line = next(line for line in sets.lines if line.account == ChartOfAccounts().interest_expense)
        assert interest_line.credit == pytest.approx(0.40)
        assert sets.is_balanced


class TestDepreciationSets:
    def test_expense_against_accumulated(self, result):
        dep = next(s for s in result.journal_sets if s.kind == "depreciation")
        accounts = ChartOfAccounts()
        charge = result.depreciation_schedule[0].charge

        assert dep.lines[0].account == accounts.depreciation_expense
        assert dep.lines[0].debit == charge
        assert dep.lines[1].account == accounts.accumulated_depreciation
        assert dep.lines[1].credit == charge

    def test_zero_charge_emits_nothing(self, advance_lease):
        row = DepreciationRow(
            period=1, period_end=date(2024, 2, 1), charge=0.0,
            accumulated_depreciation=0.0, net_carrying_amount=100.0,
        )
        assert JournalGenerator(advance_lease)._depreciation_set(row, 1) is None


class TestConfiguration:
    def test_custom_account_names(self, advance_lease, result):
        policy = PolicyConfig(accounts=ChartOfAccounts(cash="Bank - Operating Account"))
        sets = generate_journal_entries(
            advance_lease, result.measurement, result.cashflow_schedule,
            result.depreciation_schedule, policy,
        )
        accounts = {line.account for s in sets for line in s.lines}
        assert "Bank - Operating Account" in accounts
        assert "Cash / Bank" not in accounts

    def test_unbalanced_set_detected(self):
        lone = JournalEntry(
            posting_date=date(2024, 1, 1), account="Suspense", debit=10.0, credit=0.0,
            memo="", kind="payment", period=1,
        )
        entry_set = JournalEntrySet(kind="payment", posting_date=date(2024, 1, 1), period=1, lines=[lone])
        assert not verify_balance([entry_set])

    def test_sub_cent_imbalance_detected_at_four_decimals(self):
        def line(debit, credit):
            return JournalEntry(
                posting_date=date(2024, 1, 1), account="Suspense", debit=debit, credit=credit,
                memo="", kind="payment", period=1,
            )
        entry_set = JournalEntrySet(
            kind="payment", posting_date=date(2024, 1, 1), period=1,
            lines=[line(10.0002, 0.0), line(0.0, 10.0)], decimals=4,
        )
        assert entry_set.total_debits == 10.0002
        assert not entry_set.is_balanced

    def test_sets_follow_policy_rounding(self, advance_lease):
        result = run_lease_engine(advance_lease, PolicyConfig(rounding_decimals=4))
        assert all(s.decimals == 4 for s in result.journal_sets)
        assert verify_balance(result.journal_sets)
