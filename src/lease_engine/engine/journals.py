"""Journal entry generator.

Three entry kinds, each emitted as an independently balanced set:

  recognition   Dr ROU asset                      Cr Lease liability
                Dr Cash (incentives received)     Cr Prepaid lease payments
                                                  Cr Cash (initial direct costs)
  payment       Dr Interest expense               Cr Cash (rent)
                Dr Lease liability (principal)
  depreciation  Dr Depreciation expense           Cr Accumulated depreciation

Negative components (e.g. a rent below the period's interest) flip to the
other side of the same account, so every set still balances.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from lease_engine.config.lease import LeaseTerms
from lease_engine.config.policy import PolicyConfig
from lease_engine.models.results import (
    CashflowRow,
    DepreciationRow,
    EntryKind,
    InitialMeasurement,
    JournalEntry,
    JournalEntrySet,
)

_KIND_ORDER: dict[str, int] = {"recognition": 0, "payment": 1, "depreciation": 2}


class JournalGenerator:
    """Builds balanced entry sets from the measurement and both schedules."""

    def __init__(self, terms: LeaseTerms, policy: PolicyConfig | None = None):
        self.terms = terms
        self.policy = policy or PolicyConfig()
        self.accounts = self.policy.accounts
        self._lines: list[JournalEntry] = []

    def generate(
        self,
        measurement: InitialMeasurement,
        cashflows: Sequence[CashflowRow],
        depreciation: Sequence[DepreciationRow],
    ) -> list[JournalEntrySet]:
        """All entry sets in chronological order, interleaved by date."""
        sets: list[JournalEntrySet] = []

        recognition = self._recognition_set(measurement)
        if recognition is not None:
            sets.append(recognition)

        n = len(cashflows)
        for row in cashflows:
            entry_set = self._payment_set(row, n)
            if entry_set is not None:
                sets.append(entry_set)

        m = len(depreciation)
        for row in depreciation:
            entry_set = self._depreciation_set(row, m)
            if entry_set is not None:
                sets.append(entry_set)

        sets.sort(key=lambda s: (s.posting_date, _KIND_ORDER[s.kind], s.period))
        return sets

    # ── Entry sets ──────────────────────────────────────────────────────

    def _recognition_set(self, measurement: InitialMeasurement) -> JournalEntrySet | None:
        a = self.accounts
        when = self.terms.commencement_date
        memo = f"Initial recognition of lease {self.terms.contract_id}"

        self._start()
        self._add(a.rou_asset, measurement.rou_asset, when, memo, "recognition", 0)
        self._add(a.lease_liability, -measurement.lease_liability, when, memo, "recognition", 0)
        self._add(a.prepaid_lease_payments, -measurement.prepayments, when,
                  "Prepayments reclassified to ROU asset", "recognition", 0)
        self._add(a.cash, -measurement.initial_direct_costs, when,
                  "Initial direct costs capitalised", "recognition", 0)
        self._add(a.cash, measurement.lease_incentives, when,
                  "Lease incentives received", "recognition", 0)
        return self._finish("recognition", when, 0)

    def _payment_set(self, row: CashflowRow, n: int) -> JournalEntrySet | None:
        a = self.accounts
        memo = f"Lease payment {row.period}/{n} - {self.terms.contract_id}"

        self._start()
        self._add(a.interest_expense, row.interest, row.due_date, memo, "payment", row.period)
        self._add(a.lease_liability, row.principal, row.due_date, memo, "payment", row.period)
        self._add(a.cash, -row.rent, row.due_date, memo, "payment", row.period)
        return self._finish("payment", row.due_date, row.period)

    def _depreciation_set(self, row: DepreciationRow, m: int) -> JournalEntrySet | None:
        a = self.accounts
        memo = f"ROU depreciation {row.period}/{m} - {self.terms.contract_id}"

        self._start()
        self._add(a.depreciation_expense, row.charge, row.period_end, memo, "depreciation", row.period)
        self._add(a.accumulated_depreciation, -row.charge, row.period_end, memo, "depreciation", row.period)
        return self._finish("depreciation", row.period_end, row.period)

    # ── Line helpers ────────────────────────────────────────────────────

    def _start(self) -> None:
        self._lines = []

    def _add(
        self,
        account: str,
        signed_amount: float,
        when: date,
        memo: str,
        kind: EntryKind,
        period: int,
    ) -> None:
        """Positive amount = debit, negative = credit, zero = no line."""
        amount = round(signed_amount, self.policy.rounding_decimals)
        if amount == 0:
            return
        self._lines.append(JournalEntry(
            posting_date=when,
            account=account,
            debit=amount if amount > 0 else 0.0,
            credit=-amount if amount < 0 else 0.0,
            memo=memo,
            kind=kind,
            period=period,
        ))

    def _finish(self, kind: EntryKind, when: date, period: int) -> JournalEntrySet | None:
        if not self._lines:
            return None
        return JournalEntrySet(
            kind=kind, posting_date=when, period=period, lines=self._lines,
            decimals=self.policy.rounding_decimals,
        )


def verify_balance(entry_sets: Sequence[JournalEntrySet]) -> bool:
    """True when every set's debits equal its credits."""
    return all(s.is_balanced for s in entry_sets)


def generate_journal_entries(
    terms: LeaseTerms,
    measurement: InitialMeasurement,
    cashflows: Sequence[CashflowRow],
    depreciation: Sequence[DepreciationRow],
    policy: PolicyConfig | None = None,
) -> list[JournalEntrySet]:
    """Convenience wrapper around ``JournalGenerator``."""
    return JournalGenerator(terms, policy).generate(measurement, cashflows, depreciation)
