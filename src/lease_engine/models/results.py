"""Result types — the contract between the engine and its consumers.

Consumers are the schedule / journal tables, the contract-text generator
(headline figures only) and the maturity / disclosure view.  Every model is
frozen: a changed input produces a wholly new ``CalculationResult``, never a
patched one.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict

from lease_engine.config.lease import LeaseTerms, PaymentTiming


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# ═══════════════════════════════════════════════════════════════════════════
# Initial measurement
# ═══════════════════════════════════════════════════════════════════════════

class InitialMeasurement(_Record):
    """Initial lease liability and ROU asset with their building blocks."""

    lease_liability: float
    """PV of all lease payments at commencement, rounded at the boundary."""

    lease_liability_unrounded: float
    """Same PV before rounding; the amortization schedule runs its balance from it."""

    rou_asset: float
    """= lease_liability + prepayments + initial_direct_costs − lease_incentives."""

    per_period_rate: float
    periods_per_year: int
    payment_timing: PaymentTiming

    term_periods: int
    extension_periods: int
    total_periods: int

    pv_term_payments: float
    """PV of the non-cancellable-term rent (escalation included)."""

    pv_extension_payments: float
    """PV of rent in a reasonably-certain extension. 0 when not included."""

    pv_end_of_term_payments: float
    """PV of a reasonably-certain purchase option price plus the residual value guarantee."""

    prepayments: float
    initial_direct_costs: float
    lease_incentives: float

    retained_residual: float
    """Portion of the ROU asset expected to survive the lease term (not depreciated)."""

    lease_end_date: date
    """Commencement + total_periods × months_per_period."""


# ═══════════════════════════════════════════════════════════════════════════
# Schedules
# ═══════════════════════════════════════════════════════════════════════════

class CashflowRow(_Record):
    """One payment period of the liability amortization schedule."""

    period: int
    due_date: date
    opening_balance: float
    rent: float
    """Gross rent due this period (post-escalation, incl. any end-of-term amount)."""

    interest: float
    principal: float
    """Liability reduction = rent − interest."""

    closing_balance: float
    """= opening_balance − principal."""


class DepreciationRow(_Record):
    """One depreciation period of the ROU asset."""

    period: int
    period_end: date
    charge: float
    accumulated_depreciation: float
    net_carrying_amount: float


# ═══════════════════════════════════════════════════════════════════════════
# Journals
# ═══════════════════════════════════════════════════════════════════════════

EntryKind = Literal["recognition", "payment", "depreciation"]


class JournalEntry(_Record):
    """One journal line. Exactly one of ``debit`` / ``credit`` is non-zero."""

    posting_date: date
    account: str
    debit: float
    credit: float
    memo: str
    kind: EntryKind
    period: int
    """Schedule period the line belongs to (0 for initial recognition)."""


class JournalEntrySet(_Record):
    """The balanced set of lines for one logical accounting event."""

    kind: EntryKind
    posting_date: date
    period: int
    lines: list[JournalEntry]
    decimals: int = 2
    """Rounding precision of the amounts; totals and the balance check use it."""

    @property
    def total_debits(self) -> float:
        return round(sum(line.debit for line in self.lines), self.decimals)

    @property
    def total_credits(self) -> float:
        return round(sum(line.credit for line in self.lines), self.decimals)

    @property
    def is_balanced(self) -> bool:
        return abs(self.total_debits - self.total_credits) < 0.5 * 10 ** -self.decimals


# ═══════════════════════════════════════════════════════════════════════════
# Disclosure
# ═══════════════════════════════════════════════════════════════════════════

class MaturityBucket(_Record):
    """Undiscounted and discounted lease payments falling in one time band."""

    label: str
    undiscounted: float
    present_value: float


class LeaseDisclosure(_Record):
    """Maturity analysis and key disclosure figures at a reporting date."""

    reporting_date: date

    # --- Current / non-current split ---
    current_undiscounted: float
    current_present_value: float
    non_current_undiscounted: float
    non_current_present_value: float
    total_undiscounted: float
    total_present_value: float

    maturity_buckets: list[MaturityBucket]
    """Within 1 year, 1–2 years, … , later than 5 years (empty bands omitted)."""

    # --- Weighted averages (single lease: its own term and rate) ---
    weighted_average_remaining_term_years: float
    weighted_average_discount_rate: float

    # --- ROU asset at the reporting date ---
    rou_gross_carrying_amount: float
    rou_accumulated_depreciation: float
    rou_net_carrying_amount: float

    total_cash_outflow: float
    """All lease payments over the lease term (undiscounted)."""


class AnnualExpenseRow(_Record):
    """P&L impact for one lease year (year 1 starts at commencement)."""

    year: int
    interest_expense: float
    depreciation_expense: float
    total_expense: float
    rent_paid: float


# ═══════════════════════════════════════════════════════════════════════════
# Top-level results
# ═══════════════════════════════════════════════════════════════════════════

class CalculationResult(_Record):
    """Complete output of one pipeline run for one ``LeaseTerms`` snapshot."""

    terms: LeaseTerms
    measurement: InitialMeasurement

    initial_lease_liability: float
    initial_rou_asset: float

    cashflow_schedule: list[CashflowRow]
    depreciation_schedule: list[DepreciationRow]
    journal_sets: list[JournalEntrySet]
    """Balanced entry sets in chronological order."""

    total_interest: float
    total_depreciation: float
    total_payments: float

    disclosure: LeaseDisclosure
    annual_expenses: list[AnnualExpenseRow]

    @property
    def journal_entries(self) -> list[JournalEntry]:
        """All journal lines, flattened in set order."""
        return [line for entry_set in self.journal_sets for line in entry_set.lines]


class PortfolioDisclosure(_Record):
    """Aggregates across concurrently active leases at one reporting date."""

    reporting_date: date
    lease_count: int
    current_present_value: float
    non_current_present_value: float
    total_present_value: float
    current_undiscounted: float
    non_current_undiscounted: float
    total_undiscounted: float
    weighted_average_remaining_term_years: float
    weighted_average_discount_rate: float
    maturity_buckets: list[MaturityBucket]


class PortfolioResult(_Record):
    """Per-lease results plus the portfolio-level disclosure."""

    results: list[CalculationResult]
    disclosure: PortfolioDisclosure
