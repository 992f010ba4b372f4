"""Disclosure aggregator — maturity analysis, current / non-current split.

Payments still outstanding at the reporting date are split into
  current      due before reporting date + 12 months
  non-current  everything after
each with its undiscounted amount and its present value discounted from the
reporting date at the lease's per-period rate.  At commencement the two
present values add back to the initial liability.

Also builds the per-lease-year P&L impact and the portfolio aggregates
(liability-weighted average remaining term and discount rate).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

import numpy as np
from dateutil.relativedelta import relativedelta

from lease_engine.config.lease import LeaseTerms
from lease_engine.config.policy import PolicyConfig
from lease_engine.finance.discounting import discount_offset
from lease_engine.models.results import (
    AnnualExpenseRow,
    CalculationResult,
    CashflowRow,
    DepreciationRow,
    InitialMeasurement,
    LeaseDisclosure,
    MaturityBucket,
    PortfolioDisclosure,
)

MATURITY_BAND_LABELS = [
    "Within 1 year",
    "1-2 years",
    "2-3 years",
    "3-4 years",
    "4-5 years",
    "Later than 5 years",
]


def _months_after(start: date, months: int) -> date:
    """``start`` plus ``months``, saturating at ``date.max``."""
    try:
        return start + relativedelta(months=months)
    except (ValueError, OverflowError):
        return date.max


def period_position(
    commencement: date,
    months_per_period: int,
    when: date,
    max_periods: int | None = None,
) -> float:
    """Schedule position of ``when`` in payment periods since commencement.

    Exact on period boundaries, linear in days between them.  With
    ``max_periods`` the walk stops at the schedule end.
    """
    if when <= commencement:
        return 0.0
    k = 0
    boundary = commencement
    while max_periods is None or k < max_periods:
        nxt = _months_after(commencement, (k + 1) * months_per_period)
        if when < nxt or nxt == date.max:
            return k + (when - boundary).days / max((nxt - boundary).days, 1)
        k += 1
        boundary = nxt
    return float(max_periods)


def _band_index(reporting_date: date, due: date) -> int:
    for i in range(len(MATURITY_BAND_LABELS) - 1):
        if due < _months_after(reporting_date, 12 * (i + 1)):
            return i
    return len(MATURITY_BAND_LABELS) - 1


def build_lease_disclosure(
    terms: LeaseTerms,
    measurement: InitialMeasurement,
    cashflows: Sequence[CashflowRow],
    depreciation: Sequence[DepreciationRow],
    reporting_date: date | None = None,
    policy: PolicyConfig | None = None,
) -> LeaseDisclosure:
    """Maturity analysis and key disclosure figures for one lease."""
    policy = policy or PolicyConfig()
    dp = policy.rounding_decimals
    rd = reporting_date or terms.commencement_date
    rate = measurement.per_period_rate
    mpp = terms.months_per_period

    position = period_position(terms.commencement_date, mpp, rd, measurement.total_periods)
    cutoff = _months_after(rd, policy.current_window_months)

    current_und = current_pv = 0.0
    later_und = later_pv = 0.0
    band_und = [0.0] * len(MATURITY_BAND_LABELS)
    band_pv = [0.0] * len(MATURITY_BAND_LABELS)

    for row in cashflows:
        if row.due_date < rd:
            continue  # settled before the reporting date
        t = discount_offset(row.period, terms.payment_timing) - position
        pv = row.rent / (1 + rate) ** max(t, 0.0)
        if row.due_date < cutoff:
            current_und += row.rent
            current_pv += pv
        else:
            later_und += row.rent
            later_pv += pv
        band = _band_index(rd, row.due_date)
        band_und[band] += row.rent
        band_pv[band] += pv

    total_und = round(current_und + later_und, dp)
    total_pv = round(current_pv + later_pv, dp)
    current_und = round(current_und, dp)
    current_pv = round(current_pv, dp)

    buckets = [
        MaturityBucket(label=label, undiscounted=round(u, dp), present_value=round(p, dp))
        for label, u, p in zip(MATURITY_BAND_LABELS, band_und, band_pv)
        if u != 0
    ]

    accumulated = round(sum(r.charge for r in depreciation if r.period_end <= rd), dp)
    remaining_years = max(measurement.total_periods - position, 0.0) / terms.periods_per_year

    return LeaseDisclosure(
        reporting_date=rd,
        current_undiscounted=current_und,
        current_present_value=current_pv,
        non_current_undiscounted=round(total_und - current_und, dp),
        non_current_present_value=round(total_pv - current_pv, dp),
        total_undiscounted=total_und,
        total_present_value=total_pv,
        maturity_buckets=buckets,
        weighted_average_remaining_term_years=round(remaining_years, 4),
        weighted_average_discount_rate=terms.ibr_annual,
        rou_gross_carrying_amount=measurement.rou_asset,
        rou_accumulated_depreciation=accumulated,
        rou_net_carrying_amount=round(measurement.rou_asset - accumulated, dp),
        total_cash_outflow=round(sum(r.rent for r in cashflows), dp),
    )


def build_annual_expenses(
    terms: LeaseTerms,
    cashflows: Sequence[CashflowRow],
    depreciation: Sequence[DepreciationRow],
    policy: PolicyConfig | None = None,
) -> list[AnnualExpenseRow]:
    """P&L impact per lease year.

    Interest lands in the year it accrues (for advance schedules that is the
    period before the payment); rent and depreciation in their own period's year.
    """
    policy = policy or PolicyConfig()
    dp = policy.rounding_decimals
    ppy = terms.periods_per_year
    years = max(1, math.ceil(len(cashflows) / ppy))

    def year_of(period: int) -> int:
        return (period - 1) // ppy + 1

    interest = [0.0] * years
    dep = [0.0] * years
    rent = [0.0] * years

    for row in cashflows:
        rent[year_of(row.period) - 1] += row.rent
        accrual_period = row.period - 1 if terms.payment_timing == "advance" else row.period
        if accrual_period >= 1:
            interest[year_of(accrual_period) - 1] += row.interest
    for row in depreciation:
        dep[min(year_of(row.period), years) - 1] += row.charge

    return [
        AnnualExpenseRow(
            year=y + 1,
            interest_expense=round(interest[y], dp),
            depreciation_expense=round(dep[y], dp),
            total_expense=round(interest[y] + dep[y], dp),
            rent_paid=round(rent[y], dp),
        )
        for y in range(years)
    ]


def aggregate_portfolio(
    results: Sequence[CalculationResult],
    reporting_date: date,
    policy: PolicyConfig | None = None,
) -> PortfolioDisclosure:
    """Roll several leases into portfolio disclosure figures at ``reporting_date``.

    Weighted averages use each lease's outstanding present value as weight;
    leases with nothing outstanding drop out of the averages.
    """
    policy = policy or PolicyConfig()
    dp = policy.rounding_decimals

    disclosures = [
        build_lease_disclosure(
            r.terms, r.measurement, r.cashflow_schedule, r.depreciation_schedule,
            reporting_date=reporting_date, policy=policy,
        )
        for r in results
    ]

    weights = np.array([d.total_present_value for d in disclosures], dtype=float)
    terms_years = np.array([d.weighted_average_remaining_term_years for d in disclosures], dtype=float)
    rates = np.array([d.weighted_average_discount_rate for d in disclosures], dtype=float)

    if weights.size and weights.sum() > 0:
        wa_term = float(np.average(terms_years, weights=weights))
        wa_rate = float(np.average(rates, weights=weights))
    else:
        wa_term = 0.0
        wa_rate = 0.0

    band_und: dict[str, float] = {label: 0.0 for label in MATURITY_BAND_LABELS}
    band_pv: dict[str, float] = {label: 0.0 for label in MATURITY_BAND_LABELS}
    for d in disclosures:
        for bucket in d.maturity_buckets:
            band_und[bucket.label] += bucket.undiscounted
            band_pv[bucket.label] += bucket.present_value

    current_pv = round(sum(d.current_present_value for d in disclosures), dp)
    non_current_pv = round(sum(d.non_current_present_value for d in disclosures), dp)
    current_und = round(sum(d.current_undiscounted for d in disclosures), dp)
    non_current_und = round(sum(d.non_current_undiscounted for d in disclosures), dp)

    return PortfolioDisclosure(
        reporting_date=reporting_date,
        lease_count=len(results),
        current_present_value=current_pv,
        non_current_present_value=non_current_pv,
        total_present_value=round(current_pv + non_current_pv, dp),
        current_undiscounted=current_und,
        non_current_undiscounted=non_current_und,
        total_undiscounted=round(current_und + non_current_und, dp),
        weighted_average_remaining_term_years=round(wa_term, 4),
        weighted_average_discount_rate=round(wa_rate, 6),
        maturity_buckets=[
            MaturityBucket(label=label, undiscounted=round(band_und[label], dp),
                           present_value=round(band_pv[label], dp))
            for label in MATURITY_BAND_LABELS
            if band_und[label] != 0
        ],
    )
