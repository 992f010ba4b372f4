"""Pipeline orchestrator — one lease record in, one ``CalculationResult`` out.

  normalize → measure → {amortize, depreciate} → journals → disclosure

Each stage reads only the previous stage's output plus the normalized
terms.  Nothing is shared between calls, so the pipeline can be re-run (or
run concurrently for different leases) freely; a failure in any stage
propagates and no partial result is produced.

Entry points:
  - ``run_lease_engine(record)``        single lease
  - ``run_portfolio(records, date)``    several leases + portfolio disclosure
  - ``run_lease_engine_async(record)``  same as the first, on a deferred event-loop turn
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from lease_engine.config.lease import LeaseTerms
from lease_engine.config.policy import PolicyConfig
from lease_engine.engine.amortization import build_amortization_schedule
from lease_engine.engine.depreciation import build_depreciation_schedule, depreciation_periods
from lease_engine.engine.escalation import lease_payments
from lease_engine.engine.journals import generate_journal_entries
from lease_engine.engine.measurement import measure_initial
from lease_engine.engine.normalizer import normalize_lease_record
from lease_engine.finance.disclosure import (
    aggregate_portfolio,
    build_annual_expenses,
    build_lease_disclosure,
)
from lease_engine.models.results import CalculationResult, PortfolioResult

logger = logging.getLogger(__name__)

LeaseInput = LeaseTerms | Mapping[str, Any]


def _as_terms(record: LeaseInput) -> LeaseTerms:
    if isinstance(record, LeaseTerms):
        return record
    return normalize_lease_record(record)


# ═══════════════════════════════════════════════════════════════════════════
# Public entry points
# ═══════════════════════════════════════════════════════════════════════════

def run_lease_engine(
    record: LeaseInput,
    policy: PolicyConfig | None = None,
    reporting_date: date | None = None,
) -> CalculationResult:
    """Run the full calculation pipeline for one lease.

    Parameters
    ----------
    record : LeaseTerms | Mapping[str, Any]
        Typed terms, or a raw form / CSV / stored-contract record.
    policy : PolicyConfig | None
        Rounding, rate convention, materiality and account names.
    reporting_date : date | None
        Date for the current / non-current split. Defaults to commencement.

    Raises
    ------
    LeaseValidationError, DegenerateRateError, ScheduleDivergenceError
    """
    policy = policy or PolicyConfig()
    terms = _as_terms(record)

    measurement = measure_initial(terms, policy)

    cashflows = build_amortization_schedule(
        measurement.lease_liability_unrounded,
        lease_payments(terms, policy.rounding_decimals),
        measurement.per_period_rate,
        terms.payment_timing,
        terms.commencement_date,
        terms.months_per_period,
        policy,
    )
    depreciation = build_depreciation_schedule(
        measurement.rou_asset,
        depreciation_periods(terms),
        terms.commencement_date,
        terms.months_per_period,
        retained_residual=measurement.retained_residual,
        policy=policy,
    )
    journal_sets = generate_journal_entries(terms, measurement, cashflows, depreciation, policy)
    disclosure = build_lease_disclosure(
        terms, measurement, cashflows, depreciation,
        reporting_date=reporting_date, policy=policy,
    )
    annual = build_annual_expenses(terms, cashflows, depreciation, policy)

    dp = policy.rounding_decimals
    result = CalculationResult(
        terms=terms,
        measurement=measurement,
        initial_lease_liability=measurement.lease_liability,
        initial_rou_asset=measurement.rou_asset,
        cashflow_schedule=cashflows,
        depreciation_schedule=depreciation,
        journal_sets=journal_sets,
        total_interest=round(sum(r.interest for r in cashflows), dp),
        total_depreciation=round(sum(r.charge for r in depreciation), dp),
        total_payments=round(sum(r.rent for r in cashflows), dp),
        disclosure=disclosure,
        annual_expenses=annual,
    )
    logger.info(
        "lease %s: liability=%.2f rou=%.2f over %d periods, %d journal sets",
        terms.contract_id, result.initial_lease_liability, result.initial_rou_asset,
        len(cashflows), len(journal_sets),
    )
    return result


def run_portfolio(
    records: Sequence[LeaseInput],
    reporting_date: date,
    policy: PolicyConfig | None = None,
) -> PortfolioResult:
    """Run every lease and aggregate portfolio disclosure figures.

    Any failing lease fails the whole run.
    """
    policy = policy or PolicyConfig()
    results = [run_lease_engine(r, policy, reporting_date) for r in records]
    return PortfolioResult(
        results=results,
        disclosure=aggregate_portfolio(results, reporting_date, policy),
    )


async def run_lease_engine_async(
    record: LeaseInput,
    policy: PolicyConfig | None = None,
    reporting_date: date | None = None,
) -> CalculationResult:
    """``run_lease_engine`` on a deferred turn of the event loop.

    Yields once before and once after the synchronous computation so an
    interactive caller stays responsive.  Not cancellable mid-run.
    """
    await asyncio.sleep(0)
    result = run_lease_engine(record, policy, reporting_date)
    await asyncio.sleep(0)
    return result
