"""Straight-line depreciation of the right-of-use asset.

The asset is depreciated from commencement to the earlier of
  (a) the end of the underlying asset's useful life, and
  (b) the end of the lease term (including a reasonably-certain extension),
down to any residual the lessee is certain to retain.  Periods share the
payment schedule's boundaries so both tables can be zipped for journals.
"""

from __future__ import annotations

from datetime import date

from dateutil.relativedelta import relativedelta

from lease_engine.config.lease import LeaseTerms
from lease_engine.config.policy import PolicyConfig
from lease_engine.models.results import DepreciationRow


def depreciation_periods(terms: LeaseTerms) -> int:
    """Number of depreciation periods, in payment-period units (at least one)."""
    years = min(terms.useful_life_years, terms.lease_term_years)
    periods = int(round(years * terms.periods_per_year))
    return max(1, min(periods, terms.total_periods))


def build_depreciation_schedule(
    rou_asset: float,
    periods: int,
    commencement: date,
    months_per_period: int,
    retained_residual: float = 0.0,
    policy: PolicyConfig | None = None,
) -> list[DepreciationRow]:
    """Equal charge per period; the final period absorbs the rounding remainder."""
    policy = policy or PolicyConfig()
    dp = policy.rounding_decimals

    residual = min(max(retained_residual, 0.0), rou_asset)
    depreciable = round(rou_asset - residual, dp)
    per_period = round(depreciable / periods, dp)

    rows: list[DepreciationRow] = []
    accumulated = 0.0
    for k in range(1, periods + 1):
        remaining = round(depreciable - accumulated, dp)
        charge = min(per_period, remaining) if k < periods else remaining
        accumulated = round(accumulated + charge, dp)
        rows.append(DepreciationRow(
            period=k,
            period_end=commencement + relativedelta(months=k * months_per_period),
            charge=charge,
            accumulated_depreciation=accumulated,
            net_carrying_amount=max(round(rou_asset - accumulated, dp), 0.0),
        ))
    return rows
