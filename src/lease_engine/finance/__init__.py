"""Finance — discounting primitives and disclosure aggregation."""

from lease_engine.finance.discounting import (
    annuity_factor,
    discount_factors,
    per_period_rate,
    present_value,
)
from lease_engine.finance.disclosure import (
    aggregate_portfolio,
    build_annual_expenses,
    build_lease_disclosure,
)

__all__ = [
    "annuity_factor",
    "discount_factors",
    "per_period_rate",
    "present_value",
    "aggregate_portfolio",
    "build_annual_expenses",
    "build_lease_disclosure",
]
