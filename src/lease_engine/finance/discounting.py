"""Time-value-of-money primitives for lease measurement.

Key formulas (r = per-period rate, n = number of payments):
  nominal rate            r = IBR / periods_per_year
  effective rate          r = (1 + IBR)^(1 / periods_per_year) − 1
  ordinary annuity        a_n = (1 − (1+r)^−n) / r            (arrears)
  annuity-due             ä_n = a_n × (1+r)                   (advance)
  PV of a payment stream  Σ P_k / (1+r)^t_k,  t_k = k−1 (advance) or k (arrears)

Nothing here rounds; rounding happens where schedule rows are finalized.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from lease_engine.config.lease import PaymentTiming
from lease_engine.errors import DegenerateRateError


def per_period_rate(
    annual_rate: float,
    periods_per_year: int,
    convention: str = "nominal",
) -> float:
    """Convert an annual IBR into the rate for one payment period.

    Raises
    ------
    DegenerateRateError
        If the resulting rate is zero or negative.
    """
    if convention == "effective":
        rate = (1 + annual_rate) ** (1 / periods_per_year) - 1
    else:
        rate = annual_rate / periods_per_year
    if rate <= 0:
        raise DegenerateRateError(
            f"per-period rate is {rate!r} (annual {annual_rate!r}); discounting is undefined"
        )
    return rate


def discount_offset(period: int, timing: PaymentTiming) -> int:
    """Number of periods between commencement and payment ``period`` (1-indexed)."""
    return period - 1 if timing == "advance" else period


def annuity_factor(rate: float, periods: int, timing: PaymentTiming) -> float:
    """PV of 1 per period for ``periods`` periods.

    Ordinary annuity for arrears, annuity-due for advance.
    """
    if periods <= 0:
        raise DegenerateRateError("annuity factor needs at least one payment period")
    if rate <= 0:
        raise DegenerateRateError(f"annuity factor undefined at rate {rate!r}")
    ordinary = (1 - (1 + rate) ** -periods) / rate
    if timing == "advance":
        return ordinary * (1 + rate)
    return ordinary


def discount_factors(rate: float, periods: int, timing: PaymentTiming) -> np.ndarray:
    """Discount factor for each payment period 1..periods."""
    offsets = np.arange(periods) if timing == "advance" else np.arange(1, periods + 1)
    return 1.0 / (1.0 + rate) ** offsets


def present_value(
    payments: Sequence[float],
    rate: float,
    timing: PaymentTiming,
) -> float:
    """PV at commencement of a per-period payment stream (index 0 = period 1)."""
    if not payments:
        return 0.0
    factors = discount_factors(rate, len(payments), timing)
    return float(np.dot(np.asarray(payments, dtype=float), factors))
