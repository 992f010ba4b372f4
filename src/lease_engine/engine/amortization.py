"""Liability amortization schedule.

For each payment period:
  interest  = opening balance × per-period rate
              (0 for the first payment of an advance schedule — nothing has accrued)
  principal = rent − interest
  closing   = opening − principal

The running balance is carried unrounded; only the values written to each
row are rounded, so rounding never compounds over a long tenor.  Each row is
internally consistent (principal = opening − closing, interest = rent −
principal).  The final period clears whatever balance is left; if the
unrounded remainder is larger than the materiality threshold the inputs
disagree and ``ScheduleDivergenceError`` is raised instead.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from dateutil.relativedelta import relativedelta

from lease_engine.config.lease import PaymentTiming
from lease_engine.config.policy import PolicyConfig
from lease_engine.errors import ScheduleDivergenceError
from lease_engine.finance.discounting import discount_offset
from lease_engine.models.results import CashflowRow

logger = logging.getLogger(__name__)


def payment_due_date(
    commencement: date,
    period: int,
    months_per_period: int,
    timing: PaymentTiming,
) -> date:
    """Due date of 1-indexed payment ``period``.

    Always offset from commencement (not from the previous date) so
    month-end commencements don't drift.
    """
    offset = discount_offset(period, timing)
    return commencement + relativedelta(months=offset * months_per_period)


def build_amortization_schedule(
    initial_liability: float,
    payments: Sequence[float],
    rate: float,
    timing: PaymentTiming,
    commencement: date,
    months_per_period: int,
    policy: PolicyConfig | None = None,
) -> list[CashflowRow]:
    """Generate the period-by-period liability reduction table.

    Parameters
    ----------
    initial_liability : float
        Liability at commencement. Pass the unrounded present value so the
        final balance carries no measurement rounding.
    payments : Sequence[float]
        Rent per period, post-escalation, index 0 = period 1.
    rate : float
        Per-period discount rate.
    timing : PaymentTiming
        ``"advance"`` or ``"arrears"``.
    commencement : date
        Lease commencement date.
    months_per_period : int
        12 / periods_per_year.
    policy : PolicyConfig | None
        Rounding and materiality settings.

    Raises
    ------
    ScheduleDivergenceError
        If the balance left before the final correction exceeds the
        materiality threshold.
    """
    policy = policy or PolicyConfig()
    dp = policy.rounding_decimals
    n = len(payments)
    threshold = policy.divergence_threshold(n)

    rows: list[CashflowRow] = []
    balance = float(initial_liability)

    for k, raw_rent in enumerate(payments, start=1):
        rent = round(raw_rent, dp)
        accrued = 0.0 if timing == "advance" and k == 1 else balance * rate
        remaining = balance + accrued - rent

        opening = round(balance, dp)
        if k == n:
            if abs(remaining) > threshold:
                raise ScheduleDivergenceError(abs(round(remaining, dp)), threshold, n)
            if round(remaining, dp):
                logger.debug("final-period rounding correction %.2f over %d periods", remaining, n)
            closing = 0.0
        elif accrued == 0.0:
            closing = round(opening - rent, dp)
        else:
            closing = round(remaining, dp)
        principal = round(opening - closing, dp)
        interest = round(rent - principal, dp)

        rows.append(CashflowRow(
            period=k,
            due_date=payment_due_date(commencement, k, months_per_period, timing),
            opening_balance=opening,
            rent=rent,
            interest=interest,
            principal=principal,
            closing_balance=closing,
        ))
        balance = remaining

    return rows
