"""Initial measurement — lease liability and right-of-use asset at commencement.

  liability = PV(term rent) + PV(extension rent, if reasonably certain)
              + PV(purchase option price, if reasonably certain, + RVG)
  ROU asset = liability + prepayments + initial direct costs − incentives

The per-period rate follows the payment frequency; payments in advance are
discounted as an annuity-due, payments in arrears as an ordinary annuity.
"""

from __future__ import annotations

import logging

import numpy as np
from dateutil.relativedelta import relativedelta

from lease_engine.config.lease import LeaseTerms
from lease_engine.config.policy import PolicyConfig
from lease_engine.engine.escalation import build_payment_stream, end_of_term_amount
from lease_engine.errors import DegenerateRateError, FieldIssue, LeaseValidationError
from lease_engine.finance.discounting import discount_factors, per_period_rate
from lease_engine.models.results import InitialMeasurement

logger = logging.getLogger(__name__)


def measure_initial(terms: LeaseTerms, policy: PolicyConfig | None = None) -> InitialMeasurement:
    """Compute the initial lease liability and ROU asset.

    Raises
    ------
    DegenerateRateError
        Zero per-period rate or no payment periods.
    LeaseValidationError
        Incentives larger than liability + prepayments + direct costs.
    """
    policy = policy or PolicyConfig()
    dp = policy.rounding_decimals

    if terms.term_periods <= 0:
        raise DegenerateRateError(
            f"lease {terms.contract_id!r} has no payment periods "
            f"({terms.non_cancellable_years} years, {terms.payment_frequency})"
        )
    rate = per_period_rate(terms.ibr_annual, terms.periods_per_year, policy.rate_convention)

    if terms.extension_years > 0 and not terms.extension_reasonably_certain:
        logger.warning(
            "lease %s: %.2f-year extension ignored (not reasonably certain)",
            terms.contract_id, terms.extension_years,
        )
    if terms.purchase_option_price > 0 and not terms.purchase_option_reasonably_certain:
        logger.warning(
            "lease %s: purchase option price ignored (not reasonably certain)",
            terms.contract_id,
        )

    term_stream, extension_stream = build_payment_stream(terms, dp)
    factors = discount_factors(rate, terms.total_periods, terms.payment_timing)
    n_term = len(term_stream)

    pv_term = float(np.dot(term_stream, factors[:n_term]))
    pv_extension = float(np.dot(extension_stream, factors[n_term:])) if extension_stream else 0.0
    pv_end = end_of_term_amount(terms, dp) * float(factors[-1])

    exact = pv_term + pv_extension + pv_end
    liability = round(exact, dp)

    prepayments = round(terms.prepayments, dp)
    direct_costs = round(terms.initial_direct_costs, dp)
    incentives = round(terms.lease_incentives, dp)
    rou = round(liability + prepayments + direct_costs - incentives, dp)
    if rou < 0:
        raise LeaseValidationError([
            FieldIssue(
                field="lease_incentives",
                code="OutOfRange",
                message="lease incentives exceed liability + prepayments + initial direct costs",
                value=terms.lease_incentives,
            )
        ])

    retained = 0.0
    if terms.purchase_option_reasonably_certain:
        retained = min(round(terms.purchase_option_price, dp), rou)

    end_date = terms.commencement_date + relativedelta(
        months=terms.total_periods * terms.months_per_period
    )

    logger.debug(
        "lease %s measured: %d periods at %.6f, liability=%.2f rou=%.2f",
        terms.contract_id, terms.total_periods, rate, liability, rou,
    )

    return InitialMeasurement(
        lease_liability=liability,
        lease_liability_unrounded=exact,
        rou_asset=rou,
        per_period_rate=rate,
        periods_per_year=terms.periods_per_year,
        payment_timing=terms.payment_timing,
        term_periods=terms.term_periods,
        extension_periods=terms.extension_periods,
        total_periods=terms.total_periods,
        pv_term_payments=round(pv_term, dp),
        pv_extension_payments=round(pv_extension, dp),
        pv_end_of_term_payments=round(pv_end, dp),
        prepayments=prepayments,
        initial_direct_costs=direct_costs,
        lease_incentives=incentives,
        retained_residual=retained,
        lease_end_date=end_date,
    )
