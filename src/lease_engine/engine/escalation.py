"""Escalation dispatch — turns ``LeaseTerms`` into the per-period payment stream.

This is the single place that knows the escalation variants.  Adding a new
kind means a new model in ``config.lease`` and a new branch in
``escalation_multiplier``.

The stream covers every payment period of the lease term:
  periods 1..term_periods              contract rent (escalated)
  term_periods+1..total_periods        extension rent (if reasonably certain)

With ``decimals`` given, each amount is rounded to what is actually paid, so
measurement and the amortization schedule discount the same cash.
"""

from __future__ import annotations

from lease_engine.config.lease import (
    EscalationPolicy,
    FixedPercentageEscalation,
    IndexLinkedEscalation,
    LeaseTerms,
    NoEscalation,
)


def _rounded(amount: float, decimals: int | None) -> float:
    return amount if decimals is None else round(amount, decimals)


def effective_start(policy: EscalationPolicy, periods_per_year: int) -> int:
    """First escalated period. Unset means the first period of year two."""
    if policy.effective_period is not None:
        return policy.effective_period
    return periods_per_year + 1


def escalation_multiplier(policy: EscalationPolicy, period: int, periods_per_year: int = 12) -> float:
    """Factor applied to the base rent in 1-indexed ``period``."""
    if isinstance(policy, NoEscalation):
        return 1.0

    start = effective_start(policy, periods_per_year)
    if period < start:
        return 1.0

    if isinstance(policy, FixedPercentageEscalation):
        if policy.interval_periods is None:
            return 1.0 + policy.rate
        steps = (period - start) // policy.interval_periods + 1
        return (1.0 + policy.rate) ** steps

    if isinstance(policy, IndexLinkedEscalation):
        return policy.current_index / policy.base_index

    raise TypeError(f"unknown escalation policy: {type(policy).__name__}")


def term_payments(terms: LeaseTerms, decimals: int | None = None) -> list[float]:
    """Rent for each period of the non-cancellable term."""
    ppy = terms.periods_per_year
    return [
        _rounded(terms.fixed_payment * escalation_multiplier(terms.escalation, k, ppy), decimals)
        for k in range(1, terms.term_periods + 1)
    ]


def extension_payment_amount(terms: LeaseTerms, last_term_payment: float) -> float:
    """Rent per period during a reasonably-certain extension."""
    if terms.extension_payment is not None:
        return terms.extension_payment
    return last_term_payment * (1.0 + terms.extension_growth_rate)


def build_payment_stream(
    terms: LeaseTerms,
    decimals: int | None = None,
) -> tuple[list[float], list[float]]:
    """Return ``(term_stream, extension_stream)`` of per-period rents."""
    term_stream = term_payments(terms, decimals)
    if terms.extension_periods == 0 or not term_stream:
        return term_stream, []
    ext_rent = _rounded(extension_payment_amount(terms, term_stream[-1]), decimals)
    return term_stream, [ext_rent] * terms.extension_periods


def end_of_term_amount(terms: LeaseTerms, decimals: int | None = None) -> float:
    """Lump sum payable with the final scheduled payment.

    Reasonably-certain purchase option price + residual value guarantee.
    """
    amount = terms.residual_value_guarantee
    if terms.purchase_option_reasonably_certain:
        amount += terms.purchase_option_price
    return _rounded(amount, decimals)


def lease_payments(terms: LeaseTerms, decimals: int | None = None) -> list[float]:
    """Every lease payment in the lease term, one per period.

    The end-of-term amount rides on the final scheduled payment.
    """
    term_stream, extension_stream = build_payment_stream(terms, decimals)
    payments = term_stream + extension_stream
    if payments:
        payments[-1] = _rounded(payments[-1] + end_of_term_amount(terms, decimals), decimals)
    return payments
