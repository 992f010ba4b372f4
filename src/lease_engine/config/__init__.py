"""Configuration models — lease inputs and calculation policy."""

from lease_engine.config.lease import (
    EscalationPolicy,
    FixedPercentageEscalation,
    IndexLinkedEscalation,
    LeaseTerms,
    NoEscalation,
    PaymentFrequency,
    PaymentTiming,
    PERIODS_PER_YEAR,
)
from lease_engine.config.policy import ChartOfAccounts, PolicyConfig

__all__ = [
    "LeaseTerms",
    "EscalationPolicy",
    "NoEscalation",
    "FixedPercentageEscalation",
    "IndexLinkedEscalation",
    "PaymentFrequency",
    "PaymentTiming",
    "PERIODS_PER_YEAR",
    "PolicyConfig",
    "ChartOfAccounts",
]
