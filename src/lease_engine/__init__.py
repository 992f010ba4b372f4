"""IFRS 16 lease calculation engine."""

import logging

from lease_engine.config import LeaseTerms, PolicyConfig
from lease_engine.engine.orchestrator import run_lease_engine, run_lease_engine_async, run_portfolio
from lease_engine.errors import (
    DegenerateRateError,
    LeaseEngineError,
    LeaseValidationError,
    ScheduleDivergenceError,
)
from lease_engine.models import CalculationResult

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "LeaseTerms",
    "PolicyConfig",
    "CalculationResult",
    "run_lease_engine",
    "run_lease_engine_async",
    "run_portfolio",
    "LeaseEngineError",
    "LeaseValidationError",
    "DegenerateRateError",
    "ScheduleDivergenceError",
]
