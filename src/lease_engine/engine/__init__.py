"""Engine — normalization, measurement, schedules, journals, orchestration."""

from lease_engine.engine.normalizer import normalize_lease_record
from lease_engine.engine.measurement import measure_initial
from lease_engine.engine.escalation import build_payment_stream, escalation_multiplier, lease_payments
from lease_engine.engine.amortization import build_amortization_schedule
from lease_engine.engine.depreciation import build_depreciation_schedule, depreciation_periods
from lease_engine.engine.journals import JournalGenerator, generate_journal_entries, verify_balance
from lease_engine.engine.orchestrator import run_lease_engine, run_lease_engine_async, run_portfolio

__all__ = [
    "normalize_lease_record",
    "measure_initial",
    "build_payment_stream",
    "escalation_multiplier",
    "lease_payments",
    "build_amortization_schedule",
    "build_depreciation_schedule",
    "depreciation_periods",
    "JournalGenerator",
    "generate_journal_entries",
    "verify_balance",
    "run_lease_engine",
    "run_lease_engine_async",
    "run_portfolio",
]
