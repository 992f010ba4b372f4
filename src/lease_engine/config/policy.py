"""Calculation policy — rounding, rate convention, materiality, accounts."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChartOfAccounts(BaseModel):
    """Account names written on journal lines."""

    model_config = ConfigDict(frozen=True)

    rou_asset: str = "Right-of-use asset"
    lease_liability: str = "Lease liability"
    interest_expense: str = "Interest expense - lease liability"
    depreciation_expense: str = "Depreciation expense - ROU asset"
    accumulated_depreciation: str = "Accumulated depreciation - ROU asset"
    cash: str = "Cash / Bank"
    prepaid_lease_payments: str = "Prepaid lease payments"


class PolicyConfig(BaseModel):
    """Engine-wide numeric and presentation policy.

    Every field has a default, so ``PolicyConfig()`` reproduces the standard
    behaviour: 2-decimal rows, nominal per-period rate (IBR / periods per
    year), a 12-month current window.
    """

    model_config = ConfigDict(frozen=True)

    # --- Rounding ---
    rounding_decimals: int = Field(
        default=2, ge=0, le=6,
        description="Decimals applied when a schedule row is finalized.",
    )

    # --- Discounting ---
    rate_convention: Literal["nominal", "effective"] = Field(
        default="nominal",
        description="nominal = IBR / periods_per_year; "
                    "effective = (1 + IBR)^(1/periods_per_year) − 1.",
    )

    # --- Final-period correction materiality ---
    divergence_tolerance_per_period: float = Field(
        default=0.01, ge=0,
        description="Rounding drift allowed per schedule period.",
    )
    min_divergence_tolerance: float = Field(
        default=1.0, ge=0,
        description="Floor of the materiality threshold for the final-period correction.",
    )

    # --- Disclosure ---
    current_window_months: int = Field(
        default=12, ge=1,
        description="Payments due within this many months of the reporting date are current.",
    )

    accounts: ChartOfAccounts = Field(default_factory=ChartOfAccounts)

    def divergence_threshold(self, periods: int) -> float:
        """Largest final-period correction treated as rounding, for a schedule of ``periods`` rows."""
        return max(self.min_divergence_tolerance, self.divergence_tolerance_per_period * periods)
