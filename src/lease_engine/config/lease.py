"""Lease contract inputs — the ``LeaseTerms`` record and its escalation variants.

One record type covers both the reduced ("minimal") and the full parameter
set.  Every full-mode field is optional and defaults to its IFRS-neutral
value: no escalation, no extension, zero incentives / costs / prepayments,
no purchase option and no residual value guarantee.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


PaymentFrequency = Literal["monthly", "quarterly", "semi-annual", "annual"]
PaymentTiming = Literal["advance", "arrears"]

PERIODS_PER_YEAR: dict[str, int] = {
    "monthly": 12,
    "quarterly": 4,
    "semi-annual": 2,
    "annual": 1,
}

# IFRS-neutral defaults for fields absent from a minimal record
DEFAULT_CURRENCY = "NGN"
DEFAULT_PAYMENT_TIMING: PaymentTiming = "advance"
DEFAULT_EXTENSION_YEARS = 0.0
DEFAULT_EXTENSION_GROWTH_RATE = 0.0
DEFAULT_PREPAYMENTS = 0.0
DEFAULT_INITIAL_DIRECT_COSTS = 0.0
DEFAULT_LEASE_INCENTIVES = 0.0
DEFAULT_PURCHASE_OPTION_PRICE = 0.0
DEFAULT_RESIDUAL_VALUE_GUARANTEE = 0.0


# ═══════════════════════════════════════════════════════════════════════════
# Escalation policies (closed set, dispatched in engine.escalation)
# ═══════════════════════════════════════════════════════════════════════════

class NoEscalation(BaseModel):
    """Flat rent for the whole term."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class FixedPercentageEscalation(BaseModel):
    """Rent steps up by a fixed percentage from ``effective_period`` onward.

    Left unset, the start follows the payment frequency: period 13 for
    monthly rent, period 5 for quarterly, period 2 for annual.

    With ``interval_periods`` unset the step happens once.  With an interval
    the uplift compounds every ``interval_periods`` periods, starting at
    ``effective_period``.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed"] = "fixed"
    rate: float = Field(gt=0, le=1.0, description="Uplift as a decimal fraction (0.05 = 5%)")
    effective_period: int | None = Field(
        default=None, ge=1,
        description="1-indexed payment period from which the escalated rent applies. "
                    "None = first period of the second lease year.",
    )
    interval_periods: int | None = Field(
        default=None, ge=1,
        description="Compound the uplift every N periods. None = one-off step.",
    )


class IndexLinkedEscalation(BaseModel):
    """Rent re-based by an index ratio (e.g. CPI) from ``effective_period`` onward.

    escalated payment = base payment × current_index / base_index
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["index"] = "index"
    base_index: float = Field(gt=0, description="Index value the contract rent is anchored to")
    current_index: float = Field(gt=0, description="Index value used for rent from the effective period")
    effective_period: int | None = Field(default=None, ge=1, description="None = first period of year two")


EscalationPolicy = Annotated[
    Union[NoEscalation, FixedPercentageEscalation, IndexLinkedEscalation],
    Field(discriminator="kind"),
]


# ═══════════════════════════════════════════════════════════════════════════
# LeaseTerms
# ═══════════════════════════════════════════════════════════════════════════

class LeaseTerms(BaseModel):
    """Calculation-ready lease contract.

    Produced by ``engine.normalizer.normalize_lease_record`` from a raw
    form/CSV record, or constructed directly by a caller that already holds
    typed values.  Immutable for the duration of a calculation.
    """

    model_config = ConfigDict(frozen=True)

    # --- Identity ---
    contract_id: str = Field(min_length=1, description="Contract identifier")
    commencement_date: date = Field(description="Date the lessee obtains control of the asset")

    # --- Core commercial terms ---
    non_cancellable_years: float = Field(gt=0, description="Non-cancellable lease term (years)")
    fixed_payment: float = Field(ge=0, description="Fixed rent per payment period")
    payment_frequency: PaymentFrequency = "monthly"
    payment_timing: PaymentTiming = DEFAULT_PAYMENT_TIMING
    currency: str = Field(default=DEFAULT_CURRENCY, min_length=1)
    ibr_annual: float = Field(
        ge=0, le=1.0,
        description="Incremental borrowing rate, annual, decimal fraction (0.12 not 12). "
                    "Zero is representable but rejected by the measurement stage.",
    )
    useful_life_years: float = Field(gt=0, description="Useful life of the underlying asset (years)")

    # --- Extension option ---
    extension_years: float = Field(default=DEFAULT_EXTENSION_YEARS, ge=0)
    extension_reasonably_certain: bool = Field(
        default=False,
        description="Gate: extension payments enter the liability only when True.",
    )
    extension_likelihood: float | None = Field(
        default=None, ge=0, le=1.0,
        description="Management's assessed likelihood of extending. Informational only.",
    )
    extension_payment: float | None = Field(
        default=None, ge=0,
        description="Rent per period during the extension. None = last term rent × (1 + growth).",
    )
    extension_growth_rate: float = Field(default=DEFAULT_EXTENSION_GROWTH_RATE, ge=0, le=1.0)

    # --- Escalation ---
    escalation: EscalationPolicy = Field(default_factory=NoEscalation)

    # --- ROU asset adjustments ---
    prepayments: float = Field(default=DEFAULT_PREPAYMENTS, ge=0, description="Paid at or before commencement")
    initial_direct_costs: float = Field(default=DEFAULT_INITIAL_DIRECT_COSTS, ge=0)
    lease_incentives: float = Field(default=DEFAULT_LEASE_INCENTIVES, ge=0, description="Received from the lessor")

    # --- End-of-term amounts ---
    purchase_option_price: float = Field(default=DEFAULT_PURCHASE_OPTION_PRICE, ge=0)
    purchase_option_reasonably_certain: bool = False
    residual_value_guarantee: float = Field(
        default=DEFAULT_RESIDUAL_VALUE_GUARANTEE, ge=0,
        description="Amount expected to be payable under a residual value guarantee",
    )

    # --- Contract metadata (read by document collaborators, not by the arithmetic) ---
    lessor_name: str | None = None
    lessee_entity: str | None = None
    asset_description: str | None = None
    asset_class: str | None = None
    contract_date: date | None = None
    end_date_original: date | None = None

    # --- Derived helpers ---

    @property
    def periods_per_year(self) -> int:
        return PERIODS_PER_YEAR[self.payment_frequency]

    @property
    def months_per_period(self) -> int:
        return 12 // self.periods_per_year

    @property
    def extension_included(self) -> bool:
        """True when extension payments are part of the lease term."""
        return self.extension_reasonably_certain and self.extension_years > 0

    @property
    def term_periods(self) -> int:
        """Payment periods in the non-cancellable term."""
        return int(round(self.non_cancellable_years * self.periods_per_year))

    @property
    def extension_periods(self) -> int:
        if not self.extension_included:
            return 0
        return int(round(self.extension_years * self.periods_per_year))

    @property
    def total_periods(self) -> int:
        return self.term_periods + self.extension_periods

    @property
    def lease_term_years(self) -> float:
        """Lease term for IFRS 16 purposes: non-cancellable + certain extension."""
        return self.total_periods / self.periods_per_year
