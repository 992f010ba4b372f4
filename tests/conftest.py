"""Shared test fixtures — reference leases used across the suite."""

from __future__ import annotations

from datetime import date

import pytest

from lease_engine.config import (
    FixedPercentageEscalation,
    LeaseTerms,
    PolicyConfig,
)


COMMENCEMENT = date(2024, 1, 1)


@pytest.fixture
def policy() -> PolicyConfig:
    return PolicyConfig()


@pytest.fixture
def advance_lease() -> LeaseTerms:
    """5 years, 100,000 per month in advance, IBR 15%."""
    return LeaseTerms(
        contract_id="LSE-001",
        commencement_date=COMMENCEMENT,
        non_cancellable_years=5,
        fixed_payment=100_000,
        payment_frequency="monthly",
        payment_timing="advance",
        currency="NGN",
        ibr_annual=0.15,
        useful_life_years=10,
    )


@pytest.fixture
def arrears_lease(advance_lease: LeaseTerms) -> LeaseTerms:
    return advance_lease.model_copy(update={"contract_id": "LSE-002", "payment_timing": "arrears"})


@pytest.fixture
def quarterly_lease() -> LeaseTerms:
    return LeaseTerms(
        contract_id="LSE-003",
        commencement_date=date(2023, 7, 1),
        non_cancellable_years=3,
        fixed_payment=450_000,
        payment_frequency="quarterly",
        payment_timing="arrears",
        ibr_annual=0.10,
        useful_life_years=8,
    )


@pytest.fixture
def escalated_lease(advance_lease: LeaseTerms) -> LeaseTerms:
    """Same as ``advance_lease`` with a 5% step from period 13."""
    return advance_lease.model_copy(update={
        "contract_id": "LSE-ESC",
        "escalation": FixedPercentageEscalation(rate=0.05, effective_period=13),
    })


@pytest.fixture
def full_lease() -> LeaseTerms:
    """Full parameter set: extension, ROU adjustments, purchase option."""
    return LeaseTerms(
        contract_id="LSE-FULL",
        commencement_date=COMMENCEMENT,
        non_cancellable_years=4,
        fixed_payment=250_000,
        payment_frequency="quarterly",
        payment_timing="advance",
        ibr_annual=0.12,
        useful_life_years=10,
        extension_years=2,
        extension_reasonably_certain=True,
        extension_growth_rate=0.10,
        prepayments=50_000,
        initial_direct_costs=20_000,
        lease_incentives=30_000,
        purchase_option_price=400_000,
        purchase_option_reasonably_certain=True,
        lessor_name="Harbour Properties Ltd",
        asset_class="Buildings",
    )


@pytest.fixture
def raw_record() -> dict:
    """Form-origin record: PascalCase keys, string values."""
    return {
        "ContractID": "LSE-001",
        "CommencementDate": "2024-01-01",
        "NonCancellableYears": "5",
        "FixedPaymentPerPeriod": "100,000",
        "PaymentFrequency": "Monthly",
        "PaymentTiming": "Advance",
        "Currency": "ngn",
        "IBR_Annual": "15",
        "UsefulLifeYears": "10",
    }
