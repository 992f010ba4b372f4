"""Tests for initial measurement — lease liability and ROU asset."""

import logging
from datetime import date

import pytest

from lease_engine.config import IndexLinkedEscalation, LeaseTerms, PolicyConfig
from lease_engine.engine.measurement import measure_initial
from lease_engine.errors import DegenerateRateError, LeaseValidationError
from lease_engine.finance.discounting import annuity_factor


class TestLeaseLiability:
    def test_annuity_due_for_advance(self, advance_lease):
        m = measure_initial(advance_lease)

        assert m.per_period_rate == pytest.approx(0.0125)
        assert m.lease_liability == pytest.approx(100_000 * annuity_factor(0.0125, 60, "advance"), abs=0.01)
        assert m.lease_liability == pytest.approx(4_256_000, rel=1e-3)

    def test_ordinary_annuity_for_arrears(self, advance_lease, arrears_lease):
        advance = measure_initial(advance_lease).lease_liability
        arrears = measure_initial(arrears_lease).lease_liability
        assert arrears == pytest.approx(advance / 1.0125, abs=0.02)

    def test_quarterly_rate(self, quarterly_lease):
        m = measure_initial(quarterly_lease)
        assert m.per_period_rate == pytest.approx(0.025)
        assert m.total_periods == 12
        assert m.lease_liability == pytest.approx(450_000 * annuity_factor(0.025, 12, "arrears"), abs=0.01)

    def test_effective_rate_convention(self, advance_lease):
        nominal = measure_initial(advance_lease)
        effective = measure_initial(advance_lease, PolicyConfig(rate_convention="effective"))
        assert effective.per_period_rate < nominal.per_period_rate
        assert effective.lease_liability > nominal.lease_liability

    def test_rounded_to_two_decimals(self, advance_lease):
        m = measure_initial(advance_lease)
        assert m.lease_liability == round(m.lease_liability, 2)

    def test_unrounded_value_kept_alongside(self, advance_lease):
        m = measure_initial(advance_lease)
        assert round(m.lease_liability_unrounded, 2) == m.lease_liability
        assert m.lease_liability_unrounded == pytest.approx(100_000 * annuity_factor(0.0125, 60, "advance"))

    def test_discounts_rent_as_paid(self, advance_lease):
        sub_cent = advance_lease.model_copy(update={"fixed_payment": 1000.004})
        paid = advance_lease.model_copy(update={"fixed_payment": 1000.00})
        assert measure_initial(sub_cent).lease_liability == measure_initial(paid).lease_liability

    def test_lease_end_date(self, advance_lease):
        assert measure_initial(advance_lease).lease_end_date == date(2029, 1, 1)

    def test_index_escalation_raises_liability(self, advance_lease):
        indexed = advance_lease.model_copy(update={
            "escalation": IndexLinkedEscalation(base_index=100, current_index=110, effective_period=13),
        })
        assert measure_initial(indexed).lease_liability > measure_initial(advance_lease).lease_liability


class TestExtensionGate:
    def test_extension_without_gate_ignored(self, advance_lease, caplog):
        lease = advance_lease.model_copy(update={"extension_years": 2})
        with caplog.at_level(logging.WARNING, logger="lease_engine"):
            m = measure_initial(lease)

        assert m.extension_periods == 0
        assert m.pv_extension_payments == 0
        assert m.lease_liability == measure_initial(advance_lease).lease_liability
        assert "not reasonably certain" in caplog.text

    def test_certain_extension_included(self, advance_lease):
        lease = advance_lease.model_copy(update={"extension_years": 2, "extension_reasonably_certain": True})
        m = measure_initial(lease)

        assert m.total_periods == 84
        assert m.pv_extension_payments > 0
        assert m.lease_liability == pytest.approx(100_000 * annuity_factor(0.0125, 84, "advance"), abs=0.01)
        assert m.pv_term_payments + m.pv_extension_payments == pytest.approx(m.lease_liability, abs=0.02)


class TestRouAsset:
    def test_equals_liability_without_adjustments(self, advance_lease):
        m = measure_initial(advance_lease)
        assert m.rou_asset == m.lease_liability

    def test_adjustments(self, advance_lease):
        lease = advance_lease.model_copy(update={
            "prepayments": 50_000,
            "initial_direct_costs": 10_000,
            "lease_incentives": 20_000,
        })
        m = measure_initial(lease)
        assert m.rou_asset == pytest.approx(m.lease_liability + 40_000, abs=0.001)

    def test_incentives_above_asset_rejected(self, advance_lease):
        lease = advance_lease.model_copy(update={"lease_incentives": 10_000_000})
        with pytest.raises(LeaseValidationError) as exc_info:
            measure_initial(lease)
        assert exc_info.value.codes_for("lease_incentives") == ["OutOfRange"]

    def test_purchase_option_retained_residual(self, full_lease):
        m = measure_initial(full_lease)
        assert m.retained_residual == 400_000
        assert m.pv_end_of_term_payments == pytest.approx(400_000 / 1.03 ** 23, abs=0.01)

    def test_residual_value_guarantee_is_a_payment(self, advance_lease):
        lease = advance_lease.model_copy(update={"residual_value_guarantee": 50_000})
        m = measure_initial(lease)
        assert m.pv_end_of_term_payments == pytest.approx(50_000 / 1.0125 ** 59, abs=0.01)
        assert m.retained_residual == 0


class TestDegenerateInputs:
    def test_zero_ibr(self, advance_lease):
        lease = advance_lease.model_copy(update={"ibr_annual": 0.0})
        with pytest.raises(DegenerateRateError):
            measure_initial(lease)

    def test_term_rounds_to_zero_periods(self):
        lease = LeaseTerms(
            contract_id="TINY",
            commencement_date=date(2024, 1, 1),
            non_cancellable_years=0.1,
            fixed_payment=1_000,
            payment_frequency="annual",
            ibr_annual=0.10,
            useful_life_years=1,
        )
        with pytest.raises(DegenerateRateError):
            measure_initial(lease)
