"""Tests for discounting primitives."""

import numpy as np
import pytest

from lease_engine.errors import DegenerateRateError
from lease_engine.finance.discounting import (
    annuity_factor,
    discount_factors,
    discount_offset,
    per_period_rate,
    present_value,
)


class TestPerPeriodRate:
    def test_nominal(self):
        assert per_period_rate(0.15, 12) == pytest.approx(0.0125)

    def test_effective(self):
        r = per_period_rate(0.12, 12, "effective")
        assert (1 + r) ** 12 == pytest.approx(1.12)
        assert r < 0.01

    def test_annual_frequency_is_identity(self):
        assert per_period_rate(0.10, 1) == pytest.approx(0.10)

    def test_zero_rate_degenerate(self):
        with pytest.raises(DegenerateRateError):
            per_period_rate(0.0, 12)


class TestAnnuityFactor:
    def test_ordinary(self):
        assert annuity_factor(0.10, 3, "arrears") == pytest.approx(2.486852, rel=1e-6)

    def test_due_is_ordinary_times_one_plus_rate(self):
        ordinary = annuity_factor(0.0125, 60, "arrears")
        due = annuity_factor(0.0125, 60, "advance")
        assert due == pytest.approx(ordinary * 1.0125)

    def test_matches_discount_factor_sum(self):
        for timing in ("advance", "arrears"):
            assert annuity_factor(0.02, 24, timing) == pytest.approx(discount_factors(0.02, 24, timing).sum())

    def test_zero_periods(self):
        with pytest.raises(DegenerateRateError):
            annuity_factor(0.01, 0, "advance")

    def test_zero_rate(self):
        with pytest.raises(DegenerateRateError):
            annuity_factor(0.0, 12, "arrears")


class TestDiscountFactors:
    def test_advance_first_payment_undiscounted(self):
        factors = discount_factors(0.05, 3, "advance")
        np.testing.assert_allclose(factors, [1.0, 1 / 1.05, 1 / 1.05 ** 2])

    def test_arrears_first_payment_one_period_out(self):
        factors = discount_factors(0.05, 2, "arrears")
        np.testing.assert_allclose(factors, [1 / 1.05, 1 / 1.05 ** 2])

    def test_offsets(self):
        assert discount_offset(1, "advance") == 0
        assert discount_offset(1, "arrears") == 1
        assert discount_offset(60, "advance") == 59


class TestPresentValue:
    def test_level_stream(self):
        assert present_value([100, 100, 100], 0.10, "arrears") == pytest.approx(248.6852, rel=1e-6)

    def test_uneven_stream(self):
        pv = present_value([100, 200], 0.10, "advance")
        assert pv == pytest.approx(100 + 200 / 1.1)

    def test_empty_stream(self):
        assert present_value([], 0.10, "advance") == 0.0
