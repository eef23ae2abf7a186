"""Unit tests for the power-law fair-value model."""

import math
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sound_treasury.config import Config
from sound_treasury.constants import GENESIS_DATE, MODEL_COEFF, MODEL_EXPONENT
from sound_treasury.models.fair_value import PowerLawModel


class TestFairPrice:
    """Fair price as a function of days since genesis."""

    def test_formula(self):
        model = PowerLawModel()
        days = 6000.0
        assert model.fair_price(days) == pytest.approx(MODEL_COEFF * days ** MODEL_EXPONENT)

    def test_zero_days_is_zero(self):
        assert PowerLawModel().fair_price(0) == 0.0

    def test_negative_days_clamped(self):
        assert PowerLawModel().fair_price(-10) == 0.0

    def test_strictly_increasing(self):
        model = PowerLawModel()
        prices = [model.fair_price(d) for d in (1, 100, 1000, 5000, 8000)]
        assert all(a < b for a, b in zip(prices, prices[1:]))

    def test_array_matches_scalar(self):
        model = PowerLawModel()
        days = np.array([-5.0, 0.0, 500.0, 6000.0])
        expected = [model.fair_price(d) for d in days]
        assert model.fair_price_array(days) == pytest.approx(expected)

    def test_plausible_magnitude_2025(self):
        model = PowerLawModel()
        days = model.days_since_genesis(datetime(2025, 1, 1, tzinfo=timezone.utc))
        fair = model.fair_price(days)
        assert 10_000 < fair < 500_000


class TestBands:
    """Asymmetric +2 sigma / -1 sigma bands."""

    def test_asymmetric_multipliers(self):
        upper, lower = PowerLawModel().bands(100.0, 0.5)
        assert upper == pytest.approx(100.0 * math.exp(1.0))
        assert lower == pytest.approx(100.0 * math.exp(-0.5))

    def test_ordering(self):
        fair = 42_000.0
        upper, lower = PowerLawModel().bands(fair, 0.6)
        assert upper >= fair >= lower

    def test_zero_sigma_collapses(self):
        upper, lower = PowerLawModel().bands(10.0, 0.0)
        assert upper == lower == 10.0


class TestDaysAndPoints:

    def test_genesis_is_day_zero(self):
        model = PowerLawModel()
        assert model.days_since_genesis(GENESIS_DATE) == 0.0

    def test_fractional_days(self):
        model = PowerLawModel()
        assert model.days_since_genesis(GENESIS_DATE + timedelta(hours=12)) == pytest.approx(0.5)

    def test_instant_round_trip(self):
        model = PowerLawModel()
        instant = datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert model.instant_at(model.days_since_genesis(instant)) == instant

    def test_point_fields(self):
        model = PowerLawModel()
        instant = datetime(2024, 3, 1, tzinfo=timezone.utc)
        point = model.point(instant, sigma=0.6, actual_price=60000.0)
        assert point.timestamp == instant
        assert point.actual_price == 60000.0
        assert point.upper_band > point.fair_price > point.lower_band

    def test_future_point_has_no_price(self):
        point = PowerLawModel().point(datetime(2030, 1, 1, tzinfo=timezone.utc), sigma=0.6)
        assert point.actual_price is None


class TestValuationRatio:

    def test_ratio(self):
        model = PowerLawModel()
        fair = model.fair_price(5000)
        assert model.valuation_ratio(fair * 2, 5000) == pytest.approx(2.0)

    def test_undefined_at_genesis(self):
        assert PowerLawModel().valuation_ratio(100.0, 0) is None


class TestConstruction:

    def test_rejects_non_positive_parameters(self):
        with pytest.raises(ValueError):
            PowerLawModel(coefficient=0)
        with pytest.raises(ValueError):
            PowerLawModel(exponent=-1)

    def test_from_config(self):
        config = Config().with_overrides(model_exponent=5.5, band_upper_sigmas=3.0)
        model = PowerLawModel.from_config(config)
        assert model.exponent == 5.5
        assert model.upper_sigmas == 3.0
