"""Tests for the CO2 impact estimator."""

import random
from decimal import Decimal
from unittest.mock import Mock

import pytest

from ecofinds.utils.impact import estimate_co2_savings, total_co2_savings


def pinned(value: float) -> Mock:
    rng = Mock()
    rng.random.return_value = value
    return rng


class TestImpactEstimator:
    @pytest.mark.parametrize(
        "price, jitter, expected",
        [
            (Decimal("50.00"), 0.0, 5),
            (Decimal("50.00"), 0.999, 6),
            (Decimal("55.00"), 0.5, 6),
            (Decimal("120.00"), 0.0, 12),
        ],
    )
    def test_formula(self, price, jitter, expected):
        assert estimate_co2_savings(price, pinned(jitter)) == expected

    def test_minimum_one_kg(self):
        assert estimate_co2_savings(Decimal("0"), pinned(0.0)) == 1
        assert estimate_co2_savings(Decimal("3.00"), pinned(0.1)) == 1

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            estimate_co2_savings(Decimal("-1"))

    def test_bounds_with_real_randomness(self):
        rng = random.Random(42)
        for _ in range(200):
            assert estimate_co2_savings(Decimal("50.00"), rng) in (5, 6)

    def test_total_draws_per_item(self):
        rng = Mock()
        rng.random.side_effect = [0.0, 0.5, 0.9]

        total = total_co2_savings([Decimal("50"), Decimal("50"), Decimal("50")], rng)

        # floor(5.0) + floor(6.0) + floor(6.8)
        assert total == 17
        assert rng.random.call_count == 3

    def test_total_of_nothing(self):
        assert total_co2_savings([]) == 0
