"""Tests for the absorption model."""

import math
from datetime import timedelta

import pytest

from pinkdrunk.engine.absorption import calculate_absorbed_alcohol, grams_absorbed_for_drink
from pinkdrunk.engine.widmark import volume_to_alcohol_grams
from pinkdrunk.models.session import Drink, DrinkCategory

BEER_GRAMS = 14.202  # 360 ml at 5%


@pytest.fixture
def beer(session_start):
    return Drink(
        category=DrinkCategory.BEER,
        abv_percent=5,
        volume_ml=360,
        consumed_at=session_start,
        ingestion_mins=10,
    )


class TestGramsAbsorbed:
    """Tests for a single drink."""

    def test_total_grams(self):
        assert volume_to_alcohol_grams(5, 360) == pytest.approx(BEER_GRAMS)

    def test_nothing_absorbed_before_drinking(self, beer, session_start):
        assert grams_absorbed_for_drink(beer, session_start) == 0.0
        assert grams_absorbed_for_drink(beer, session_start - timedelta(minutes=5)) == 0.0

    def test_nearly_fully_absorbed_after_three_hours(self, beer, session_start):
        absorbed = grams_absorbed_for_drink(beer, session_start + timedelta(hours=3))

        assert absorbed >= 0.98 * BEER_GRAMS
        assert absorbed <= BEER_GRAMS

    def test_exponential_phase(self, beer, session_start):
        """After the glass is empty, gut uptake is the limit."""
        absorbed = grams_absorbed_for_drink(beer, session_start + timedelta(hours=1))

        assert absorbed == pytest.approx(BEER_GRAMS * (1 - math.exp(-1.5)))

    def test_slow_sipping_limits_absorption(self, session_start):
        """A drink nursed over an hour is capped by what has been swallowed."""
        sipped = Drink(
            category=DrinkCategory.WINE,
            abv_percent=12,
            volume_ml=150,
            consumed_at=session_start,
            ingestion_mins=60,
        )
        now = session_start + timedelta(minutes=15)

        expected = volume_to_alcohol_grams(12, 150) * 15 / 60
        assert grams_absorbed_for_drink(sipped, now) == pytest.approx(expected)

    def test_missing_ingestion_uses_default(self, beer, session_start):
        beer_without_window = Drink(
            category=beer.category,
            abv_percent=beer.abv_percent,
            volume_ml=beer.volume_ml,
            consumed_at=beer.consumed_at,
            ingestion_mins=None,
        )
        now = session_start + timedelta(minutes=4)

        assert grams_absorbed_for_drink(beer_without_window, now) == pytest.approx(
            grams_absorbed_for_drink(beer, now)
        )

    def test_monotonic_in_time(self, beer, session_start):
        values = [
            grams_absorbed_for_drink(beer, session_start + timedelta(minutes=m))
            for m in range(0, 240, 5)
        ]

        assert values == sorted(values)

    def test_zero_abv(self, session_start):
        water = Drink(
            category=DrinkCategory.OTHER,
            abv_percent=0,
            volume_ml=300,
            consumed_at=session_start,
        )
        assert grams_absorbed_for_drink(water, session_start + timedelta(hours=1)) == 0.0


def test_session_total_is_sum_of_drinks(beer, session_start):
    second = Drink(
        category=DrinkCategory.SHOT,
        abv_percent=40,
        volume_ml=44,
        consumed_at=session_start + timedelta(minutes=30),
        ingestion_mins=1,
    )
    now = session_start + timedelta(hours=1)

    total = calculate_absorbed_alcohol([beer, second], now)

    assert total == pytest.approx(
        grams_absorbed_for_drink(beer, now) + grams_absorbed_for_drink(second, now)
    )
    assert calculate_absorbed_alcohol([], now) == 0.0
