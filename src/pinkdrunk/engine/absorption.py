"""Alcohol absorption model.

A drink is absorbed at the slower of two processes: swallowing it over
its ingestion window (linear), and first-order gut absorption
(1 - e^(-k t)). Liquid still in the glass cannot be absorbed, so a slowly
sipped drink stays partly unabsorbed even after gut uptake would be done.
"""

import math
from collections.abc import Iterable
from datetime import datetime

from ..models.session import DEFAULT_INGESTION_MINS, Drink
from .widmark import volume_to_alcohol_grams

ABSORPTION_RATE_PER_HOUR = 1.5
MIN_INGESTION_MINS = 1


def grams_absorbed_for_drink(drink: Drink, now: datetime) -> float:
    """Grams of a drink's alcohol absorbed as of ``now``."""
    grams = volume_to_alcohol_grams(drink.abv_percent, drink.volume_ml)
    if not math.isfinite(grams) or grams <= 0:
        return 0.0

    delta_minutes = (now - drink.consumed_at).total_seconds() / 60
    if delta_minutes <= 0:
        return 0.0

    ingestion_mins = drink.ingestion_mins
    if ingestion_mins is None:
        ingestion_mins = DEFAULT_INGESTION_MINS
    ingestion_mins = max(ingestion_mins, MIN_INGESTION_MINS)
    ingestion_fraction = min(1.0, delta_minutes / ingestion_mins)

    absorption_fraction = 1 - math.exp(-ABSORPTION_RATE_PER_HOUR * delta_minutes / 60)

    fraction = min(ingestion_fraction, absorption_fraction)
    return grams * min(1.0, max(0.0, fraction))


def calculate_absorbed_alcohol(drinks: Iterable[Drink], now: datetime) -> float:
    """Total grams absorbed across all drinks of a session."""
    return sum((grams_absorbed_for_drink(drink, now) for drink in drinks), 0.0)
