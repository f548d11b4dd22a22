"""Offsets from hydration and food logged during a session."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..models.session import CareEvent, CareEventType

HYDRATION_WINDOW = timedelta(hours=2)
FOOD_WINDOW = timedelta(hours=3)

HYDRATION_BAC_PER_LITER = 0.003
HYDRATION_BAC_CAP = 0.01
HYDRATION_LEVEL_PER_LITER = 0.4
HYDRATION_LEVEL_CAP = 0.8

FOOD_WEIGHTS = {
    CareEventType.MEAL: 1.0,
    CareEventType.SNACK: 0.5,
}
FOOD_BAC_PER_POINT = 0.004
FOOD_BAC_CAP = 0.012
FOOD_LEVEL_PER_POINT = 0.5
FOOD_LEVEL_CAP = 1.0


@dataclass(frozen=True)
class CareOffsets:
    """Amounts to subtract from the level and BAC estimates."""

    level_offset: float = 0.0
    bac_offset: float = 0.0

    def apply_to_level(self, level: float) -> float:
        """Subtract the level offset, never going below 0."""
        return max(level - self.level_offset, 0.0)

    def apply_to_bac(self, bac: float) -> float:
        """Subtract the BAC offset, never going below 0."""
        return max(bac - self.bac_offset, 0.0)


def compute_care_offsets(events: Iterable[CareEvent], now: datetime) -> CareOffsets:
    """Compute bounded offsets from recent water, snacks and meals.

    Water counts for 2 hours, food for 3. Each contribution is capped so
    care can soften the estimate but never cancel real drinking.
    """
    hydration_liters = 0.0
    food_score = 0.0

    for event in events:
        age = now - event.created_at
        if event.type == CareEventType.WATER:
            if age <= HYDRATION_WINDOW:
                hydration_liters += (event.volume_ml or 0) / 1000
        elif event.type in FOOD_WEIGHTS and age <= FOOD_WINDOW:
            food_score += FOOD_WEIGHTS[event.type]

    hydration_bac = min(hydration_liters * HYDRATION_BAC_PER_LITER, HYDRATION_BAC_CAP)
    hydration_level = min(hydration_liters * HYDRATION_LEVEL_PER_LITER, HYDRATION_LEVEL_CAP)

    food_bac = min(food_score * FOOD_BAC_PER_POINT, FOOD_BAC_CAP)
    food_level = min(food_score * FOOD_LEVEL_PER_POINT, FOOD_LEVEL_CAP)

    return CareOffsets(
        level_offset=hydration_level + food_level,
        bac_offset=hydration_bac + food_bac,
    )
