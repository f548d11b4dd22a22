"""Per-user impairment threshold ladder.

Each user has ten thresholds, one per integer level 1-10, giving the grams
of absorbed alcohol at which that level is reached. The ladder is seeded
from body composition and then pulled toward self-reported observations
with an EWMA, keeping adjacent levels at least MIN_GRAM_GAP apart.

All functions here are pure: they return new tuples and never mutate
their input.
"""

import math
from collections.abc import Iterable, Sequence

from ..models.prediction import ThresholdSnapshot
from ..models.profile import Profile
from .body_composition import derive_r_factor
from .widmark import level_to_bac

LEVELS = tuple(range(1, 11))
DEFAULT_CONFIDENCE = 0.25
EWMA_ALPHA = 0.25
CONFIDENCE_STEP = 0.05
MAX_CONFIDENCE = 1.0
MIN_GRAM_GAP = 5.0


def build_thresholds_from_profile(profile: Profile) -> tuple[ThresholdSnapshot, ...]:
    """Seed a full ladder from a profile.

    Level k starts at the grams needed to reach level k's BAC for this
    body; levels closer together than MIN_GRAM_GAP are then spread upward.
    """
    r = derive_r_factor(profile.weight_kg, profile.gender_identity, profile.total_body_water_l)
    weight_grams = profile.weight_kg * 1000

    grams = [
        max(0.0, level_to_bac(level, profile.tolerance_score) / 100 * r * weight_grams)
        for level in LEVELS
    ]
    for i in range(1, len(grams)):
        grams[i] = max(grams[i], grams[i - 1] + MIN_GRAM_GAP)

    return tuple(
        ThresholdSnapshot(level=level, grams=value, confidence=DEFAULT_CONFIDENCE)
        for level, value in zip(LEVELS, grams)
    )


def missing_thresholds(
    existing: Iterable[ThresholdSnapshot],
    defaults: Iterable[ThresholdSnapshot],
) -> list[ThresholdSnapshot]:
    """Defaults for the levels that have no stored threshold yet."""
    present = {t.level for t in existing}
    return [t for t in defaults if t.level not in present]


def sort_thresholds(thresholds: Iterable[ThresholdSnapshot]) -> tuple[ThresholdSnapshot, ...]:
    """Order thresholds by level."""
    return tuple(sorted(thresholds, key=lambda t: t.level))


def apply_observation(
    thresholds: Sequence[ThresholdSnapshot],
    observed_level: float,
    observed_grams: float,
) -> Sequence[ThresholdSnapshot]:
    """Blend a self-reported level into the ladder.

    The matching level moves toward the observed grams by EWMA_ALPHA and
    gains confidence. The minimum gap is then restored walking upward from
    that level (raising) and downward from it (lowering, floored at
    MIN_GRAM_GAP).

    Args:
        thresholds: Current ladder, any order
        observed_level: Level the user says they feel
        observed_grams: Grams absorbed when they said it

    Returns:
        A new ladder ordered by level, or ``thresholds`` itself when the
        observation cannot be applied.
    """
    if not thresholds:
        return thresholds
    if not math.isfinite(observed_grams) or observed_grams <= 0:
        return thresholds
    if not math.isfinite(observed_level):
        return thresholds

    level = _clamp_level(math.floor(observed_level + 0.5))
    ordered = sorted(thresholds, key=lambda t: t.level)
    index = next((i for i, t in enumerate(ordered) if t.level == level), None)
    if index is None:
        return thresholds

    grams = [t.grams for t in ordered]
    confidence = [t.confidence for t in ordered]

    grams[index] = _ewma(grams[index], observed_grams, EWMA_ALPHA)
    confidence[index] = min(MAX_CONFIDENCE, confidence[index] + CONFIDENCE_STEP)

    for i in range(index + 1, len(grams)):
        min_allowed = grams[i - 1] + MIN_GRAM_GAP
        if grams[i] < min_allowed:
            grams[i] = min_allowed

    for i in range(index - 1, -1, -1):
        max_allowed = grams[i + 1] - MIN_GRAM_GAP
        if grams[i] > max_allowed:
            grams[i] = max(MIN_GRAM_GAP, max_allowed)

    return tuple(
        ThresholdSnapshot(level=t.level, grams=g, confidence=c)
        for t, g, c in zip(ordered, grams, confidence)
    )


def _ewma(previous: float, observation: float, alpha: float) -> float:
    return previous + alpha * (observation - previous)


def _clamp_level(level: int) -> int:
    return min(LEVELS[-1], max(LEVELS[0], level))
