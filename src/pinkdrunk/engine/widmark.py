"""Widmark BAC model and the BAC <-> impairment level mapping.

BAC values are in g/dL (percent). Levels are real numbers on [0, 10]
where a BAC of 0.06 maps to level 5 at neutral tolerance.
"""

from collections.abc import Callable
from dataclasses import dataclass

from ..models.profile import GenderIdentity
from .body_composition import derive_r_factor

GRAMS_PER_ML_OF_ALCOHOL = 0.789
STANDARD_DRINK_GRAMS = 14.0
MAX_SIMULATED_DRINKS = 6

# Level 5 at neutral tolerance
REFERENCE_BAC = 0.06
REFERENCE_LEVEL = 5

BASE_ELIMINATION_RATE = 0.012  # g/dL per hour at metabolism 5
ELIMINATION_PER_METABOLISM_POINT = 0.0008
TOLERANCE_DAMPING_PER_POINT = 0.035
MIN_TOLERANCE_MULTIPLIER = 0.5
LEVEL_SHIFT_PER_TOLERANCE_POINT = 0.25
# Differs from LEVEL_SHIFT_PER_TOLERANCE_POINT; both are kept as observed
INVERSE_SHIFT_PER_TOLERANCE_POINT = 0.015

MAX_LEVEL = 10.0


@dataclass(frozen=True)
class WidmarkResult:
    """Outcome of one BAC calculation."""

    bac: float  # raw BAC after elimination
    adjusted_bac: float  # after tolerance damping
    level: float


def volume_to_alcohol_grams(abv_percent: float, volume_ml: float) -> float:
    """Grams of ethanol in a volume of drink."""
    return (abv_percent / 100) * volume_ml * GRAMS_PER_ML_OF_ALCOHOL


def elimination_rate(metabolism_score: float) -> float:
    """BAC eliminated per hour for a metabolism score (1-10)."""
    return BASE_ELIMINATION_RATE + (metabolism_score - 5) * ELIMINATION_PER_METABOLISM_POINT


def tolerance_multiplier(tolerance_score: float) -> float:
    """Damping applied to raw BAC for a tolerance score (1-10)."""
    return max(MIN_TOLERANCE_MULTIPLIER, 1 - (tolerance_score - 5) * TOLERANCE_DAMPING_PER_POINT)


def calculate_widmark(
    total_alcohol_grams: float,
    weight_kg: float,
    gender: GenderIdentity,
    elapsed_hours: float,
    metabolism_score: float,
    tolerance_score: float,
    total_body_water_l: float | None = None,
) -> WidmarkResult:
    """Convert absorbed grams into BAC and impairment level.

    Args:
        total_alcohol_grams: Alcohol absorbed into the bloodstream so far
        weight_kg: Body weight
        gender: Gender identity, used for the r-factor fallback
        elapsed_hours: Hours since the session started
        metabolism_score: Self-rated metabolism (1-10)
        tolerance_score: Self-rated tolerance (1-10)
        total_body_water_l: Cached total body water, if known

    Returns:
        WidmarkResult with raw BAC, tolerance-adjusted BAC and level
    """
    weight_grams = weight_kg * 1000
    r = derive_r_factor(weight_kg, gender, total_body_water_l)

    if weight_grams > 0:
        base_bac = (total_alcohol_grams / (r * weight_grams)) * 100
    else:
        base_bac = 0.0

    elimination = elimination_rate(metabolism_score) * elapsed_hours
    raw_bac = max(0.0, base_bac - elimination)

    adjusted_bac = max(0.0, raw_bac * tolerance_multiplier(tolerance_score))

    return WidmarkResult(
        bac=raw_bac,
        adjusted_bac=adjusted_bac,
        level=bac_to_level(adjusted_bac, tolerance_score),
    )


def bac_to_level(bac: float, tolerance_score: float) -> float:
    """Map BAC to the 0-10 impairment level.

    The BAC-proportional part is offset by a fixed per-tolerance-point
    shift. Callers pass tolerance-adjusted BAC, so at realistic session
    BACs the damping outweighs the shift.
    """
    base_level = (bac / REFERENCE_BAC) * REFERENCE_LEVEL
    shift = (tolerance_score - 5) * LEVEL_SHIFT_PER_TOLERANCE_POINT
    return _clamp(base_level + shift, 0.0, MAX_LEVEL)


def level_to_bac(level: float, tolerance_score: float) -> float:
    """Inverse of bac_to_level, using the smaller tolerance shift."""
    shift = (tolerance_score - 5) * INVERSE_SHIFT_PER_TOLERANCE_POINT
    return ((level - shift) / REFERENCE_LEVEL) * REFERENCE_BAC


def estimate_drinks_to_target(
    current_level: float,
    target_level: float,
    simulate: Callable[[float], float],
) -> int:
    """Count standard drinks needed to reach the target level.

    Adds one standard drink at a time, up to MAX_SIMULATED_DRINKS, asking
    ``simulate`` for the level with that many extra grams absorbed. When
    the cap is hit without reaching the target the count is reduced by
    one.

    Args:
        current_level: Level right now
        target_level: Level the user is aiming for
        simulate: Maps additional grams to the resulting level

    Returns:
        Number of additional standard drinks
    """
    if current_level >= target_level:
        return 0

    drinks = 0
    level = current_level
    while level < target_level and drinks < MAX_SIMULATED_DRINKS:
        drinks += 1
        level = simulate(STANDARD_DRINK_GRAMS * drinks)

    return max(0, drinks - (0 if level >= target_level else 1))


def estimate_minutes_to_target(
    current_bac: float,
    target_level: float,
    tolerance_score: float,
    metabolism_score: float,
) -> int:
    """Minutes of elimination until BAC drops back to the target's BAC."""
    target_bac = level_to_bac(target_level, tolerance_score)
    if current_bac <= target_bac:
        return 0

    hours = (current_bac - target_bac) / elimination_rate(metabolism_score)
    return max(0, _round_half_up(hours * 60))


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))
