"""Body composition estimates used by the Widmark model."""

import math
from dataclasses import dataclass

from ..models.profile import GenderIdentity

# Widmark r-factors used when total body water is unknown
DEFAULT_R_FACTORS = {
    GenderIdentity.FEMALE: 0.55,
    GenderIdentity.MALE: 0.68,
    GenderIdentity.NONBINARY: 0.62,
    GenderIdentity.CUSTOM: 0.62,
}
FALLBACK_R_FACTOR = 0.62
MIN_R_FACTOR = 0.45
MAX_R_FACTOR = 0.85


@dataclass(frozen=True)
class BodyMetrics:
    """Derived body composition values."""

    bmi: float
    total_body_water_l: float
    r_factor: float


def calculate_bmi(height_cm: float, weight_kg: float) -> float:
    """Calculate BMI rounded to one decimal.

    Returns 0 when height or weight is not positive.
    """
    if height_cm <= 0 or weight_kg <= 0:
        return 0.0
    height_m = height_cm / 100
    return _round_one_decimal(weight_kg / (height_m * height_m))


def estimate_total_body_water(
    height_cm: float,
    weight_kg: float,
    age: float,
    gender: GenderIdentity,
) -> float:
    """Estimate total body water in liters using the Watson formulas.

    Male and female use their own formula; every other identity averages
    the two. Returns 0 when height or weight is not positive.
    """
    if height_cm <= 0 or weight_kg <= 0:
        return 0.0

    male = 2.447 - 0.09516 * age + 0.1074 * height_cm + 0.3362 * weight_kg
    female = -2.097 + 0.1069 * height_cm + 0.2466 * weight_kg

    if gender == GenderIdentity.MALE:
        estimate = male
    elif gender == GenderIdentity.FEMALE:
        estimate = female
    else:
        estimate = (male + female) / 2

    return _round_one_decimal(max(0.0, estimate))


def derive_r_factor(
    weight_kg: float,
    gender: GenderIdentity,
    total_body_water_l: float | None = None,
) -> float:
    """Widmark distribution ratio.

    Uses TBW / weight clamped to [0.45, 0.85] when both are known,
    otherwise the per-gender default.
    """
    if weight_kg > 0 and total_body_water_l and total_body_water_l > 0:
        return _clamp(total_body_water_l / weight_kg, MIN_R_FACTOR, MAX_R_FACTOR)
    return DEFAULT_R_FACTORS.get(gender, FALLBACK_R_FACTOR)


def derive_body_metrics(
    height_cm: float,
    weight_kg: float,
    age: float,
    gender: GenderIdentity,
) -> BodyMetrics:
    """Compute BMI, total body water and r-factor in one go."""
    bmi = calculate_bmi(height_cm, weight_kg)
    tbw = estimate_total_body_water(height_cm, weight_kg, age, gender)
    return BodyMetrics(
        bmi=bmi,
        total_body_water_l=tbw,
        r_factor=derive_r_factor(weight_kg, gender, tbw),
    )


def _round_one_decimal(value: float) -> float:
    # Half-up, not banker's rounding
    return math.floor(value * 10 + 0.5) / 10


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))
