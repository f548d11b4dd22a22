"""Pharmacokinetic prediction engine.

Pure, synchronous functions. Every time-dependent function takes ``now``
explicitly.
"""

from .absorption import calculate_absorbed_alcohol, grams_absorbed_for_drink
from .body_composition import (
    BodyMetrics,
    calculate_bmi,
    derive_body_metrics,
    derive_r_factor,
    estimate_total_body_water,
)
from .care import CareOffsets, compute_care_offsets
from .session_calculator import compute_session_prediction, pick_recommended_action
from .thresholds import apply_observation, build_thresholds_from_profile
from .widmark import (
    bac_to_level,
    calculate_widmark,
    estimate_drinks_to_target,
    estimate_minutes_to_target,
    level_to_bac,
    volume_to_alcohol_grams,
)

__all__ = [
    "BodyMetrics",
    "CareOffsets",
    "apply_observation",
    "bac_to_level",
    "build_thresholds_from_profile",
    "calculate_absorbed_alcohol",
    "calculate_bmi",
    "calculate_widmark",
    "compute_care_offsets",
    "compute_session_prediction",
    "derive_body_metrics",
    "derive_r_factor",
    "estimate_drinks_to_target",
    "estimate_minutes_to_target",
    "estimate_total_body_water",
    "grams_absorbed_for_drink",
    "level_to_bac",
    "pick_recommended_action",
    "volume_to_alcohol_grams",
]
