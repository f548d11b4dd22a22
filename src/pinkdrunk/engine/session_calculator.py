"""Session prediction: absorption, BAC, care offsets and advice combined."""

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from ..models.prediction import RecommendedAction, SessionPrediction, ThresholdSnapshot
from ..models.profile import Profile
from ..models.session import CareEvent, Drink, DrinkingSession
from .absorption import calculate_absorbed_alcohol
from .care import compute_care_offsets
from .widmark import (
    calculate_widmark,
    estimate_drinks_to_target,
    estimate_minutes_to_target,
    level_to_bac,
)

logger = logging.getLogger(__name__)

# A self-report younger than this replaces the modelled level
REPORT_FRESHNESS = timedelta(minutes=45)

ABORT_LEVEL_DELTA = 2
STOP_LEVEL_DELTA = 1
HYDRATE_LEVEL_DELTA = -1
SLOW_BAND_LOW = 0.95
SLOW_BAND_HIGH = 1.10


def compute_session_prediction(
    session: DrinkingSession,
    drinks: Sequence[Drink],
    care_events: Sequence[CareEvent],
    profile: Profile,
    now: datetime,
    thresholds: Sequence[ThresholdSnapshot] = (),
) -> SessionPrediction:
    """Predict the current state of a drinking session.

    Args:
        session: Session being evaluated (start time, target, last report)
        drinks: Drinks logged in the session
        care_events: Water, snacks and meals logged in the session
        profile: Drinker's profile snapshot
        now: Evaluation time; never read from a clock here
        thresholds: Threshold ladder returned alongside the prediction

    Returns:
        SessionPrediction for ``now``
    """
    thresholds = tuple(thresholds)
    target_level = session.target_level if session.target_level is not None else profile.target_level
    target_bac = level_to_bac(target_level, profile.tolerance_score)

    if not drinks:
        return SessionPrediction(
            session_id=session.id,
            level_estimate=0.0,
            bac=0.0,
            adjusted_bac=0.0,
            drinks_to_target=0,
            minutes_to_target=0,
            recommended_action=RecommendedAction.KEEP,
            target_level=target_level,
            target_bac=target_bac,
            absorbed_alcohol_grams=0.0,
            thresholds=thresholds,
        )

    absorbed = calculate_absorbed_alcohol(drinks, now)
    elapsed_hours = max(0.0, (now - session.started_at).total_seconds() / 3600)

    def widmark_for(grams: float):
        return calculate_widmark(
            total_alcohol_grams=grams,
            weight_kg=profile.weight_kg,
            gender=profile.gender_identity,
            elapsed_hours=elapsed_hours,
            metabolism_score=profile.metabolism_score,
            tolerance_score=profile.tolerance_score,
            total_body_water_l=profile.total_body_water_l,
        )

    current = widmark_for(absorbed)
    offsets = compute_care_offsets(care_events, now)
    cared_level = offsets.apply_to_level(current.level)
    cared_bac = offsets.apply_to_bac(current.adjusted_bac)

    effective_level = cared_level
    effective_bac = cared_bac
    if _has_fresh_report(session, now):
        effective_level = session.reported_level
        effective_bac = max(0.0, level_to_bac(session.reported_level, profile.tolerance_score))
        logger.debug(
            "Fresh self-report overrides modelled level %.2f with %.2f",
            cared_level,
            effective_level,
        )

    # Extra drinks are simulated on the physiological path, not the report
    drinks_to_target = estimate_drinks_to_target(
        effective_level,
        target_level,
        lambda extra_grams: offsets.apply_to_level(widmark_for(absorbed + extra_grams).level),
    )
    minutes_to_target = estimate_minutes_to_target(
        effective_bac,
        target_level,
        profile.tolerance_score,
        profile.metabolism_score,
    )

    return SessionPrediction(
        session_id=session.id,
        level_estimate=effective_level,
        bac=current.bac,
        adjusted_bac=effective_bac,
        drinks_to_target=drinks_to_target,
        minutes_to_target=minutes_to_target,
        recommended_action=pick_recommended_action(
            effective_level, target_level, effective_bac, target_bac
        ),
        target_level=target_level,
        target_bac=target_bac,
        absorbed_alcohol_grams=absorbed,
        thresholds=thresholds,
    )


def pick_recommended_action(
    level: float,
    target_level: float,
    adjusted_bac: float,
    target_bac: float,
) -> RecommendedAction:
    """Choose advice from the level and BAC relative to the target.

    Checked in order: abort, stop, slow (BAC within -5%/+10% of the target
    BAC), hydrate, keep.
    """
    level_delta = level - target_level

    if level_delta >= ABORT_LEVEL_DELTA:
        return RecommendedAction.ABORT
    if level_delta >= STOP_LEVEL_DELTA:
        return RecommendedAction.STOP
    if target_bac * SLOW_BAND_LOW <= adjusted_bac <= target_bac * SLOW_BAND_HIGH:
        return RecommendedAction.SLOW
    if level_delta < HYDRATE_LEVEL_DELTA:
        return RecommendedAction.HYDRATE
    return RecommendedAction.KEEP


def _has_fresh_report(session: DrinkingSession, now: datetime) -> bool:
    if session.reported_level is None or session.reported_at is None:
        return False
    age = now - session.reported_at
    return timedelta(0) <= age <= REPORT_FRESHNESS
