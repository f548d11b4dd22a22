"""Threshold and prediction models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RecommendedAction(str, Enum):
    """Harm-reduction advice, from mildest to strongest."""

    KEEP = "keep"  # Pace is fine
    HYDRATE = "hydrate"  # Well below target, good moment for water
    SLOW = "slow"  # Close to target BAC
    STOP = "stop"  # One level past target
    ABORT = "abort"  # Two or more levels past target


@dataclass(frozen=True)
class ThresholdSnapshot:
    """Grams of absorbed alcohol at which a user reaches a level."""

    level: int
    grams: float
    confidence: float

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "level": self.level,
            "grams": self.grams,
            "confidence": self.confidence,
        }


@dataclass
class SessionPrediction:
    """Derived view of a session at a point in time.

    Recomputed on demand; never the source of truth.
    """

    session_id: int | None
    level_estimate: float
    bac: float
    adjusted_bac: float
    drinks_to_target: int
    minutes_to_target: int
    recommended_action: RecommendedAction
    target_level: float
    target_bac: float
    absorbed_alcohol_grams: float
    thresholds: tuple[ThresholdSnapshot, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "session_id": self.session_id,
            "level_estimate": self.level_estimate,
            "bac": self.bac,
            "adjusted_bac": self.adjusted_bac,
            "drinks_to_target": self.drinks_to_target,
            "minutes_to_target": self.minutes_to_target,
            "recommended_action": self.recommended_action.value,
            "target_level": self.target_level,
            "target_bac": self.target_bac,
            "absorbed_alcohol_grams": self.absorbed_alcohol_grams,
            "thresholds": [t.to_dict() for t in self.thresholds],
        }


@dataclass
class RecordedPrediction:
    """Prediction summary persisted when a drink is logged or edited."""

    session_id: int
    level_estimate: float
    drinks_to_target: int
    recommended_action: RecommendedAction
    minutes_to_target: int
    produced_at: datetime
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "level_estimate": self.level_estimate,
            "drinks_to_target": self.drinks_to_target,
            "recommended_action": self.recommended_action.value,
            "minutes_to_target": self.minutes_to_target,
            "produced_at": self.produced_at.isoformat(),
        }
