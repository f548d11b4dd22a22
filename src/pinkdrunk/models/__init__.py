"""Data models for pinkdrunk."""

from .prediction import (
    RecommendedAction,
    RecordedPrediction,
    SessionPrediction,
    ThresholdSnapshot,
)
from .profile import GenderIdentity, Profile
from .session import CareEvent, CareEventType, Drink, DrinkCategory, DrinkingSession, EndReason

__all__ = [
    "CareEvent",
    "CareEventType",
    "Drink",
    "DrinkCategory",
    "DrinkingSession",
    "EndReason",
    "GenderIdentity",
    "Profile",
    "RecommendedAction",
    "RecordedPrediction",
    "SessionPrediction",
    "ThresholdSnapshot",
]
