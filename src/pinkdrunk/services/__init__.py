"""Service layer: workflows over the engine and the stores."""

from .calibration import ThresholdService
from .profiles import ProfileService
from .sessions import SessionService, SessionSummary, SessionView

__all__ = [
    "ProfileService",
    "SessionService",
    "SessionSummary",
    "SessionView",
    "ThresholdService",
]
