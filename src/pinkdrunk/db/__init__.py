"""Database layer for pinkdrunk."""

from .engine import get_db_path, init_db
from .repositories import (
    ProfileRepository,
    SessionRepository,
    ThresholdRepository,
)

__all__ = [
    "get_db_path",
    "init_db",
    "ProfileRepository",
    "SessionRepository",
    "ThresholdRepository",
]
