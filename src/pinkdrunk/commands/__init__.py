"""CLI commands for pinkdrunk."""

from .init import init
from .profile import profile
from .serve import serve
from .session import session
from .thresholds import thresholds

__all__ = [
    "init",
    "profile",
    "serve",
    "session",
    "thresholds",
]
