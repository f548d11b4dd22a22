"""Web interface for pinkdrunk."""

from .app import create_app

__all__ = ["create_app"]
