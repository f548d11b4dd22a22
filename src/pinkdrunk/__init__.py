"""pinkdrunk: real-time alcohol impairment estimation and harm-reduction advice."""

__version__ = "0.1.0"
