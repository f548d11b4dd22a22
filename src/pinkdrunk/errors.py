"""Domain exceptions raised by the service layer.

The engine never raises; these come from orchestration only.
"""


class PinkDrunkError(Exception):
    """Base class for pinkdrunk errors."""


class ProfileNotFoundError(PinkDrunkError):
    """No profile stored for the user."""

    def __init__(self, user_id: str):
        super().__init__(f"Profile not found for user '{user_id}'")
        self.user_id = user_id


class SessionNotFoundError(PinkDrunkError):
    """Session missing, owned by someone else, or already ended."""

    def __init__(self, session_id: int | None):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class DrinkNotFoundError(PinkDrunkError):
    """Drink missing from the session."""

    def __init__(self, drink_id: int):
        super().__init__(f"Drink {drink_id} not found")
        self.drink_id = drink_id


class ValidationError(PinkDrunkError):
    """A payload field is out of bounds."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
