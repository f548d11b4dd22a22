"""Drinking session data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

DEFAULT_INGESTION_MINS = 10


class DrinkCategory(str, Enum):
    """Kind of drink logged."""

    BEER = "beer"
    WINE = "wine"
    COCKTAIL = "cocktail"
    SHOT = "shot"
    OTHER = "other"


class CareEventType(str, Enum):
    """Harm-reduction actions a user can log."""

    WATER = "water"
    SNACK = "snack"
    MEAL = "meal"


class EndReason(str, Enum):
    """Why a session ended."""

    USER_END = "user_end"
    AUTO_ALERT = "auto_alert"
    TIMEOUT = "timeout"


@dataclass
class Drink:
    """A single logged pour."""

    category: DrinkCategory
    abv_percent: float
    volume_ml: float
    consumed_at: datetime
    ingestion_mins: int | None = DEFAULT_INGESTION_MINS
    label: str | None = None
    session_id: int | None = None
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "category": self.category.value,
            "label": self.label,
            "abv_percent": self.abv_percent,
            "volume_ml": self.volume_ml,
            "consumed_at": self.consumed_at.isoformat(),
            "ingestion_mins": self.ingestion_mins,
        }

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "Drink":
        """Create from dictionary."""
        consumed_at = data["consumed_at"]
        if isinstance(consumed_at, str):
            consumed_at = datetime.fromisoformat(consumed_at)

        return cls(
            id=id if id is not None else data.get("id"),
            session_id=data.get("session_id"),
            category=DrinkCategory(data["category"]),
            label=data.get("label"),
            abv_percent=data["abv_percent"],
            volume_ml=data["volume_ml"],
            consumed_at=consumed_at,
            ingestion_mins=data.get("ingestion_mins", DEFAULT_INGESTION_MINS),
        )


@dataclass
class CareEvent:
    """Water, snack or meal logged during a session."""

    type: CareEventType
    created_at: datetime
    volume_ml: float | None = None
    session_id: int | None = None
    id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "type": self.type.value,
            "volume_ml": self.volume_ml,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class DrinkingSession:
    """A drinking session with its drinks and care events.

    A session is active while ended_at is None. Drinks and care events are
    kept in chronological order.
    """

    user_id: str
    started_at: datetime
    target_level: float | None = None
    ended_at: datetime | None = None
    ended_reason: EndReason | None = None
    reported_level: float | None = None
    reported_at: datetime | None = None
    drinks: list[Drink] = field(default_factory=list)
    care_events: list[CareEvent] = field(default_factory=list)
    id: int | None = None

    @property
    def is_active(self) -> bool:
        """Whether the session is still running."""
        return self.ended_at is None

    def find_drink(self, drink_id: int) -> Drink | None:
        """Find a drink of this session by ID."""
        for drink in self.drinks:
            if drink.id == drink_id:
                return drink
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "ended_reason": self.ended_reason.value if self.ended_reason else None,
            "target_level": self.target_level,
            "reported_level": self.reported_level,
            "reported_at": self.reported_at.isoformat() if self.reported_at else None,
            "drinks": [d.to_dict() for d in self.drinks],
            "care_events": [e.to_dict() for e in self.care_events],
        }
