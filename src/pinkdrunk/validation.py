"""Payload validation for data entering the service layer."""

from datetime import datetime
from typing import TypeVar

import pydantic
from pydantic import BaseModel, Field, field_validator

from .errors import ValidationError
from .models.profile import GenderIdentity
from .models.session import DEFAULT_INGESTION_MINS, CareEventType, DrinkCategory, EndReason

MIN_ABV = 0.1  # Below this is mocktail noise
MAX_ABV = 96.0
MIN_VOLUME_ML = 10.0
MAX_VOLUME_ML = 2000.0
MIN_INGESTION_MINS = 1
MAX_INGESTION_MINS = 180

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class DrinkPayload(BaseModel):
    """A drink to log or an edit to an existing one."""

    category: DrinkCategory
    label: str | None = Field(default=None, max_length=120)
    abv_percent: float = Field(ge=MIN_ABV, le=MAX_ABV)
    volume_ml: float = Field(ge=MIN_VOLUME_ML, le=MAX_VOLUME_ML)
    consumed_at: datetime | None = None
    ingestion_mins: int = Field(
        default=DEFAULT_INGESTION_MINS, ge=MIN_INGESTION_MINS, le=MAX_INGESTION_MINS
    )

    @field_validator("label", mode="before")
    @classmethod
    def _blank_label_is_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("consumed_at")
    @classmethod
    def _to_local_naive(cls, value: datetime | None) -> datetime | None:
        # Sessions run on naive local wall-clock time
        if value is not None and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value


class CareEventPayload(BaseModel):
    """Water, snack or meal."""

    type: CareEventType
    volume_ml: float | None = Field(default=None, ge=0, le=2000)


class ReportPayload(BaseModel):
    """Self-reported impairment level."""

    level: float = Field(ge=0, le=10)


class EndPayload(BaseModel):
    """Why the session is being ended."""

    reason: EndReason = EndReason.USER_END


class ProfilePayload(BaseModel):
    """Profile fields a user can set."""

    name: str = Field(default="", max_length=120)
    height_cm: float = Field(ge=80, le=250)
    weight_kg: float = Field(ge=30, le=250)
    age: int = Field(ge=18, le=99)
    gender_identity: GenderIdentity
    gender_custom_label: str = Field(default="", max_length=80)
    medications: bool = False
    metabolism_score: int = Field(default=5, ge=1, le=10)
    tolerance_score: int = Field(default=5, ge=1, le=10)
    target_level: int = Field(default=5, ge=0, le=10)


def parse_payload(model: type[PayloadT], data: dict) -> PayloadT:
    """Validate raw data into a payload model.

    Raises:
        ValidationError: naming the first offending field
    """
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise ValidationError(field, first["msg"]) from e
