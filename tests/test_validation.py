"""Tests for payload validation."""

from datetime import datetime, timedelta, timezone

import pytest

from pinkdrunk.errors import ValidationError
from pinkdrunk.models.session import DEFAULT_INGESTION_MINS, EndReason
from pinkdrunk.validation import (
    CareEventPayload,
    DrinkPayload,
    EndPayload,
    ProfilePayload,
    ReportPayload,
    parse_payload,
)

VALID_DRINK = {"category": "beer", "abv_percent": 5, "volume_ml": 355}
VALID_PROFILE = {"height_cm": 170, "weight_kg": 65, "age": 28, "gender_identity": "female"}


class TestDrinkPayload:
    """Tests for drink validation."""

    def test_defaults(self):
        payload = parse_payload(DrinkPayload, VALID_DRINK)

        assert payload.ingestion_mins == DEFAULT_INGESTION_MINS
        assert payload.consumed_at is None
        assert payload.label is None

    def test_blank_label_becomes_none(self):
        payload = parse_payload(DrinkPayload, {**VALID_DRINK, "label": "   "})
        assert payload.label is None

    def test_label_trimmed(self):
        payload = parse_payload(DrinkPayload, {**VALID_DRINK, "label": "  IPA "})
        assert payload.label == "IPA"

    def test_aware_time_converted_to_local(self):
        payload = parse_payload(DrinkPayload, {**VALID_DRINK, "consumed_at": "2024-06-01T21:00:00Z"})

        expected = datetime(2024, 6, 1, 21, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert payload.consumed_at.tzinfo is None
        assert payload.consumed_at == expected

    def test_offset_time_converted_to_local(self):
        payload = parse_payload(
            DrinkPayload, {**VALID_DRINK, "consumed_at": "2024-06-01T23:00:00+02:00"}
        )

        cest = timezone(timedelta(hours=2))
        expected = datetime(2024, 6, 1, 23, 0, tzinfo=cest).astimezone().replace(tzinfo=None)
        assert payload.consumed_at == expected

    def test_naive_time_kept(self):
        payload = parse_payload(DrinkPayload, {**VALID_DRINK, "consumed_at": "2024-06-01T21:00:00"})
        assert payload.consumed_at == datetime(2024, 6, 1, 21, 0)

    @pytest.mark.parametrize(
        "field, value",
        [
            ("abv_percent", 0),
            ("abv_percent", 97),
            ("volume_ml", 5),
            ("volume_ml", 2500),
            ("ingestion_mins", 0),
            ("ingestion_mins", 181),
            ("category", "mead"),
            ("label", "x" * 121),
        ],
    )
    def test_out_of_bounds(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(DrinkPayload, {**VALID_DRINK, field: value})

        assert exc_info.value.field == field

    def test_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(DrinkPayload, {"category": "beer", "abv_percent": 5})

        assert exc_info.value.field == "volume_ml"


class TestOtherPayloads:
    """Tests for care, report, end and profile payloads."""

    def test_care_event(self):
        payload = parse_payload(CareEventPayload, {"type": "water", "volume_ml": 500})
        assert payload.volume_ml == 500

        with pytest.raises(ValidationError):
            parse_payload(CareEventPayload, {"type": "water", "volume_ml": 5000})

    def test_report_bounds(self):
        assert parse_payload(ReportPayload, {"level": 0}).level == 0
        assert parse_payload(ReportPayload, {"level": 10}).level == 10

        with pytest.raises(ValidationError):
            parse_payload(ReportPayload, {"level": 10.5})

    def test_end_reason_default(self):
        assert parse_payload(EndPayload, {}).reason == EndReason.USER_END
        assert parse_payload(EndPayload, {"reason": "timeout"}).reason == EndReason.TIMEOUT

    def test_profile_defaults(self):
        payload = parse_payload(ProfilePayload, VALID_PROFILE)

        assert payload.tolerance_score == 5
        assert payload.metabolism_score == 5
        assert payload.target_level == 5
        assert payload.medications is False

    @pytest.mark.parametrize(
        "field, value",
        [
            ("height_cm", 50),
            ("weight_kg", 300),
            ("age", 17),
            ("tolerance_score", 0),
            ("metabolism_score", 11),
            ("target_level", 11),
            ("gender_identity", "unknown"),
        ],
    )
    def test_profile_out_of_bounds(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(ProfilePayload, {**VALID_PROFILE, field: value})

        assert exc_info.value.field == field
