"""Pytest configuration and fixtures."""

import pytest
import tempfile
from datetime import datetime
from pathlib import Path

from pinkdrunk.models.profile import GenderIdentity, Profile
from pinkdrunk.models.session import DrinkingSession
from pinkdrunk.validation import ProfilePayload


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def session_start():
    """Fixed start time for a night out."""
    return datetime(2024, 6, 1, 21, 0, 0)


@pytest.fixture
def sample_profile():
    """A 170 cm / 65 kg / 28 y female with neutral scores and cached metrics."""
    return Profile(
        user_id="alex",
        name="Alex",
        height_cm=170,
        weight_kg=65,
        age=28,
        gender_identity=GenderIdentity.FEMALE,
        tolerance_score=5,
        metabolism_score=5,
        target_level=5,
        bmi=22.5,
        total_body_water_l=32.1,
    )


@pytest.fixture
def sample_profile_payload():
    """Payload that produces the sample profile."""
    return ProfilePayload(
        name="Alex",
        height_cm=170,
        weight_kg=65,
        age=28,
        gender_identity=GenderIdentity.FEMALE,
    )


@pytest.fixture
def sample_session(session_start):
    """An active session with no drinks yet."""
    return DrinkingSession(id=1, user_id="alex", started_at=session_start, target_level=5)
