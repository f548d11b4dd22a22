"""Tests for the JSON API."""

import pytest
from fastapi.testclient import TestClient

from pinkdrunk.web import create_app

PROFILE = {"height_cm": 170, "weight_kg": 65, "age": 28, "gender_identity": "female"}
BEER = {"category": "beer", "abv_percent": 5, "volume_ml": 360}


@pytest.fixture
def client(temp_db_path):
    with TestClient(create_app(temp_db_path)) as client:
        yield client


@pytest.fixture
def profiled(client):
    response = client.post("/users/alex/profile", json=PROFILE)
    assert response.status_code == 200
    return client


def start(client, user="alex"):
    response = client.post(f"/users/{user}/sessions/start")
    assert response.status_code == 200
    return response.json()["session"]["id"]


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProfileRoutes:
    """Tests for profile routes."""

    def test_save_and_read(self, client):
        saved = client.post("/users/alex/profile", json=PROFILE).json()

        assert saved["profile"]["bmi"] == 22.5
        assert len(saved["thresholds"]) == 10

        read = client.get("/users/alex/profile").json()
        assert read["profile"]["total_body_water_l"] == 32.1

    def test_unknown_profile_is_404(self, client):
        response = client.get("/users/nobody/profile")

        assert response.status_code == 404
        assert "nobody" in response.json()["error"]

    def test_invalid_profile_is_400(self, client):
        response = client.post("/users/alex/profile", json={**PROFILE, "age": 12})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid payload"}

    def test_thresholds(self, profiled):
        thresholds = profiled.get("/users/alex/thresholds").json()["thresholds"]

        assert [t["level"] for t in thresholds] == list(range(1, 11))


class TestSessionRoutes:
    """Tests for session routes."""

    def test_no_current_session(self, profiled):
        assert profiled.get("/users/alex/sessions/current").json() == {"session": None}

    def test_start_requires_profile(self, client):
        assert client.post("/users/alex/sessions/start").status_code == 404

    def test_start_twice_returns_same_session(self, profiled):
        assert start(profiled) == start(profiled)

    def test_drink_flow(self, profiled):
        session_id = start(profiled)

        response = profiled.post(f"/users/alex/sessions/{session_id}/drinks", json=BEER)
        assert response.status_code == 200
        body = response.json()
        assert len(body["session"]["drinks"]) == 1
        assert body["prediction"]["recommended_action"] in {
            "keep",
            "hydrate",
            "slow",
            "stop",
            "abort",
        }

        drink_id = body["session"]["drinks"][0]["id"]
        edited = profiled.patch(
            f"/users/alex/sessions/{session_id}/drinks/{drink_id}",
            json={**BEER, "volume_ml": 500, "label": "Pint"},
        )
        assert edited.status_code == 200
        assert edited.json()["session"]["drinks"][0]["label"] == "Pint"

    def test_invalid_drink_is_400(self, profiled):
        session_id = start(profiled)
        response = profiled.post(
            f"/users/alex/sessions/{session_id}/drinks", json={**BEER, "abv_percent": 120}
        )

        assert response.status_code == 400

    def test_unknown_drink_is_404(self, profiled):
        session_id = start(profiled)
        response = profiled.patch(f"/users/alex/sessions/{session_id}/drinks/42", json=BEER)

        assert response.status_code == 404

    def test_care_and_report(self, profiled):
        session_id = start(profiled)

        care = profiled.post(
            f"/users/alex/sessions/{session_id}/care-events",
            json={"type": "water", "volume_ml": 250},
        )
        assert care.status_code == 200
        assert care.json()["session"]["care_events"][0]["type"] == "water"

        profiled.post(f"/users/alex/sessions/{session_id}/drinks", json=BEER)
        report = profiled.post(f"/users/alex/sessions/{session_id}/report", json={"level": 3})
        assert report.status_code == 200
        assert report.json()["prediction"]["level_estimate"] == 3

    def test_end_and_history(self, profiled):
        session_id = start(profiled)

        ended = profiled.post(f"/users/alex/sessions/{session_id}/end")
        assert ended.json() == {"success": True}

        history = profiled.get("/users/alex/sessions/history").json()["sessions"]
        assert [s["session"]["id"] for s in history] == [session_id]
        assert history[0]["session"]["ended_reason"] == "user_end"

        again = profiled.post(f"/users/alex/sessions/{session_id}/drinks", json=BEER)
        assert again.status_code == 404

    def test_end_with_reason(self, profiled):
        session_id = start(profiled)
        profiled.post(f"/users/alex/sessions/{session_id}/end", json={"reason": "auto_alert"})

        history = profiled.get("/users/alex/sessions/history").json()["sessions"]
        assert history[0]["session"]["ended_reason"] == "auto_alert"

    def test_other_users_session_is_404(self, profiled):
        session_id = start(profiled)
        profiled.post("/users/sam/profile", json=PROFILE)

        response = profiled.post(f"/users/sam/sessions/{session_id}/drinks", json=BEER)

        assert response.status_code == 404

    def test_utc_timestamp_keeps_session_readable(self, profiled):
        session_id = start(profiled)

        logged = profiled.post(
            f"/users/alex/sessions/{session_id}/drinks",
            json={**BEER, "consumed_at": "2024-06-01T21:00:00Z"},
        )
        assert logged.status_code == 200
        consumed_at = logged.json()["session"]["drinks"][0]["consumed_at"]
        assert not consumed_at.endswith("Z")
        assert "+" not in consumed_at

        current = profiled.get("/users/alex/sessions/current")
        assert current.status_code == 200
        assert current.json()["session"]["id"] == session_id

        care = profiled.post(
            f"/users/alex/sessions/{session_id}/care-events", json={"type": "snack"}
        )
        assert care.status_code == 200
