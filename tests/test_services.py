"""Tests for the service layer against a temporary database."""

import asyncio
from dataclasses import replace
from datetime import timedelta

import aiosqlite
import pytest

from pinkdrunk.db import ProfileRepository, SessionRepository, ThresholdRepository, init_db
from pinkdrunk.engine.thresholds import DEFAULT_CONFIDENCE, EWMA_ALPHA, LEVELS
from pinkdrunk.errors import DrinkNotFoundError, ProfileNotFoundError, SessionNotFoundError
from pinkdrunk.models.prediction import RecommendedAction, ThresholdSnapshot
from pinkdrunk.models.profile import GenderIdentity, Profile
from pinkdrunk.models.session import CareEventType, DrinkCategory, EndReason
from pinkdrunk.services import ProfileService, SessionService, ThresholdService
from pinkdrunk.validation import CareEventPayload, DrinkPayload

USER = "alex"


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db_path(temp_db_path):
    run(init_db(temp_db_path))
    return temp_db_path


@pytest.fixture
def profiled_db(db_path, sample_profile_payload):
    """Database with a saved profile for USER."""
    run(ProfileService(db_path).save_profile(USER, sample_profile_payload))
    return db_path


def beer_payload(consumed_at):
    return DrinkPayload(
        category=DrinkCategory.BEER,
        abv_percent=5,
        volume_ml=360,
        consumed_at=consumed_at,
    )


class TestProfileService:
    """Tests for profile lookup and updates."""

    def test_save_derives_metrics_and_seeds_ladder(self, db_path, sample_profile_payload):
        profile, thresholds = run(ProfileService(db_path).save_profile(USER, sample_profile_payload))

        assert profile.id is not None
        assert profile.bmi == 22.5
        assert profile.total_body_water_l == 32.1
        assert [t.level for t in thresholds] == list(LEVELS)

    def test_missing_profile(self, db_path):
        with pytest.raises(ProfileNotFoundError):
            run(ProfileService(db_path).get_required_profile("nobody"))

    def test_save_replaces_existing(self, profiled_db, sample_profile_payload):
        service = ProfileService(profiled_db)
        updated = sample_profile_payload.model_copy(update={"weight_kg": 70, "target_level": 3})

        run(service.save_profile(USER, updated))
        profile = run(service.get_required_profile(USER))

        assert profile.weight_kg == 70
        assert profile.target_level == 3

    def test_backfills_body_metrics_once(self, db_path):
        repo = ProfileRepository(db_path)
        run(
            repo.upsert(
                Profile(
                    user_id=USER,
                    height_cm=170,
                    weight_kg=65,
                    age=28,
                    gender_identity=GenderIdentity.FEMALE,
                )
            )
        )

        profile = run(ProfileService(db_path).get_required_profile(USER))
        stored = run(repo.get_by_user(USER))

        assert profile.bmi == 22.5
        assert profile.total_body_water_l == 32.1
        assert stored.bmi == 22.5
        assert stored.total_body_water_l == 32.1

    def test_cached_metrics_not_recomputed(self, db_path):
        repo = ProfileRepository(db_path)
        run(
            repo.upsert(
                Profile(
                    user_id=USER,
                    height_cm=170,
                    weight_kg=65,
                    age=28,
                    gender_identity=GenderIdentity.FEMALE,
                    bmi=30.0,
                    total_body_water_l=40.0,
                )
            )
        )

        profile = run(ProfileService(db_path).get_required_profile(USER))

        assert profile.bmi == 30.0
        assert profile.total_body_water_l == 40.0

    def test_target_change_reaches_active_session(self, profiled_db, sample_profile_payload, session_start):
        sessions = SessionService(profiled_db)
        view = run(sessions.start_session(USER, now=session_start))
        assert view.session.target_level == 5

        updated = sample_profile_payload.model_copy(update={"target_level": 7})
        run(ProfileService(profiled_db).save_profile(USER, updated))

        current = run(sessions.current(USER, now=session_start))
        assert current.session.target_level == 7
        assert current.prediction.target_level == 7


class TestThresholdService:
    """Tests for seeding and calibration."""

    def test_concurrent_seeding_creates_each_level_once(self, profiled_db, sample_profile):
        service = ThresholdService(profiled_db)
        other = "sam"
        profile = replace(sample_profile, user_id=other)

        async def seed_many():
            return await asyncio.gather(*(service.ensure_thresholds(other, profile) for _ in range(5)))

        ladders = run(seed_many())
        stored = run(ThresholdRepository(profiled_db).list_for_user(other))

        assert len(stored) == len(LEVELS)
        assert all(ladder == ladders[0] for ladder in ladders)
        assert service._locks == {}

    def test_user_lock_serializes_and_is_released(self, db_path):
        service = ThresholdService(db_path)
        order = []

        async def hold(name):
            async with service.user_lock(USER):
                order.append(f"{name} in")
                await asyncio.sleep(0)
                order.append(f"{name} out")

        async def contend():
            await asyncio.gather(hold("first"), hold("second"))

        run(contend())

        assert order == ["first in", "first out", "second in", "second out"]
        assert service._locks == {}

    def test_user_lock_released_on_error(self, db_path):
        service = ThresholdService(db_path)

        async def fail():
            async with service.user_lock(USER):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            run(fail())

        assert service._locks == {}

    def test_seeding_fills_only_missing_levels(self, db_path, sample_profile):
        repo = ThresholdRepository(db_path)
        service = ThresholdService(db_path)

        first = run(service.ensure_thresholds(USER, sample_profile))
        run(repo.update_many(USER, [ThresholdSnapshot(level=1, grams=2.0, confidence=0.9)]))
        second = run(service.ensure_thresholds(USER, sample_profile))

        assert second[0].grams == 2.0
        assert second[0].confidence == 0.9

    def test_observation_persisted(self, profiled_db, sample_profile):
        service = ThresholdService(profiled_db)
        before = run(service.list_thresholds(USER))

        after = run(service.record_observation(USER, sample_profile, observed_level=5, observed_grams=60))
        stored = run(service.list_thresholds(USER))

        expected = before[4].grams + EWMA_ALPHA * (60 - before[4].grams)
        assert after[4].grams == pytest.approx(expected)
        assert stored == after

    def test_invalid_observation_leaves_ladder(self, profiled_db, sample_profile):
        service = ThresholdService(profiled_db)
        before = run(service.list_thresholds(USER))

        run(service.record_observation(USER, sample_profile, observed_level=5, observed_grams=0))

        assert run(service.list_thresholds(USER)) == before


class TestSessionService:
    """Tests for session workflows."""

    def test_start_is_idempotent(self, profiled_db, session_start):
        service = SessionService(profiled_db)

        first = run(service.start_session(USER, now=session_start))
        second = run(service.start_session(USER, now=session_start + timedelta(minutes=5)))

        assert first.session.id == second.session.id
        assert first.prediction.level_estimate == 0.0

    def test_start_requires_profile(self, db_path, session_start):
        with pytest.raises(ProfileNotFoundError):
            run(SessionService(db_path).start_session(USER, now=session_start))

    def test_one_active_session_enforced_by_store(self, profiled_db, session_start):
        repo = SessionRepository(profiled_db)
        run(repo.create(USER, 5, session_start))

        with pytest.raises(aiosqlite.IntegrityError):
            run(repo.create(USER, 5, session_start))

    def test_current_without_session(self, profiled_db):
        assert run(SessionService(profiled_db).current(USER)) is None

    def test_log_drink_records_prediction(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        now = session_start + timedelta(hours=1)

        view = run(service.log_drink(USER, session_id, beer_payload(session_start), now=now))
        recorded = run(service.repo.latest_prediction(session_id))

        assert len(view.session.drinks) == 1
        assert view.prediction.level_estimate == pytest.approx(1.86, abs=0.01)
        assert view.prediction.recommended_action == RecommendedAction.HYDRATE
        assert recorded.level_estimate == pytest.approx(view.prediction.level_estimate)
        assert recorded.drinks_to_target == view.prediction.drinks_to_target

    def test_drink_defaults_to_now(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        now = session_start + timedelta(minutes=20)

        view = run(service.log_drink(USER, session_id, beer_payload(None), now=now))

        assert view.session.drinks[0].consumed_at == now
        assert view.prediction.absorbed_alcohol_grams == 0.0

    def test_edit_drink(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        now = session_start + timedelta(hours=1)
        view = run(service.log_drink(USER, session_id, beer_payload(session_start), now=now))
        drink_id = view.session.drinks[0].id

        bigger = beer_payload(session_start).model_copy(update={"volume_ml": 720})
        edited = run(service.edit_drink(USER, session_id, drink_id, bigger, now=now))

        assert edited.session.drinks[0].volume_ml == 720
        assert edited.prediction.absorbed_alcohol_grams == pytest.approx(
            2 * view.prediction.absorbed_alcohol_grams
        )

    def test_edit_unknown_drink(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id

        with pytest.raises(DrinkNotFoundError):
            run(service.edit_drink(USER, session_id, 999, beer_payload(session_start), now=session_start))

    def test_care_event_lowers_estimate(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        now = session_start + timedelta(hours=1)
        plain = run(service.log_drink(USER, session_id, beer_payload(session_start), now=now))

        fed = run(
            service.add_care_event(USER, session_id, CareEventPayload(type=CareEventType.MEAL), now=now)
        )

        assert len(fed.session.care_events) == 1
        assert fed.prediction.level_estimate == pytest.approx(plain.prediction.level_estimate - 0.5)

    def test_report_overrides_and_calibrates(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        now = session_start + timedelta(hours=1)
        logged = run(service.log_drink(USER, session_id, beer_payload(session_start), now=now))
        before = run(service.thresholds.list_thresholds(USER))

        view = run(service.report_level(USER, session_id, 4, now=now))
        after = run(service.thresholds.list_thresholds(USER))

        absorbed = logged.prediction.absorbed_alcohol_grams
        assert view.prediction.level_estimate == 4
        assert view.session.reported_level == 4
        assert after[3].grams == pytest.approx(before[3].grams + EWMA_ALPHA * (absorbed - before[3].grams))
        assert after[3].confidence == pytest.approx(DEFAULT_CONFIDENCE + 0.05)

    def test_report_expires(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        now = session_start + timedelta(hours=1)
        run(service.log_drink(USER, session_id, beer_payload(session_start), now=now))
        run(service.report_level(USER, session_id, 4, now=now))

        later = run(service.current(USER, now=now + timedelta(minutes=50)))

        assert later.prediction.level_estimate != 4

    def test_sessions_are_private(self, profiled_db, sample_profile_payload, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        run(ProfileService(profiled_db).save_profile("sam", sample_profile_payload))

        with pytest.raises(SessionNotFoundError):
            run(service.log_drink("sam", session_id, beer_payload(session_start), now=session_start))

    def test_end_and_history(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        now = session_start + timedelta(hours=1)
        run(service.log_drink(USER, session_id, beer_payload(session_start), now=now))

        ended = run(service.end_session(USER, session_id, EndReason.USER_END, now=now))
        history = run(service.history(USER))

        assert ended.ended_at == now
        assert ended.ended_reason == EndReason.USER_END
        assert run(service.current(USER)) is None
        assert [s.session.id for s in history] == [session_id]
        assert history[0].latest_prediction is not None

    def test_no_drinks_after_end(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        session_id = run(service.start_session(USER, now=session_start)).session.id
        run(service.end_session(USER, session_id, now=session_start))

        with pytest.raises(SessionNotFoundError):
            run(service.log_drink(USER, session_id, beer_payload(session_start), now=session_start))

    def test_new_session_after_end(self, profiled_db, session_start):
        service = SessionService(profiled_db)
        first = run(service.start_session(USER, now=session_start)).session.id
        run(service.end_session(USER, first, now=session_start + timedelta(hours=2)))

        second = run(service.start_session(USER, now=session_start + timedelta(hours=3))).session.id

        assert second != first
