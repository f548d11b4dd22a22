"""Session orchestration around the prediction engine."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..db.repositories import SessionRepository
from ..engine.session_calculator import compute_session_prediction
from ..errors import DrinkNotFoundError, SessionNotFoundError
from ..models.prediction import RecordedPrediction, SessionPrediction
from ..models.session import CareEvent, Drink, DrinkingSession, EndReason
from ..validation import CareEventPayload, DrinkPayload
from .calibration import ThresholdService
from .profiles import ProfileService

logger = logging.getLogger(__name__)


@dataclass
class SessionView:
    """A session together with its prediction."""

    session: DrinkingSession
    prediction: SessionPrediction

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "session": self.session.to_dict(),
            "prediction": self.prediction.to_dict(),
        }


@dataclass
class SessionSummary:
    """An ended session with its last recorded prediction."""

    session: DrinkingSession
    latest_prediction: RecordedPrediction | None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "session": self.session.to_dict(),
            "latest_prediction": (
                self.latest_prediction.to_dict() if self.latest_prediction else None
            ),
        }


class SessionService:
    """Runs session workflows: load state, mutate, recompute.

    ``now`` defaults to the wall clock here and is passed explicitly to
    everything below this layer.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        thresholds: ThresholdService | None = None,
    ):
        self.repo = SessionRepository(db_path)
        self.thresholds = thresholds or ThresholdService(db_path)
        self.profiles = ProfileService(db_path, thresholds=self.thresholds)

    async def start_session(self, user_id: str, now: datetime | None = None) -> SessionView:
        """Return the active session, starting one if there is none."""
        now = now or datetime.now()
        profile = await self.profiles.get_required_profile(user_id)

        session = await self.repo.get_active(user_id)
        if session is None:
            try:
                await self.repo.create(user_id, profile.target_level, now)
                logger.info("Session started", extra={"extra_fields": {"user_id": user_id}})
            except aiosqlite.IntegrityError:
                # Another caller started one first
                pass
            session = await self.repo.get_active(user_id)

        return await self._view(user_id, session, now)

    async def current(self, user_id: str, now: datetime | None = None) -> SessionView | None:
        """Active session with its prediction, or None."""
        now = now or datetime.now()
        session = await self.repo.get_active(user_id)
        if session is None:
            return None
        return await self._view(user_id, session, now)

    async def log_drink(
        self,
        user_id: str,
        session_id: int,
        payload: DrinkPayload,
        now: datetime | None = None,
    ) -> SessionView:
        """Add a drink to an active session and record the new prediction."""
        now = now or datetime.now()
        session = await self._get_active(user_id, session_id)

        drink = Drink(
            session_id=session.id,
            category=payload.category,
            label=payload.label,
            abv_percent=payload.abv_percent,
            volume_ml=payload.volume_ml,
            consumed_at=payload.consumed_at or now,
            ingestion_mins=payload.ingestion_mins,
        )
        await self.repo.append_drink(session.id, drink)

        view = await self._refresh(user_id, session.id, now)
        await self._record(view.prediction, now)
        return view

    async def edit_drink(
        self,
        user_id: str,
        session_id: int,
        drink_id: int,
        payload: DrinkPayload,
        now: datetime | None = None,
    ) -> SessionView:
        """Edit a drink of an active session and record the new prediction."""
        now = now or datetime.now()
        session = await self._get_active(user_id, session_id)

        drink = session.find_drink(drink_id)
        if drink is None:
            raise DrinkNotFoundError(drink_id)

        drink.category = payload.category
        drink.label = payload.label
        drink.abv_percent = payload.abv_percent
        drink.volume_ml = payload.volume_ml
        drink.ingestion_mins = payload.ingestion_mins
        if payload.consumed_at:
            drink.consumed_at = payload.consumed_at
        await self.repo.update_drink(drink)

        view = await self._refresh(user_id, session.id, now)
        await self._record(view.prediction, now)
        return view

    async def add_care_event(
        self,
        user_id: str,
        session_id: int,
        payload: CareEventPayload,
        now: datetime | None = None,
    ) -> SessionView:
        """Log water, a snack or a meal."""
        now = now or datetime.now()
        session = await self._get_active(user_id, session_id)

        event = CareEvent(
            session_id=session.id,
            type=payload.type,
            volume_ml=payload.volume_ml,
            created_at=now,
        )
        await self.repo.append_care_event(session.id, event)
        return await self._refresh(user_id, session.id, now)

    async def report_level(
        self,
        user_id: str,
        session_id: int,
        level: float,
        now: datetime | None = None,
    ) -> SessionView:
        """Record a felt level and calibrate the user's thresholds with it.

        The observation pairs the reported level with the grams absorbed
        at report time. The returned prediction already reflects the
        fresh report.
        """
        now = now or datetime.now()
        session = await self._get(user_id, session_id)
        before = await self._view(user_id, session, now)

        await self.repo.record_reported_level(session.id, level, now)

        profile = await self.profiles.get_required_profile(user_id)
        await self.thresholds.record_observation(
            user_id,
            profile,
            observed_level=level,
            observed_grams=before.prediction.absorbed_alcohol_grams,
        )

        return await self._refresh(user_id, session.id, now)

    async def end_session(
        self,
        user_id: str,
        session_id: int,
        reason: EndReason = EndReason.USER_END,
        now: datetime | None = None,
    ) -> DrinkingSession:
        """End a session."""
        now = now or datetime.now()
        session = await self._get(user_id, session_id)
        await self.repo.end(session.id, reason, now)
        logger.info(
            "Session ended",
            extra={"extra_fields": {"user_id": user_id, "session_id": session.id, "reason": reason.value}},
        )
        return await self._get(user_id, session.id)

    async def history(self, user_id: str, limit: int = 10) -> list[SessionSummary]:
        """Ended sessions, newest first."""
        sessions = await self.repo.list_recent(user_id, limit)
        return [
            SessionSummary(session=s, latest_prediction=await self.repo.latest_prediction(s.id))
            for s in sessions
        ]

    async def _get(self, user_id: str, session_id: int) -> DrinkingSession:
        session = await self.repo.get(session_id, user_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def _get_active(self, user_id: str, session_id: int) -> DrinkingSession:
        session = await self._get(user_id, session_id)
        if not session.is_active:
            raise SessionNotFoundError(session_id)
        return session

    async def _refresh(self, user_id: str, session_id: int, now: datetime) -> SessionView:
        return await self._view(user_id, await self._get(user_id, session_id), now)

    async def _view(self, user_id: str, session: DrinkingSession, now: datetime) -> SessionView:
        profile = await self.profiles.get_required_profile(user_id)
        thresholds = await self.thresholds.ensure_thresholds(user_id, profile)
        prediction = compute_session_prediction(
            session=session,
            drinks=session.drinks,
            care_events=session.care_events,
            profile=profile,
            now=now,
            thresholds=thresholds,
        )
        return SessionView(session=session, prediction=prediction)

    async def _record(self, prediction: SessionPrediction, now: datetime) -> None:
        await self.repo.record_prediction(
            RecordedPrediction(
                session_id=prediction.session_id,
                level_estimate=prediction.level_estimate,
                drinks_to_target=prediction.drinks_to_target,
                recommended_action=prediction.recommended_action,
                minutes_to_target=prediction.minutes_to_target,
                produced_at=now,
            )
        )
