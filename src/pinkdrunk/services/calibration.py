"""Threshold seeding and calibration against the threshold store."""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from ..db.repositories import ThresholdRepository
from ..engine.thresholds import (
    LEVELS,
    apply_observation,
    build_thresholds_from_profile,
    missing_thresholds,
    sort_thresholds,
)
from ..models.prediction import ThresholdSnapshot
from ..models.profile import Profile

logger = logging.getLogger(__name__)


class ThresholdService:
    """Seeds and calibrates per-user threshold ladders.

    Every read-modify-write of a user's ladder runs under that user's
    lock, so calibrations for one user are serialized while different
    users proceed in parallel.
    """

    def __init__(self, db_path: Path | None = None):
        self.repo = ThresholdRepository(db_path)
        # user_id -> (lock, number of holders and waiters)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def user_lock(self, user_id: str):
        """Hold the lock guarding a user's ladder.

        The entry is dropped once nobody holds or awaits it.
        """
        lock, users = self._locks.get(user_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[user_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            _, users = self._locks[user_id]
            if users == 1:
                del self._locks[user_id]
            else:
                self._locks[user_id] = (lock, users - 1)

    async def list_thresholds(self, user_id: str) -> tuple[ThresholdSnapshot, ...]:
        """Current ladder of a user, ordered by level."""
        return sort_thresholds(await self.repo.list_for_user(user_id))

    async def ensure_thresholds(
        self, user_id: str, profile: Profile
    ) -> tuple[ThresholdSnapshot, ...]:
        """Return the user's ladder, seeding any missing levels first."""
        async with self.user_lock(user_id):
            return await self._ensure_locked(user_id, profile)

    async def record_observation(
        self,
        user_id: str,
        profile: Profile,
        observed_level: float,
        observed_grams: float,
    ) -> tuple[ThresholdSnapshot, ...]:
        """Calibrate the ladder with a self-reported level.

        Args:
            user_id: Owner of the ladder
            profile: Used to seed the ladder if it is incomplete
            observed_level: Level the user reported
            observed_grams: Grams absorbed at the time of the report

        Returns:
            The ladder after calibration (unchanged if the observation
            could not be applied)
        """
        async with self.user_lock(user_id):
            current = await self._ensure_locked(user_id, profile)
            adjusted = apply_observation(current, observed_level, observed_grams)

            if adjusted is current:
                logger.info(
                    "Threshold calibration skipped",
                    extra={
                        "extra_fields": {
                            "user_id": user_id,
                            "observed_level": observed_level,
                            "observed_grams": observed_grams,
                        }
                    },
                )
                return current

            await self.repo.update_many(user_id, adjusted)
            logger.info(
                "Threshold calibration applied",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "observed_level": observed_level,
                        "observed_grams": round(observed_grams, 2),
                    }
                },
            )
            return tuple(adjusted)

    async def _ensure_locked(
        self, user_id: str, profile: Profile
    ) -> tuple[ThresholdSnapshot, ...]:
        existing = await self.repo.list_for_user(user_id)
        if len(existing) >= len(LEVELS):
            return sort_thresholds(existing)

        to_create = missing_thresholds(existing, build_thresholds_from_profile(profile))
        inserted = await self.repo.insert_missing(user_id, to_create)
        logger.info(
            "Seeded impairment thresholds",
            extra={"extra_fields": {"user_id": user_id, "levels": inserted}},
        )
        return await self.list_thresholds(user_id)
