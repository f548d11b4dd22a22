"""Profile lookup and updates."""

import logging
from dataclasses import replace
from pathlib import Path

from ..db.repositories import ProfileRepository, SessionRepository
from ..engine.body_composition import derive_body_metrics
from ..errors import ProfileNotFoundError
from ..models.prediction import ThresholdSnapshot
from ..models.profile import Profile
from ..validation import ProfilePayload
from .calibration import ThresholdService

logger = logging.getLogger(__name__)


class ProfileService:
    """Reads profiles for the engine and applies profile edits."""

    def __init__(
        self,
        db_path: Path | None = None,
        thresholds: ThresholdService | None = None,
    ):
        self.profiles = ProfileRepository(db_path)
        self.sessions = SessionRepository(db_path)
        self.thresholds = thresholds or ThresholdService(db_path)

    async def get_required_profile(self, user_id: str) -> Profile:
        """Load a profile, backfilling BMI and TBW the first time.

        Cached body metrics are never recomputed. The user's threshold
        ladder is seeded as a side effect.

        Raises:
            ProfileNotFoundError: if the user has no profile
        """
        profile = await self.profiles.get_by_user(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)

        if not profile.has_body_metrics:
            metrics = derive_body_metrics(
                profile.height_cm,
                profile.weight_kg,
                profile.age,
                profile.gender_identity,
            )
            await self.profiles.backfill_body_metrics(
                user_id, metrics.bmi, metrics.total_body_water_l
            )
            profile = replace(
                profile,
                bmi=profile.bmi if profile.bmi is not None else metrics.bmi,
                total_body_water_l=(
                    profile.total_body_water_l
                    if profile.total_body_water_l is not None
                    else metrics.total_body_water_l
                ),
            )
            logger.info(
                "Backfilled body metrics",
                extra={"extra_fields": {"user_id": user_id}},
            )

        await self.thresholds.ensure_thresholds(user_id, profile)
        return profile

    async def save_profile(
        self, user_id: str, payload: ProfilePayload
    ) -> tuple[Profile, tuple[ThresholdSnapshot, ...]]:
        """Create or replace a profile.

        Body metrics are derived from the new values and the new target
        level is pushed to any active session.
        """
        metrics = derive_body_metrics(
            payload.height_cm,
            payload.weight_kg,
            payload.age,
            payload.gender_identity,
        )
        profile = Profile(
            user_id=user_id,
            name=payload.name,
            height_cm=payload.height_cm,
            weight_kg=payload.weight_kg,
            age=payload.age,
            gender_identity=payload.gender_identity,
            gender_custom_label=payload.gender_custom_label,
            medications=payload.medications,
            metabolism_score=payload.metabolism_score,
            tolerance_score=payload.tolerance_score,
            target_level=payload.target_level,
            bmi=metrics.bmi,
            total_body_water_l=metrics.total_body_water_l,
        )

        profile.id = await self.profiles.upsert(profile)
        updated = await self.sessions.update_active_targets(user_id, profile.target_level)
        if updated:
            logger.info(
                "Propagated target level to active session",
                extra={"extra_fields": {"user_id": user_id, "target_level": profile.target_level}},
            )

        thresholds = await self.thresholds.ensure_thresholds(user_id, profile)
        return profile, thresholds
