"""Data access layer for pinkdrunk."""

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..models.prediction import RecommendedAction, RecordedPrediction, ThresholdSnapshot
from ..models.profile import Profile
from ..models.session import (
    CareEvent,
    CareEventType,
    Drink,
    DrinkCategory,
    DrinkingSession,
    EndReason,
)
from .engine import get_db_path


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class ProfileRepository:
    """Repository for user profiles."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get_by_user(self, user_id: str) -> Profile | None:
        """Get the profile of a user."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_profile(row)

    async def upsert(self, profile: Profile) -> int:
        """Create or replace the profile of a user."""
        data = profile.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO profiles
                (user_id, name, height_cm, weight_kg, age, gender_identity,
                 gender_custom_label, tolerance_score, metabolism_score,
                 target_level, medications, bmi, total_body_water_l)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    name = excluded.name,
                    height_cm = excluded.height_cm,
                    weight_kg = excluded.weight_kg,
                    age = excluded.age,
                    gender_identity = excluded.gender_identity,
                    gender_custom_label = excluded.gender_custom_label,
                    tolerance_score = excluded.tolerance_score,
                    metabolism_score = excluded.metabolism_score,
                    target_level = excluded.target_level,
                    medications = excluded.medications,
                    bmi = excluded.bmi,
                    total_body_water_l = excluded.total_body_water_l,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (
                    data["user_id"],
                    data["name"],
                    data["height_cm"],
                    data["weight_kg"],
                    data["age"],
                    data["gender_identity"],
                    data["gender_custom_label"],
                    data["tolerance_score"],
                    data["metabolism_score"],
                    data["target_level"],
                    int(data["medications"]),
                    data["bmi"],
                    data["total_body_water_l"],
                ),
            )
            await db.commit()

        stored = await self.get_by_user(profile.user_id)
        return stored.id

    async def backfill_body_metrics(
        self, user_id: str, bmi: float, total_body_water_l: float
    ) -> None:
        """Store BMI and TBW where they are still missing."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE profiles SET
                    bmi = COALESCE(bmi, ?),
                    total_body_water_l = COALESCE(total_body_water_l, ?),
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = ?
                """,
                (bmi, total_body_water_l, user_id),
            )
            await db.commit()

    def _row_to_profile(self, row: aiosqlite.Row) -> Profile:
        """Convert a database row to a Profile."""
        data = {
            "user_id": row["user_id"],
            "name": row["name"] or "",
            "height_cm": row["height_cm"],
            "weight_kg": row["weight_kg"],
            "age": row["age"],
            "gender_identity": row["gender_identity"],
            "gender_custom_label": row["gender_custom_label"] or "",
            "tolerance_score": row["tolerance_score"],
            "metabolism_score": row["metabolism_score"],
            "target_level": row["target_level"],
            "medications": bool(row["medications"]),
            "bmi": row["bmi"],
            "total_body_water_l": row["total_body_water_l"],
        }
        return Profile.from_dict(
            data,
            id=row["id"],
            created_at=_parse(row["created_at"]),
            updated_at=_parse(row["updated_at"]),
        )


class SessionRepository:
    """Repository for drinking sessions, their drinks, care events and predictions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, user_id: str, target_level: float, started_at: datetime) -> int:
        """Create a new active session.

        Raises aiosqlite.IntegrityError if the user already has one.
        """
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO drinking_sessions (user_id, started_at, target_level)
                VALUES (?, ?, ?)
                """,
                (user_id, started_at.isoformat(), target_level),
            )
            await db.commit()
            return cursor.lastrowid

    async def get(self, session_id: int, user_id: str) -> DrinkingSession | None:
        """Get a session of a user, with drinks and care events."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM drinking_sessions WHERE id = ? AND user_id = ?",
                (session_id, user_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._load(db, row)

    async def get_active(self, user_id: str) -> DrinkingSession | None:
        """Get the active session of a user, if any."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM drinking_sessions
                WHERE user_id = ? AND ended_at IS NULL
                ORDER BY started_at DESC LIMIT 1
                """,
                (user_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._load(db, row)

    async def list_recent(self, user_id: str, limit: int = 10) -> list[DrinkingSession]:
        """List ended sessions of a user, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM drinking_sessions
                WHERE user_id = ? AND ended_at IS NOT NULL
                ORDER BY started_at DESC LIMIT ?
                """,
                (user_id, limit),
            )
            rows = await cursor.fetchall()
            return [await self._load(db, row) for row in rows]

    async def append_drink(self, session_id: int, drink: Drink) -> int:
        """Add a drink to a session."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO drinks
                (session_id, category, label, abv_percent, volume_ml, consumed_at, ingestion_mins)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session_id,
                    drink.category.value,
                    drink.label,
                    drink.abv_percent,
                    drink.volume_ml,
                    drink.consumed_at.isoformat(),
                    drink.ingestion_mins,
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def update_drink(self, drink: Drink) -> None:
        """Update an existing drink."""
        if drink.id is None:
            raise ValueError("Drink must have an ID to update")

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE drinks SET
                    category = ?, label = ?, abv_percent = ?, volume_ml = ?,
                    consumed_at = ?, ingestion_mins = ?
                WHERE id = ?
                """,
                (
                    drink.category.value,
                    drink.label,
                    drink.abv_percent,
                    drink.volume_ml,
                    drink.consumed_at.isoformat(),
                    drink.ingestion_mins,
                    drink.id,
                ),
            )
            await db.commit()

    async def append_care_event(self, session_id: int, event: CareEvent) -> int:
        """Add a care event to a session."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO care_events (session_id, type, volume_ml, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (session_id, event.type.value, event.volume_ml, event.created_at.isoformat()),
            )
            await db.commit()
            return cursor.lastrowid

    async def record_reported_level(
        self, session_id: int, level: float, reported_at: datetime
    ) -> None:
        """Store the latest self-reported level."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE drinking_sessions SET reported_level = ?, reported_at = ? WHERE id = ?",
                (level, reported_at.isoformat(), session_id),
            )
            await db.commit()

    async def end(self, session_id: int, reason: EndReason, ended_at: datetime) -> None:
        """Mark a session as ended."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE drinking_sessions SET ended_at = ?, ended_reason = ? WHERE id = ?",
                (ended_at.isoformat(), reason.value, session_id),
            )
            await db.commit()

    async def update_active_targets(self, user_id: str, target_level: float) -> int:
        """Set the target level of the user's active sessions."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                UPDATE drinking_sessions SET target_level = ?
                WHERE user_id = ? AND ended_at IS NULL
                """,
                (target_level, user_id),
            )
            await db.commit()
            return cursor.rowcount

    async def record_prediction(self, prediction: RecordedPrediction) -> int:
        """Append a prediction summary to a session."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO predictions
                (session_id, level_estimate, drinks_to_target, recommended_action,
                 minutes_to_target, produced_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    prediction.session_id,
                    prediction.level_estimate,
                    prediction.drinks_to_target,
                    prediction.recommended_action.value,
                    prediction.minutes_to_target,
                    prediction.produced_at.isoformat(),
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def latest_prediction(self, session_id: int) -> RecordedPrediction | None:
        """Get the most recent recorded prediction of a session."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM predictions WHERE session_id = ?
                ORDER BY produced_at DESC, id DESC LIMIT 1
                """,
                (session_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return RecordedPrediction(
                id=row["id"],
                session_id=row["session_id"],
                level_estimate=row["level_estimate"],
                drinks_to_target=row["drinks_to_target"],
                recommended_action=RecommendedAction(row["recommended_action"]),
                minutes_to_target=row["minutes_to_target"],
                produced_at=datetime.fromisoformat(row["produced_at"]),
            )

    async def _load(self, db: aiosqlite.Connection, row: aiosqlite.Row) -> DrinkingSession:
        """Build a session from its row plus drinks and care events."""
        cursor = await db.execute(
            "SELECT * FROM drinks WHERE session_id = ? ORDER BY consumed_at, id",
            (row["id"],),
        )
        drinks = [self._row_to_drink(r) for r in await cursor.fetchall()]

        cursor = await db.execute(
            "SELECT * FROM care_events WHERE session_id = ? ORDER BY created_at, id",
            (row["id"],),
        )
        care_events = [self._row_to_care_event(r) for r in await cursor.fetchall()]

        return DrinkingSession(
            id=row["id"],
            user_id=row["user_id"],
            started_at=datetime.fromisoformat(row["started_at"]),
            ended_at=_parse(row["ended_at"]),
            ended_reason=EndReason(row["ended_reason"]) if row["ended_reason"] else None,
            target_level=row["target_level"],
            reported_level=row["reported_level"],
            reported_at=_parse(row["reported_at"]),
            drinks=drinks,
            care_events=care_events,
        )

    def _row_to_drink(self, row: aiosqlite.Row) -> Drink:
        return Drink(
            id=row["id"],
            session_id=row["session_id"],
            category=DrinkCategory(row["category"]),
            label=row["label"],
            abv_percent=row["abv_percent"],
            volume_ml=row["volume_ml"],
            consumed_at=datetime.fromisoformat(row["consumed_at"]),
            ingestion_mins=row["ingestion_mins"],
        )

    def _row_to_care_event(self, row: aiosqlite.Row) -> CareEvent:
        return CareEvent(
            id=row["id"],
            session_id=row["session_id"],
            type=CareEventType(row["type"]),
            volume_ml=row["volume_ml"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class ThresholdRepository:
    """Repository for the per-user impairment threshold ladder."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def list_for_user(self, user_id: str) -> list[ThresholdSnapshot]:
        """List a user's thresholds ordered by level."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT level, grams, confidence FROM impairment_thresholds
                WHERE user_id = ? ORDER BY level
                """,
                (user_id,),
            )
            rows = await cursor.fetchall()
            return [
                ThresholdSnapshot(
                    level=row["level"], grams=row["grams"], confidence=row["confidence"]
                )
                for row in rows
            ]

    async def insert_missing(
        self, user_id: str, thresholds: Iterable[ThresholdSnapshot]
    ) -> int:
        """Insert thresholds for levels that have no row yet.

        Existing (user, level) rows are left untouched.

        Returns:
            Number of rows actually inserted
        """
        inserted = 0
        async with aiosqlite.connect(self.db_path) as db:
            for threshold in thresholds:
                cursor = await db.execute(
                    """
                    INSERT OR IGNORE INTO impairment_thresholds
                    (user_id, level, grams, confidence)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user_id, threshold.level, threshold.grams, threshold.confidence),
                )
                inserted += cursor.rowcount
            await db.commit()
        return inserted

    async def update_many(
        self, user_id: str, thresholds: Iterable[ThresholdSnapshot]
    ) -> None:
        """Persist grams and confidence for existing levels in one transaction."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.executemany(
                """
                UPDATE impairment_thresholds SET
                    grams = ?, confidence = ?, updated_at = CURRENT_TIMESTAMP
                WHERE user_id = ? AND level = ?
                """,
                [(t.grams, t.confidence, user_id, t.level) for t in thresholds],
            )
            await db.commit()
