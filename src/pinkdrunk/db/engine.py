"""Database engine setup and initialization."""

import logging
from pathlib import Path

import aiosqlite

from ..config import get_settings

logger = logging.getLogger(__name__)


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    settings = get_settings()
    if data_dir is None:
        data_dir = settings.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / settings.db_filename


async def _run_migrations(db: aiosqlite.Connection) -> None:
    """Run database migrations for schema updates."""
    cursor = await db.execute("PRAGMA table_info(profiles)")
    columns = await cursor.fetchall()
    profile_columns = {col[1] for col in columns}

    # Body metrics were added after the first schema
    for col in ["bmi", "total_body_water_l"]:
        if col not in profile_columns:
            await db.execute(f"ALTER TABLE profiles ADD COLUMN {col} REAL")

    cursor = await db.execute("PRAGMA table_info(drinking_sessions)")
    columns = await cursor.fetchall()
    session_columns = {col[1] for col in columns}

    if "reported_at" not in session_columns:
        await db.execute("ALTER TABLE drinking_sessions ADD COLUMN reported_at TIMESTAMP")

    await db.commit()


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL UNIQUE,
                name TEXT DEFAULT '',
                height_cm REAL NOT NULL,
                weight_kg REAL NOT NULL,
                age INTEGER NOT NULL,
                gender_identity TEXT NOT NULL,
                gender_custom_label TEXT DEFAULT '',
                tolerance_score INTEGER NOT NULL DEFAULT 5,
                metabolism_score INTEGER NOT NULL DEFAULT 5,
                target_level REAL NOT NULL DEFAULT 5,
                medications INTEGER DEFAULT 0,
                bmi REAL,
                total_body_water_l REAL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS drinking_sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                started_at TIMESTAMP NOT NULL,
                ended_at TIMESTAMP,
                ended_reason TEXT,
                target_level REAL,
                reported_level REAL,
                reported_at TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS drinks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER NOT NULL,
                category TEXT NOT NULL,
                label TEXT,
                abv_percent REAL NOT NULL,
                volume_ml REAL NOT NULL,
                consumed_at TIMESTAMP NOT NULL,
                ingestion_mins INTEGER DEFAULT 10,
                FOREIGN KEY (session_id) REFERENCES drinking_sessions(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS care_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER NOT NULL,
                type TEXT NOT NULL,
                volume_ml REAL,
                created_at TIMESTAMP NOT NULL,
                FOREIGN KEY (session_id) REFERENCES drinking_sessions(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS predictions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER NOT NULL,
                level_estimate REAL NOT NULL,
                drinks_to_target INTEGER NOT NULL,
                recommended_action TEXT NOT NULL,
                minutes_to_target INTEGER NOT NULL,
                produced_at TIMESTAMP NOT NULL,
                FOREIGN KEY (session_id) REFERENCES drinking_sessions(id) ON DELETE CASCADE
            )
        """)

        # One row per (user, level); concurrent seeding relies on this
        await db.execute("""
            CREATE TABLE IF NOT EXISTS impairment_thresholds (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                level INTEGER NOT NULL,
                grams REAL NOT NULL,
                confidence REAL NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (user_id, level)
            )
        """)

        # At most one active session per user
        await db.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_sessions_one_active
            ON drinking_sessions(user_id) WHERE ended_at IS NULL
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_sessions_user
            ON drinking_sessions(user_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_drinks_session
            ON drinks(session_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_care_events_session
            ON care_events(session_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_predictions_session
            ON predictions(session_id)
        """)

        await db.commit()

        await _run_migrations(db)

    logger.info("Database initialized", extra={"extra_fields": {"db_path": str(db_path)}})
