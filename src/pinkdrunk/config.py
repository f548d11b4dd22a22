"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent / "data"


class Settings(BaseSettings):
    """Settings loaded from PINKDRUNK_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PINKDRUNK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    data_dir: Path = DATA_DIR
    db_filename: str = "pinkdrunk.db"

    # CLI
    default_user: str = "default"

    # Logging
    log_format: str = "text"  # 'json' or 'text'
    log_level: str = "WARNING"
    service_name: str = "pinkdrunk"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
