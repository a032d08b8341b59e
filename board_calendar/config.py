"""Configuration for the calendar engine."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Engine configuration with Pydantic validation."""

    # Undoable delete
    undo_grace_ms: int = Field(default=4000, ge=0)
    delete_batch_size: int = Field(default=5, ge=1)

    # Retrieval
    page_size: int = Field(default=500, ge=1)
    default_duration_minutes: int = Field(default=60, ge=1)

    # Edit lock
    two_days_lock_hours: int = Field(default=48, ge=1)
    # Monday=0 .. Sunday=6 (date.weekday() numbering)
    week_starts_on: int = Field(default=6, ge=0, le=6)

    # Paths used by the CLI
    holiday_calendar_path: Path | None = None
    settings_path: Path = Field(default=Path("data/settings.json"))
    snapshot_path: Path = Field(default=Path("data/store_snapshot.json"))
    log_dir: Path = Field(default=Path("logs"))
    log_filename: str = Field(default="board_calendar.log")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load configuration from environment variables and .env file."""
        load_dotenv()

        config_dict = {}

        int_vars = {
            "UNDO_GRACE_MS": "undo_grace_ms",
            "DELETE_BATCH_SIZE": "delete_batch_size",
            "PAGE_SIZE": "page_size",
            "DEFAULT_DURATION_MINUTES": "default_duration_minutes",
            "TWO_DAYS_LOCK_HOURS": "two_days_lock_hours",
            "WEEK_STARTS_ON": "week_starts_on",
        }
        for env_key, field in int_vars.items():
            if env_key in os.environ:
                try:
                    config_dict[field] = int(os.environ[env_key])
                except ValueError:
                    pass  # Keep default if invalid

        path_vars = {
            "HOLIDAY_CALENDAR_PATH": "holiday_calendar_path",
            "SETTINGS_PATH": "settings_path",
            "STORE_SNAPSHOT_PATH": "snapshot_path",
            "LOG_DIR": "log_dir",
        }
        for env_key, field in path_vars.items():
            if env_key in os.environ:
                config_dict[field] = Path(os.environ[env_key])

        if "LOG_FILENAME" in os.environ:
            config_dict["log_filename"] = os.environ["LOG_FILENAME"]

        return cls(**config_dict)
