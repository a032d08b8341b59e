"""Persistence of the calendar settings through a key-value capability."""

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from board_calendar.exceptions import SettingsStorageError
from board_calendar.models.settings import CalendarSettings
from board_calendar.processing.approval import migrate_approval_mapping

logger = logging.getLogger(__name__)

SETTINGS_KEY = "customSettings"


class KeyValueStorage(Protocol):
    """Persisted configuration read/write capability."""

    async def get_item(self, key: str) -> str | None:
        """Return the stored string for a key, or None."""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Store a string under a key."""
        ...


class JsonFileStorage:
    """Key-value storage kept in a single JSON file."""

    def __init__(self, path: Path):
        self.path = path

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise SettingsStorageError(f"Failed to read settings file {self.path}: {e}") from e

    async def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    async def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise SettingsStorageError(f"Failed to write settings file {self.path}: {e}") from e


class SettingsRepository:
    """Loads and saves ``CalendarSettings``.

    Settings are loaded once per session and replaced wholesale on save;
    callers pass the returned object into the components that need it.
    """

    def __init__(self, storage: KeyValueStorage, key: str = SETTINGS_KEY):
        self.storage = storage
        self.key = key

    async def load(self) -> CalendarSettings:
        """Saved values merged over defaults.

        Unreadable or invalid stored settings fall back to defaults.
        """
        try:
            raw = await self.storage.get_item(self.key)
        except SettingsStorageError as e:
            logger.warning(f"Failed to load settings, using defaults: {e}")
            return CalendarSettings()
        if not raw:
            logger.info("No saved settings found, using defaults")
            return CalendarSettings()

        try:
            saved = json.loads(raw)
            settings = CalendarSettings.model_validate(saved)
        except (ValueError, ValidationError) as e:
            logger.warning(f"Saved settings are invalid, using defaults: {e}")
            return CalendarSettings()

        migrated = migrate_approval_mapping(settings.approval_status_mapping)
        if migrated is not None:
            settings = settings.model_copy(update={"approval_status_mapping": migrated})
        logger.debug(f"Loaded settings from key '{self.key}'")
        return settings

    async def save(self, settings: CalendarSettings) -> CalendarSettings:
        """Replace the stored settings."""
        payload = settings.model_dump(mode="json", by_alias=True)
        await self.storage.set_item(self.key, json.dumps(payload, ensure_ascii=False))
        logger.info("Saved settings")
        return settings

    async def update(self, settings: CalendarSettings, **changes) -> CalendarSettings:
        """Save a copy of ``settings`` with ``changes`` applied."""
        merged = settings.model_dump()
        merged.update(changes)
        return await self.save(CalendarSettings.model_validate(merged))

    async def reset(self) -> CalendarSettings:
        return await self.save(CalendarSettings())
