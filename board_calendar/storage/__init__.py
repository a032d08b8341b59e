"""Storage layer: store access and settings persistence."""

from board_calendar.storage.memory_store import InMemoryStore
from board_calendar.storage.settings_storage import JsonFileStorage, SettingsRepository
from board_calendar.storage.store_client import Store, StoreClient

__all__ = [
    "Store",
    "StoreClient",
    "InMemoryStore",
    "JsonFileStorage",
    "SettingsRepository",
]
