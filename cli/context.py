"""Shared CLI context with lazy-initialized dependencies."""

from board_calendar.config import EngineConfig
from board_calendar.models.settings import CalendarSettings
from board_calendar.processing.holidays import HolidayOverlay, default_holiday_source
from board_calendar.storage.memory_store import InMemoryStore
from board_calendar.storage.settings_storage import JsonFileStorage, SettingsRepository
from board_calendar.storage.store_client import StoreClient
from cli.utils import run_async


class CLIContext:
    """Shared context with lazy-initialized dependencies for CLI commands.

    The store is the offline snapshot at ``config.snapshot_path`` and the
    settings come from the JSON file at ``config.settings_path``.

    Usage:
        ctx = CLIContext()
        settings = ctx.settings
    """

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        board_id: str | None = None,
        user_id: str | None = None,
    ):
        """Initialize CLI context.

        Args:
            verbose: If True, enable info logging
            quiet: If True, suppress non-error output
            board_id: Board the calendar is opened from
            user_id: Current user, for the default reporter filter
        """
        self.verbose = verbose
        self.quiet = quiet
        self.board_id = board_id
        self.user_id = user_id

        # Lazy-loaded dependencies
        self._config: EngineConfig | None = None
        self._store: InMemoryStore | None = None
        self._client: StoreClient | None = None
        self._settings_repository: SettingsRepository | None = None
        self._settings: CalendarSettings | None = None
        self._holidays: HolidayOverlay | None = None

    @property
    def config(self) -> EngineConfig:
        """Get configuration (lazy-loaded)."""
        if self._config is None:
            self._config = EngineConfig.from_env()
        return self._config

    @property
    def store(self) -> InMemoryStore:
        """Get the snapshot-backed store (lazy-loaded)."""
        if self._store is None:
            self._store = InMemoryStore.from_snapshot(self.config.snapshot_path)
            self._store.current_user_id = self.user_id
        return self._store

    @property
    def client(self) -> StoreClient:
        if self._client is None:
            self._client = StoreClient(self.store)
        return self._client

    @property
    def settings_repository(self) -> SettingsRepository:
        if self._settings_repository is None:
            self._settings_repository = SettingsRepository(JsonFileStorage(self.config.settings_path))
        return self._settings_repository

    @property
    def settings(self) -> CalendarSettings:
        """Get calendar settings, loaded once per invocation."""
        if self._settings is None:
            self._settings = run_async(self.settings_repository.load())
        return self._settings

    @property
    def holidays(self) -> HolidayOverlay:
        """Get the holiday overlay: the configured ICS feed, else computed holidays."""
        if self._holidays is None:
            self._holidays = HolidayOverlay(default_holiday_source(self.config.holiday_calendar_path))
        return self._holidays


# Global context instance (set by Typer callback)
_ctx: CLIContext | None = None


def get_context() -> CLIContext:
    """Get the current CLI context.

    Raises:
        RuntimeError: If context not initialized
    """
    if _ctx is None:
        raise RuntimeError("CLI context not initialized. This should not happen.")
    return _ctx


def set_context(ctx: CLIContext) -> None:
    global _ctx
    _ctx = ctx
