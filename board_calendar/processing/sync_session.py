"""One calendar sync cycle: validate, retrieve, map, color, overlay holidays."""

import logging
from dataclasses import dataclass, field
from datetime import date

from board_calendar.colors import event_color
from board_calendar.config import EngineConfig
from board_calendar.models.event import Event
from board_calendar.models.mapping import FieldRole
from board_calendar.models.settings import CalendarSettings
from board_calendar.models.validation import ValidationResult
from board_calendar.processing.board_resolver import effective_board_id
from board_calendar.processing.column_mapper import ColumnMapper
from board_calendar.processing.filter_engine import CalendarFilterEngine
from board_calendar.processing.holidays import HolidayOverlay
from board_calendar.processing.query_builder import build_retrieval_query, fetch_all_records
from board_calendar.processing.settings_validator import SettingsValidator
from board_calendar.storage.store_client import StoreClient

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a sync cycle for a date range."""

    board_id: str | None
    validation: ValidationResult
    events: list[Event] = field(default_factory=list)
    holidays: list[Event] = field(default_factory=list)
    record_count: int = 0

    @property
    def skipped(self) -> int:
        return self.record_count - len(self.events)

    @property
    def all_events(self) -> list[Event]:
        """Store-backed events followed by holidays, sorted by start."""
        return sorted([*self.events, *self.holidays], key=lambda e: e.start)


class SyncSession:
    """Runs sync cycles against one settings snapshot.

    Settings are fixed for the lifetime of the session; a new snapshot
    means a new session. The filter engine is shared so that user
    selections survive across cycles.
    """

    def __init__(
        self,
        client: StoreClient,
        settings: CalendarSettings,
        config: EngineConfig | None = None,
        holidays: HolidayOverlay | None = None,
        context_board_id: str | None = None,
        filter_engine: CalendarFilterEngine | None = None,
    ):
        self.client = client
        self.settings = settings
        self.config = config or EngineConfig()
        self.holidays = holidays
        self.context_board_id = context_board_id
        self.mapping = settings.to_field_mapping()
        self.mapper = ColumnMapper(self.mapping, self.config.default_duration_minutes)
        self.filters = filter_engine or CalendarFilterEngine()
        self.filters.load_mapping(self.mapping)

    @property
    def board_id(self) -> str | None:
        return effective_board_id(self.settings, self.context_board_id)

    async def validate(self) -> ValidationResult:
        return await SettingsValidator(self.client).validate(self.settings, self.board_id)

    def _color(self, event: Event) -> Event:
        event.color = event_color(event.event_type_key, event.project_id, event.label_color)
        return event

    async def run(self, range_start: date, range_end: date, validate: bool = True) -> SyncResult:
        """Load the events of ``[range_start, range_end]``.

        Invalid settings stop the cycle before any retrieval; holidays are
        still overlaid.
        """
        board_id = self.board_id
        validation = await self.validate() if validate else ValidationResult()
        result = SyncResult(board_id=board_id, validation=validation)

        if self.holidays is not None:
            result.holidays = self.holidays.holidays_between(range_start, range_end)

        if not validation.is_valid:
            logger.warning(f"Settings are invalid, skipping retrieval: {validation.errors}")
            return result

        date_column = self.mapping.column_for(FieldRole.START_DATE)
        if board_id is None or date_column is None:
            logger.warning("No reporting board or start date column configured, skipping retrieval")
            return result

        query = build_retrieval_query(
            board_id,
            range_start,
            range_end,
            date_column,
            extra_rules=self.filters.retrieval_rules,
            page_size=self.config.page_size,
        )
        records = await fetch_all_records(self.client, query)
        result.record_count = len(records)
        result.events = [self._color(event) for event in self.mapper.map_records(records)]

        logger.info(
            f"Sync {range_start} to {range_end}: {len(result.events)} events, "
            f"{len(result.holidays)} holidays, {result.skipped} skipped records"
        )
        return result
