"""User filter selections for calendar retrieval."""

import logging
from enum import Enum

from board_calendar.models.mapping import FieldMapping
from board_calendar.models.query import FilterRule
from board_calendar.models.settings import CalendarSettings
from board_calendar.processing.query_builder import (
    FilterSelection,
    build_filter_rules,
    current_user_rule,
)

logger = logging.getLogger(__name__)


class FilterState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class CalendarFilterEngine:
    """Holds reporter/project selections and derives filter rules.

    The engine becomes READY once it receives its first settings
    snapshot. Rules are derived on every read from the current selections
    and the current mapping, so they never lag behind either input.
    """

    def __init__(self, default_to_current_user: bool = True):
        self.state = FilterState.UNINITIALIZED
        self.default_to_current_user = default_to_current_user
        self._mapping: FieldMapping | None = None
        self._reporter_ids: list[str] = []
        self._project_ids: list[str] = []

    @property
    def is_ready(self) -> bool:
        return self.state == FilterState.READY

    def load_settings(self, settings: CalendarSettings) -> None:
        """Install a settings snapshot; the first one makes the engine ready."""
        self.load_mapping(settings.to_field_mapping())

    def load_mapping(self, mapping: FieldMapping) -> None:
        self._mapping = mapping
        if self.state == FilterState.UNINITIALIZED:
            self.state = FilterState.READY
            logger.debug("Filter engine initialized")

    @property
    def reporter_ids(self) -> list[str]:
        return list(self._reporter_ids)

    @property
    def project_ids(self) -> list[str]:
        return list(self._project_ids)

    def select_reporters(self, reporter_ids) -> None:
        self._reporter_ids = [str(r) for r in reporter_ids]

    def select_projects(self, project_ids) -> None:
        self._project_ids = [str(p) for p in project_ids]

    @property
    def has_active_filter(self) -> bool:
        return len(self._reporter_ids) + len(self._project_ids) > 0

    def clear_filters(self) -> None:
        """Empty both selections; readiness is unchanged."""
        logger.debug("Clearing all filters")
        self._reporter_ids = []
        self._project_ids = []

    def reset_to_defaults(self) -> None:
        """Drop manual selections so the current-user default applies."""
        self.clear_filters()

    @property
    def selection(self) -> FilterSelection:
        return FilterSelection(reporter_ids=self.reporter_ids, project_ids=self.project_ids)

    @property
    def filter_rules(self) -> list[FilterRule]:
        """Rules for the current selections; empty until ready."""
        if self._mapping is None:
            return []
        return build_filter_rules(self.selection, self._mapping)

    @property
    def retrieval_rules(self) -> list[FilterRule]:
        """Filter rules plus the current-user default when no reporter is selected."""
        rules = self.filter_rules
        if self._mapping is None or self._reporter_ids or not self.default_to_current_user:
            return rules
        default = current_user_rule(self._mapping)
        return [default, *rules] if default else rules
