"""Processing layer: mapping, retrieval, locking, approval and deletes."""

from board_calendar.processing.approval import ApprovalService, resolve_approval_state
from board_calendar.processing.board_resolver import effective_board_id
from board_calendar.processing.column_mapper import (
    ColumnMapper,
    event_to_column_values,
    record_to_event,
)
from board_calendar.processing.edit_lock import LockDecision, is_locked, is_locked_for
from board_calendar.processing.filter_engine import CalendarFilterEngine
from board_calendar.processing.holidays import (
    HebrewCalendarSource,
    HolidayOverlay,
    HolidaySource,
    ICSHolidaySource,
)
from board_calendar.processing.query_builder import (
    build_filter_rules,
    build_retrieval_query,
    fetch_all_records,
)
from board_calendar.processing.settings_validator import SettingsValidator, format_validation_message
from board_calendar.processing.sync_session import SyncResult, SyncSession
from board_calendar.processing.undo_delete import UndoableDeleteQueue

__all__ = [
    "ApprovalService",
    "resolve_approval_state",
    "effective_board_id",
    "ColumnMapper",
    "record_to_event",
    "event_to_column_values",
    "LockDecision",
    "is_locked",
    "is_locked_for",
    "CalendarFilterEngine",
    "HebrewCalendarSource",
    "HolidayOverlay",
    "HolidaySource",
    "ICSHolidaySource",
    "build_filter_rules",
    "build_retrieval_query",
    "fetch_all_records",
    "SettingsValidator",
    "format_validation_message",
    "SyncResult",
    "SyncSession",
    "UndoableDeleteQueue",
]
