"""Pydantic models for the calendar engine."""

from board_calendar.models.column_values import (
    ColumnValue,
    DateValue,
    DurationValue,
    PeopleValue,
    RelationValue,
    StatusValue,
    TextValue,
)
from board_calendar.models.event import ApprovalState, Event, HolidayType
from board_calendar.models.mapping import FieldMapping, FieldRole, RoleBinding, RoleMode
from board_calendar.models.query import (
    BoardsQuery,
    ChangeColumnValuesMutation,
    CreateItemMutation,
    DeleteItemMutation,
    FilterOperator,
    FilterRule,
    ItemsPageQuery,
    NextItemsPageQuery,
    StoreResponse,
)
from board_calendar.models.record import Board, BoardColumn, RecordColumn, StoreRecord
from board_calendar.models.settings import CalendarSettings, EditLockMode, StructureMode
from board_calendar.models.validation import MissingItem, ValidationResult

__all__ = [
    "Event",
    "ApprovalState",
    "HolidayType",
    "FieldMapping",
    "FieldRole",
    "RoleBinding",
    "RoleMode",
    "CalendarSettings",
    "EditLockMode",
    "StructureMode",
    "ColumnValue",
    "DateValue",
    "DurationValue",
    "PeopleValue",
    "RelationValue",
    "StatusValue",
    "TextValue",
    "FilterOperator",
    "FilterRule",
    "ItemsPageQuery",
    "NextItemsPageQuery",
    "BoardsQuery",
    "CreateItemMutation",
    "ChangeColumnValuesMutation",
    "DeleteItemMutation",
    "StoreResponse",
    "Board",
    "BoardColumn",
    "RecordColumn",
    "StoreRecord",
    "MissingItem",
    "ValidationResult",
]
