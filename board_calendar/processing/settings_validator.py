"""Validation of calendar settings against the live store schema."""

import logging

from pydantic.alias_generators import to_camel

from board_calendar.exceptions import StoreError
from board_calendar.models.record import BoardColumn
from board_calendar.models.settings import CalendarSettings, StructureMode
from board_calendar.models.validation import MissingItem, ValidationResult
from board_calendar.processing.approval import validate_approval_mapping
from board_calendar.storage.store_client import StoreClient

logger = logging.getLogger(__name__)

BOARD_LABELS = {
    "connected_board_id": "Projects board",
    "tasks_board_id": "Tasks board",
}

COLUMN_LABELS = {
    "date_column_id": "Start date column",
    "end_time_column_id": "End time column",
    "duration_column_id": "Duration column",
    "project_column_id": "Project column",
    "task_column_id": "Task column",
    "reporter_column_id": "Reporter column",
    "event_type_status_column_id": "Event type column",
    "non_billable_status_column_id": "Non-billable column",
    "stage_column_id": "Stage column",
    "notes_column_id": "Notes column",
    "tasks_project_column_id": "Task-to-project link column",
}

# Columns checked against the current board, in report order
CURRENT_BOARD_COLUMNS = [
    "date_column_id",
    "end_time_column_id",
    "duration_column_id",
    "project_column_id",
    "task_column_id",
    "reporter_column_id",
    "event_type_status_column_id",
    "non_billable_status_column_id",
    "stage_column_id",
    "notes_column_id",
]

BASE_REQUIRED_COLUMNS = [
    "date_column_id",
    "end_time_column_id",
    "duration_column_id",
    "project_column_id",
    "reporter_column_id",
]


def _label(key: str) -> str:
    return BOARD_LABELS.get(key) or COLUMN_LABELS.get(key) or key


def _missing(key: str, entity_id: str | None = None) -> MissingItem:
    return MissingItem(key=to_camel(key), label=_label(key), id=entity_id)


def required_settings(
    structure_mode: StructureMode, use_assignments_mode: bool = False
) -> tuple[list[str], list[str], list[str]]:
    """Required (boards, current board columns, linked board columns)."""
    boards = [] if use_assignments_mode else ["connected_board_id"]
    columns = list(BASE_REQUIRED_COLUMNS)
    linked_columns: list[str] = []

    match structure_mode:
        case StructureMode.PROJECT_WITH_TASKS:
            boards.append("tasks_board_id")
            columns.append("task_column_id")
            linked_columns.append("tasks_project_column_id")
        case StructureMode.PROJECT_WITH_STAGE:
            columns.append("stage_column_id")
    return boards, columns, linked_columns


class SettingsValidator:
    """Cross-checks settings against board and column existence.

    Findings are returned as a ``ValidationResult``; nothing is raised.
    Probe failures count the probed entity as missing and add an error.
    """

    def __init__(self, client: StoreClient):
        self.client = client

    async def _columns_of(self, board_id: str, result: ValidationResult) -> list[BoardColumn] | None:
        try:
            return await self.client.fetch_board_columns(board_id)
        except StoreError as e:
            logger.error(f"Schema probe for board {board_id} failed: {e}")
            result.errors.append(f"Could not verify board {board_id}: {e.user_message}")
            return None

    async def validate(
        self, settings: CalendarSettings | None, current_board_id: str | None
    ) -> ValidationResult:
        result = ValidationResult()
        if settings is None:
            result.errors.append("No settings found")
            result.missing_settings.append(MissingItem(key="settings", label="Settings"))
            return result

        # Linked board columns are checked for existence only when configured.
        boards, columns, _ = required_settings(settings.structure_mode, settings.use_assignments_mode)
        for key in [*boards, *columns]:
            if not getattr(settings, key):
                result.missing_settings.append(_missing(key))
        if result.missing_settings:
            result.errors.append(f"{len(result.missing_settings)} required settings are missing")

        await self._check_boards(settings, result)
        await self._check_current_board_columns(settings, current_board_id, result)
        self._add_warnings(settings, result)

        logger.info(
            f"Settings validation: valid={result.is_valid}, "
            f"errors={len(result.errors)}, warnings={len(result.warnings)}"
        )
        return result

    async def _check_boards(self, settings: CalendarSettings, result: ValidationResult) -> None:
        if settings.connected_board_id:
            if await self._columns_of(settings.connected_board_id, result) is None:
                result.missing_boards.append(_missing("connected_board_id", settings.connected_board_id))
                result.errors.append("The configured projects board was not found")

        if settings.tasks_board_id and settings.structure_mode == StructureMode.PROJECT_WITH_TASKS:
            task_columns = await self._columns_of(settings.tasks_board_id, result)
            if task_columns is None:
                result.missing_boards.append(_missing("tasks_board_id", settings.tasks_board_id))
                result.errors.append("The configured tasks board was not found")
            elif settings.tasks_project_column_id and not any(
                c.id == settings.tasks_project_column_id for c in task_columns
            ):
                result.missing_columns.append(
                    _missing("tasks_project_column_id", settings.tasks_project_column_id)
                )

    async def _check_current_board_columns(
        self, settings: CalendarSettings, current_board_id: str | None, result: ValidationResult
    ) -> None:
        if not current_board_id:
            return
        configured = [(key, getattr(settings, key)) for key in CURRENT_BOARD_COLUMNS if getattr(settings, key)]
        if not configured:
            return

        board_columns = await self._columns_of(current_board_id, result)
        if board_columns is None:
            result.errors.append("The current board was not found")
            result.missing_boards.append(
                MissingItem(key="currentBoardId", label="Current board", id=str(current_board_id))
            )
            return

        existing = {column.id for column in board_columns}
        missing = [(key, column_id) for key, column_id in configured if column_id not in existing]
        for key, column_id in missing:
            result.missing_columns.append(_missing(key, column_id))
        if missing:
            result.errors.append(f"{len(missing)} configured columns were not found on the board")

    def _add_warnings(self, settings: CalendarSettings, result: ValidationResult) -> None:
        if not settings.event_type_status_column_id:
            result.warnings.append("An event type column is recommended for filtering events")
        elif not settings.event_type_mapping:
            result.warnings.append("An event type column is set but no event type mapping is configured")

        if settings.enable_notes and not settings.notes_column_id:
            result.warnings.append("Notes are enabled but no notes column is configured")

        if settings.enable_approval and settings.approval_status_column_id:
            for error in validate_approval_mapping(settings.approval_status_mapping):
                result.warnings.append(f"Approval mapping: {error}")


def format_validation_message(result: ValidationResult) -> str | None:
    """Human-readable summary of what is missing, or None when valid."""
    if result.is_valid:
        return None

    lines = []
    for title, items in (
        ("Missing settings:", result.missing_settings),
        ("Boards not found:", result.missing_boards),
        ("Columns not found on the board:", result.missing_columns),
    ):
        if items:
            lines.append(title)
            lines.extend(f"  • {item.label or item.key}" for item in items)
    return "\n".join(lines)
