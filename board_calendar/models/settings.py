"""Persisted calendar configuration model."""

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from board_calendar.models.mapping import FieldMapping, FieldRole, RoleBinding, RoleMode


class StructureMode(str, Enum):
    """How reports are structured below the project level."""

    PROJECT_ONLY = "project_only"
    PROJECT_WITH_TASKS = "project_with_tasks"
    PROJECT_WITH_STAGE = "project_with_stage"


class EditLockMode(str, Enum):
    """Time window during which reports may still be edited."""

    NONE = "none"
    TWO_DAYS = "two_days"
    CURRENT_WEEK = "current_week"
    CURRENT_MONTH = "current_month"


# Settings field -> role it maps on the reporting board
COLUMN_SETTING_ROLES: dict[str, FieldRole] = {
    "date_column_id": FieldRole.START_DATE,
    "duration_column_id": FieldRole.DURATION,
    "end_time_column_id": FieldRole.END_TIME,
    "project_column_id": FieldRole.PROJECT,
    "reporter_column_id": FieldRole.REPORTER,
    "notes_column_id": FieldRole.NOTES,
    "event_type_status_column_id": FieldRole.EVENT_TYPE,
    "task_column_id": FieldRole.TASK,
    "product_column_id": FieldRole.PRODUCT,
    "stage_column_id": FieldRole.STAGE,
    "approval_status_column_id": FieldRole.APPROVAL,
    "non_billable_status_column_id": FieldRole.NON_BILLABLE,
}


class CalendarSettings(BaseModel):
    """User configuration stored through the key-value capability.

    Loaded once at session start and replaced wholesale on save. Stored
    with camelCase keys; snake_case names are accepted as well.
    """

    # Boards
    time_reporting_board_id: str | None = None
    use_current_board_for_reporting: bool = False
    connected_board_id: str | None = None
    tasks_board_id: str | None = None
    products_board_id: str | None = None
    people_column_id: str | None = None

    structure_mode: StructureMode = StructureMode.PROJECT_ONLY
    use_assignments_mode: bool = False

    # Columns on the reporting board
    date_column_id: str | None = None
    end_time_column_id: str | None = None
    duration_column_id: str | None = None
    project_column_id: str | None = None
    reporter_column_id: str | None = None
    notes_column_id: str | None = None
    task_column_id: str | None = None
    stage_column_id: str | None = None
    product_column_id: str | None = None
    event_type_status_column_id: str | None = None
    non_billable_status_column_id: str | None = None
    approval_status_column_id: str | None = None

    # Columns on linked boards
    tasks_project_column_id: str | None = None
    products_customer_column_id: str | None = None

    # Label index -> category
    event_type_mapping: dict[str, str] | None = None
    approval_status_mapping: dict[str, str] | None = None

    enable_notes: bool = False
    enable_approval: bool = False
    approved_manager_ids: list[str] = Field(default_factory=list)
    edit_lock_mode: EditLockMode = EditLockMode.NONE

    # Per-role surface mode overrides, keyed by role name
    role_modes: dict[str, RoleMode] = Field(default_factory=dict)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @property
    def approval_enabled(self) -> bool:
        """Approval is active only with a column and a non-empty mapping."""
        return bool(
            self.enable_approval
            and self.approval_status_column_id
            and self.approval_status_mapping
        )

    def to_field_mapping(self) -> FieldMapping:
        """Derive the field mapping for the reporting board."""
        roles: dict[FieldRole, RoleBinding] = {}
        for setting, role in COLUMN_SETTING_ROLES.items():
            column_id = getattr(self, setting)
            if not column_id:
                continue
            if role == FieldRole.TASK and not self.tasks_board_id:
                continue
            if role == FieldRole.PRODUCT and not self.products_board_id:
                continue
            if role == FieldRole.APPROVAL and not self.approval_enabled:
                continue

            mode = self.role_modes.get(role.value)
            if role == FieldRole.START_DATE:
                mode = RoleMode.REQUIRED
            roles[role] = RoleBinding(column_id=column_id, mode=mode or RoleMode.OPTIONAL)

        return FieldMapping(
            roles=roles,
            task_board_id=self.tasks_board_id,
            products_board_id=self.products_board_id,
            event_type_mapping=self.event_type_mapping,
            approval_enabled=self.approval_enabled,
            approval_mapping=self.approval_status_mapping,
        )
