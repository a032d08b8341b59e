"""Field-role mapping between store columns and event attributes."""

from enum import Enum

from pydantic import BaseModel, model_validator


class FieldRole(str, Enum):
    """Logical event roles a store column can fulfil."""

    START_DATE = "start_date"
    DURATION = "duration"
    END_TIME = "end_time"
    PROJECT = "project"
    REPORTER = "reporter"
    NOTES = "notes"
    EVENT_TYPE = "event_type"
    TASK = "task"
    PRODUCT = "product"
    STAGE = "stage"
    APPROVAL = "approval"
    NON_BILLABLE = "non_billable"


class RoleMode(str, Enum):
    """How a mapped role is surfaced to the user."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    HIDDEN = "hidden"


class RoleBinding(BaseModel):
    """Column binding for one role."""

    column_id: str
    mode: RoleMode = RoleMode.OPTIONAL

    class Config:
        frozen = True


class FieldMapping(BaseModel):
    """Which store column fulfils each logical role.

    Read by every component of a sync cycle and never mutated during it;
    saving new settings produces a new mapping.
    """

    roles: dict[FieldRole, RoleBinding] = {}
    task_board_id: str | None = None
    products_board_id: str | None = None
    event_type_mapping: dict[str, str] | None = None
    approval_enabled: bool = False
    approval_mapping: dict[str, str] | None = None

    class Config:
        frozen = True

    @model_validator(mode="after")
    def validate_role_dependencies(self):
        """Linked-item roles need their board link configured."""
        if FieldRole.TASK in self.roles and not self.task_board_id:
            raise ValueError("task role requires a configured task board")
        if FieldRole.PRODUCT in self.roles and not self.products_board_id:
            raise ValueError("product role requires a configured products board")
        return self

    def column_for(self, role: FieldRole) -> str | None:
        """Column id for a role, or None when unmapped or hidden."""
        binding = self.roles.get(role)
        if binding is None or binding.mode == RoleMode.HIDDEN:
            return None
        return binding.column_id

    def has(self, role: FieldRole) -> bool:
        """True if the role is mapped and not hidden."""
        return self.column_for(role) is not None

    def mode_for(self, role: FieldRole) -> RoleMode | None:
        """Configured mode for a role, if mapped."""
        binding = self.roles.get(role)
        return binding.mode if binding else None

    @classmethod
    def from_columns(cls, columns: dict[FieldRole | str, str | None], **kwargs) -> "FieldMapping":
        """Build a mapping from a plain role -> column id dict.

        Roles with an empty column id are left unmapped. The start date
        role is always required.
        """
        roles = {}
        for role, column_id in columns.items():
            if not column_id:
                continue
            role = FieldRole(role)
            mode = RoleMode.REQUIRED if role == FieldRole.START_DATE else RoleMode.OPTIONAL
            roles[role] = RoleBinding(column_id=column_id, mode=mode)
        return cls(roles=roles, **kwargs)
