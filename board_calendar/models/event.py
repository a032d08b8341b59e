"""Event model with Pydantic v2 validation."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, computed_field, field_validator, model_validator


class ApprovalState(str, Enum):
    """Manager approval state of an event."""

    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class HolidayType(str, Enum):
    """Holiday classification used for display grouping."""

    MODERN = "MODERN"
    MAJOR = "MAJOR"
    MINOR = "MINOR"


class Event(BaseModel):
    """Calendar event produced from a store record or synthesized."""

    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool = False

    # Back-reference to the store record (None for holidays)
    source_record_id: Optional[str] = None

    # Business attributes, present only when the mapping has the role
    project_id: Optional[str] = None
    reporter_id: Optional[str] = None
    notes: Optional[str] = None
    event_type_key: Optional[str] = None
    task_id: Optional[str] = None
    product_id: Optional[str] = None
    stage: Optional[str] = None
    created_at: Optional[datetime] = None
    approval_state: Optional[ApprovalState] = None
    label_color: Optional[str] = None

    # Set by the holiday overlay only
    is_holiday: bool = False
    holiday_type: Optional[HolidayType] = None
    read_only: bool = False

    color: Optional[str] = None

    @field_validator(
        "id",
        "source_record_id",
        "project_id",
        "reporter_id",
        "task_id",
        "product_id",
        mode="before",
    )
    @classmethod
    def coerce_identifier(cls, v):
        """Store identifiers arrive as strings or numbers."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @model_validator(mode="after")
    def validate_range(self):
        """End must follow start; all-day events use an exclusive end."""
        if self.all_day:
            if self.end < self.start:
                raise ValueError("end must be >= start for all-day events")
        elif self.end <= self.start:
            raise ValueError("end must be > start")
        return self

    @computed_field
    @property
    def duration_minutes(self) -> int:
        """Whole minutes between start and end."""
        return round((self.end - self.start).total_seconds() / 60)

    @property
    def is_synthetic(self) -> bool:
        """True for events never persisted to the store."""
        return self.is_holiday or self.source_record_id is None

    @property
    def record_id(self) -> str:
        """Store record id to use for mutations."""
        return self.source_record_id or self.id
