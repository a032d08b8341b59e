"""Translation between store records and calendar events."""

import logging
from datetime import datetime, time, timedelta
from typing import Iterable

from board_calendar.exceptions import CallerContractError
from board_calendar.models.column_values import (
    DateValue,
    DurationValue,
    PeopleValue,
    RelationValue,
    StatusValue,
    TextValue,
)
from board_calendar.models.event import ApprovalState, Event
from board_calendar.models.mapping import FieldMapping, FieldRole
from board_calendar.models.record import StoreRecord
from board_calendar.processing.approval import ApprovalCategory, index_for, resolve_approval_state
from board_calendar.processing.event_types import is_all_day_label

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 60

# Relation roles and the Event field they fill
RELATION_ROLES = {
    FieldRole.PROJECT: "project_id",
    FieldRole.TASK: "task_id",
    FieldRole.PRODUCT: "product_id",
}

STATE_CATEGORIES = {
    ApprovalState.PENDING: ApprovalCategory.PENDING,
    ApprovalState.APPROVED: ApprovalCategory.APPROVED_BILLABLE,
    ApprovalState.REJECTED: ApprovalCategory.REJECTED,
}


def _duration_minutes(record: StoreRecord, mapping: FieldMapping, default: int) -> int:
    value = DurationValue.parse(record.column(mapping.column_for(FieldRole.DURATION)))
    if value is None or value.total_minutes <= 0:
        return default
    return value.total_minutes


def _end_from_end_time(record: StoreRecord, mapping: FieldMapping, start: datetime) -> datetime | None:
    """End time-of-day column on the start date, if mapped and after start."""
    value = DurationValue.parse(record.column(mapping.column_for(FieldRole.END_TIME)))
    if value is None or value.hour > 23:
        return None
    end = datetime.combine(start.date(), time(value.hour, value.minute))
    return end if end > start else None


def record_to_event(
    record: StoreRecord,
    mapping: FieldMapping,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> Event | None:
    """Map a store record to an Event.

    Returns None when the start date is missing or unparsable; a record
    without a start can't become an event. Duration defaults when the
    role is unmapped, unparsable or zero. Optional roles are copied only
    when mapped.
    """
    start_value = DateValue.parse(record.column(mapping.column_for(FieldRole.START_DATE)))
    if start_value is None:
        logger.debug(f"Record {record.id} has no valid start date, skipping")
        return None
    start = start_value.to_datetime()

    attributes: dict = {}
    for role, field in RELATION_ROLES.items():
        if mapping.has(role):
            relation = RelationValue.parse(record.column(mapping.column_for(role)))
            attributes[field] = relation.first if relation else None

    if mapping.has(FieldRole.REPORTER):
        people = PeopleValue.parse(record.column(mapping.column_for(FieldRole.REPORTER)))
        attributes["reporter_id"] = people.first if people else None

    if mapping.has(FieldRole.NOTES):
        notes = TextValue.parse(record.column(mapping.column_for(FieldRole.NOTES)))
        attributes["notes"] = notes.text if notes else None

    if mapping.has(FieldRole.EVENT_TYPE):
        status = StatusValue.parse(record.column(mapping.column_for(FieldRole.EVENT_TYPE)))
        if status is not None:
            attributes["event_type_key"] = status.label or (
                str(status.index) if status.index is not None else None
            )
            attributes["label_color"] = status.color

    if mapping.has(FieldRole.STAGE):
        stage = StatusValue.parse(record.column(mapping.column_for(FieldRole.STAGE)))
        attributes["stage"] = (stage.label or str(stage.index)) if stage else None

    if mapping.approval_enabled and mapping.has(FieldRole.APPROVAL):
        status = StatusValue.parse(record.column(mapping.column_for(FieldRole.APPROVAL)))
        attributes["approval_state"] = resolve_approval_state(
            status.index if status else None, mapping.approval_mapping
        )

    all_day = is_all_day_label(attributes.get("event_type_key"), mapping.event_type_mapping)
    try:
        if all_day:
            start = datetime.combine(start.date(), time(0, 0))
            end = start + timedelta(days=1)
        elif not mapping.has(FieldRole.DURATION) and mapping.has(FieldRole.END_TIME):
            end = _end_from_end_time(record, mapping, start) or start + timedelta(
                minutes=default_duration_minutes
            )
        else:
            end = start + timedelta(minutes=_duration_minutes(record, mapping, default_duration_minutes))
    except OverflowError:
        logger.warning(f"Record {record.id} ends past the representable date range, skipping")
        return None

    return Event(
        id=record.id,
        title=record.name,
        start=start,
        end=end,
        all_day=all_day,
        source_record_id=record.id,
        created_at=record.created_at,
        **{k: v for k, v in attributes.items() if v is not None},
    )


def event_to_column_values(
    start: datetime | None,
    end: datetime | None,
    mapping: FieldMapping | None,
    *,
    project_id: str | None = None,
    task_id: str | None = None,
    product_id: str | None = None,
    reporter_id: str | None = None,
    notes: str | None = None,
    event_type_index: int | None = None,
    stage_index: int | None = None,
    approval_state: ApprovalState | None = None,
) -> dict:
    """Serialize an event's schedule and attributes for a store write.

    Only mapped roles are written; an unmapped role is omitted entirely.

    Raises:
        CallerContractError: If start, end or mapping is missing, or
            end does not follow start.
    """
    if start is None or end is None or mapping is None:
        raise CallerContractError("start, end and mapping are required to build column values")
    if end <= start:
        raise CallerContractError(f"end ({end}) must be after start ({start})")

    duration = round((end - start).total_seconds() / 60)
    values: dict = {}

    date_column = mapping.column_for(FieldRole.START_DATE)
    if date_column:
        values[date_column] = DateValue.from_datetime(start).serialize()

    duration_column = mapping.column_for(FieldRole.DURATION)
    if duration_column:
        values[duration_column] = DurationValue.from_minutes(duration).serialize()

    end_time_column = mapping.column_for(FieldRole.END_TIME)
    if end_time_column:
        values[end_time_column] = {"hour": end.hour, "minute": end.minute}

    for role, item_id in (
        (FieldRole.PROJECT, project_id),
        (FieldRole.TASK, task_id),
        (FieldRole.PRODUCT, product_id),
    ):
        column_id = mapping.column_for(role)
        if column_id and item_id is not None:
            values[column_id] = RelationValue(item_ids=[str(item_id)]).serialize()

    reporter_column = mapping.column_for(FieldRole.REPORTER)
    if reporter_column and reporter_id is not None:
        values[reporter_column] = PeopleValue(person_ids=[str(reporter_id)]).serialize()

    notes_column = mapping.column_for(FieldRole.NOTES)
    if notes_column and notes:
        values[notes_column] = TextValue(text=notes).serialize()

    for role, index in ((FieldRole.EVENT_TYPE, event_type_index), (FieldRole.STAGE, stage_index)):
        column_id = mapping.column_for(role)
        if column_id and index is not None:
            values[column_id] = StatusValue(index=index).serialize()

    approval_column = mapping.column_for(FieldRole.APPROVAL)
    if approval_column and approval_state is not None and mapping.approval_enabled:
        index = _approval_index(approval_state, mapping.approval_mapping)
        if index is not None:
            values[approval_column] = StatusValue(index=index).serialize()

    return values


def _approval_index(state: ApprovalState, approval_mapping: dict[str, str] | None) -> int | None:
    """Label index for writing an approval state."""
    category = STATE_CATEGORIES.get(state)
    index = index_for(category, approval_mapping) if category else None
    return int(index) if index is not None else None


class ColumnMapper:
    """Column mapper bound to one field mapping for a sync cycle."""

    def __init__(self, mapping: FieldMapping, default_duration_minutes: int = DEFAULT_DURATION_MINUTES):
        self.mapping = mapping
        self.default_duration_minutes = default_duration_minutes

    def to_event(self, record: StoreRecord) -> Event | None:
        return record_to_event(record, self.mapping, self.default_duration_minutes)

    def map_records(self, records: Iterable[StoreRecord]) -> list[Event]:
        """Map records in order, dropping those that can't become events."""
        events = []
        skipped = 0
        for record in records:
            event = self.to_event(record)
            if event is None:
                skipped += 1
                continue
            events.append(event)
        if skipped:
            logger.info(f"Skipped {skipped} records without a valid start date")
        return events

    def to_column_values(self, start: datetime, end: datetime, **attributes) -> dict:
        return event_to_column_values(start, end, self.mapping, **attributes)
