"""Tests for Pydantic models."""

import json
from datetime import date, datetime, time

import pytest
from pydantic import TypeAdapter, ValidationError

from board_calendar.models.column_values import (
    ColumnValue,
    DateValue,
    DurationValue,
    PeopleValue,
    RelationValue,
    StatusValue,
    TextValue,
)
from board_calendar.models.event import Event
from board_calendar.models.mapping import FieldMapping, FieldRole, RoleBinding, RoleMode
from board_calendar.models.query import (
    BoardsQuery,
    DeleteItemMutation,
    FilterOperator,
    FilterRule,
    ItemsPageQuery,
)
from board_calendar.models.record import RecordColumn, StoreRecord
from board_calendar.models.settings import CalendarSettings, StructureMode
from board_calendar.models.validation import MissingItem, ValidationResult


def test_event_creation():
    """Test basic event creation and computed duration."""
    event = Event(
        id=123,
        title="Report",
        start=datetime(2025, 3, 2, 9, 0),
        end=datetime(2025, 3, 2, 10, 30),
        source_record_id=123,
    )
    assert event.id == "123"
    assert event.duration_minutes == 90
    assert event.is_synthetic is False
    assert event.record_id == "123"


def test_event_end_must_follow_start():
    """Timed events need end after start."""
    with pytest.raises(ValidationError):
        Event(id="1", title="x", start=datetime(2025, 3, 2, 9), end=datetime(2025, 3, 2, 9))


def test_all_day_event_allows_equal_bounds():
    """All-day events only need end >= start."""
    event = Event(
        id="1",
        title="x",
        start=datetime(2025, 3, 2),
        end=datetime(2025, 3, 2),
        all_day=True,
    )
    assert event.duration_minutes == 0


def test_event_without_source_record_is_synthetic():
    event = Event(id="tmp", title="x", start=datetime(2025, 3, 2, 9), end=datetime(2025, 3, 2, 10))
    assert event.is_synthetic is True


def test_date_value_parse_fragment_and_payload():
    """Dates parse from the typed fragment or the JSON payload."""
    fragment = RecordColumn(id="d", date="2025-03-02", time="09:15:00")
    payload = RecordColumn(id="d", value=json.dumps({"date": "2025-03-02", "time": "09:15"}))

    assert DateValue.parse(fragment).to_datetime() == datetime(2025, 3, 2, 9, 15)
    assert DateValue.parse(payload).to_datetime() == datetime(2025, 3, 2, 9, 15)


def test_date_value_without_time_is_midnight():
    value = DateValue.parse(RecordColumn(id="d", date="2025-03-02"))
    assert value.time is None
    assert value.to_datetime() == datetime(2025, 3, 2, 0, 0)


def test_date_value_malformed_is_none():
    """Malformed store data yields None instead of raising."""
    assert DateValue.parse(None) is None
    assert DateValue.parse(RecordColumn(id="d")) is None
    assert DateValue.parse(RecordColumn(id="d", date="02/03/2025")) is None
    assert DateValue.parse(RecordColumn(id="d", date="2025-03-02", time="25:99")) is None


def test_date_value_serialize():
    value = DateValue(date=date(2025, 3, 2), time=time(9, 5))
    assert value.serialize() == {"date": "2025-03-02", "time": "09:05:00"}


def test_models_package_imports():
    """Every model module loads through the package."""
    import board_calendar.models as models

    for name in models.__all__:
        assert getattr(models, name) is not None


def test_date_value_fields_accept_optional_time():
    value = DateValue(date=date(2025, 3, 2))
    assert value.time is None
    assert value.to_datetime() == datetime(2025, 3, 2)
    assert DateValue.model_validate({"date": "2025-03-02", "time": None}).time is None


def test_duration_value_parse():
    """Durations parse from hour/minute payloads or decimal hours."""
    assert DurationValue.parse(
        RecordColumn(id="h", value=json.dumps({"hour": 2, "minute": 15}))
    ).total_minutes == 135
    assert DurationValue.parse(RecordColumn(id="h", value="1.5")).total_minutes == 90
    assert DurationValue.parse(RecordColumn(id="h", value=json.dumps({"hour": -1}))) is None
    assert DurationValue.parse(RecordColumn(id="h", value="abc")) is None
    assert DurationValue.parse(RecordColumn(id="h")) is None


def test_duration_value_from_minutes():
    value = DurationValue.from_minutes(125)
    assert (value.hour, value.minute) == (2, 5)
    assert value.serialize() == {"hour": 2, "minute": 5}


def test_relation_value_parse_sources():
    """Relations read linked items, then item ids, then linked pulse ids."""
    linked = RecordColumn(id="r", linked_items=[{"id": 501, "name": "Apollo"}])
    item_ids = RecordColumn(id="r", value=json.dumps({"item_ids": [502]}))
    pulses = RecordColumn(id="r", value=json.dumps({"linkedPulseIds": [{"linkedPulseId": 503}]}))

    assert RelationValue.parse(linked).first == "501"
    assert RelationValue.parse(item_ids).first == "502"
    assert RelationValue.parse(pulses).first == "503"
    assert RelationValue.parse(RecordColumn(id="r", value="{}")) is None
    assert RelationValue(item_ids=["501"]).serialize() == {"item_ids": [501]}


def test_people_value_parse_and_serialize():
    column = RecordColumn(
        id="p",
        value=json.dumps({"personsAndTeams": [{"id": 42, "kind": "person"}, {"id": 7, "kind": "team"}]}),
    )
    assert PeopleValue.parse(column).person_ids == ["42"]
    assert PeopleValue(person_ids=["42"]).serialize() == {
        "personsAndTeams": [{"id": 42, "kind": "person"}]
    }


def test_text_and_status_values():
    assert TextValue.parse(RecordColumn(id="t", text="hello")).text == "hello"
    assert TextValue.parse(RecordColumn(id="t")) is None

    status = StatusValue.parse(
        RecordColumn(id="s", index=3, label="חופשה", label_style={"color": "#fdab3d"})
    )
    assert status.index == 3
    assert status.label == "חופשה"
    assert status.color == "#fdab3d"
    assert status.serialize() == {"index": 3}
    assert StatusValue(label="Done").serialize() == {"label": "Done"}


def test_column_value_union_discriminates_on_kind():
    """The tagged union picks the variant from its kind."""
    adapter = TypeAdapter(ColumnValue)
    value = adapter.validate_python({"kind": "duration", "hour": 1, "minute": 5})
    assert isinstance(value, DurationValue)
    assert value.total_minutes == 65


def test_field_mapping_hidden_role_is_unmapped():
    """Hidden roles are neither read nor written."""
    mapping = FieldMapping(
        roles={
            FieldRole.START_DATE: RoleBinding(column_id="date4", mode=RoleMode.REQUIRED),
            FieldRole.NOTES: RoleBinding(column_id="text", mode=RoleMode.HIDDEN),
        }
    )
    assert mapping.column_for(FieldRole.START_DATE) == "date4"
    assert mapping.column_for(FieldRole.NOTES) is None
    assert mapping.has(FieldRole.NOTES) is False
    assert mapping.mode_for(FieldRole.NOTES) == RoleMode.HIDDEN


def test_field_mapping_task_role_requires_board():
    """Task and product roles need their linked board configured."""
    with pytest.raises(ValidationError):
        FieldMapping.from_columns({FieldRole.START_DATE: "date4", FieldRole.TASK: "task_rel"})
    mapping = FieldMapping.from_columns(
        {FieldRole.START_DATE: "date4", FieldRole.TASK: "task_rel"}, task_board_id="333"
    )
    assert mapping.column_for(FieldRole.TASK) == "task_rel"


def test_field_mapping_is_frozen(mapping):
    with pytest.raises(ValidationError):
        mapping.task_board_id = "999"


def test_settings_aliases_and_field_mapping(settings):
    """Settings accept camelCase keys and derive the field mapping."""
    loaded = CalendarSettings.model_validate(
        {"dateColumnId": "date4", "structureMode": "project_with_stage", "stageColumnId": "stage"}
    )
    assert loaded.date_column_id == "date4"
    assert loaded.structure_mode == StructureMode.PROJECT_WITH_STAGE

    mapping = settings.to_field_mapping()
    assert mapping.column_for(FieldRole.START_DATE) == "date4"
    assert mapping.mode_for(FieldRole.START_DATE) == RoleMode.REQUIRED
    assert mapping.column_for(FieldRole.PROJECT) == "project_rel"
    assert mapping.has(FieldRole.APPROVAL) is False


def test_settings_approval_enabled_needs_column_and_mapping():
    assert CalendarSettings(enable_approval=True).approval_enabled is False
    assert CalendarSettings(
        enable_approval=True,
        approval_status_column_id="approval",
        approval_status_mapping={"0": "pending"},
    ).approval_enabled is True


def test_settings_task_column_ignored_without_task_board():
    settings = CalendarSettings(date_column_id="date4", task_column_id="task_rel")
    assert settings.to_field_mapping().has(FieldRole.TASK) is False


def test_store_record_column_lookup():
    record = StoreRecord(id=5, column_values=[RecordColumn(id="a", text="x")])
    assert record.id == "5"
    assert record.column("a").text == "x"
    assert record.column("b") is None
    assert record.column(None) is None


def test_filter_rule_and_query_rendering():
    """Expressions render store-native query text."""
    rule = FilterRule(column_id="person", operator=FilterOperator.ANY_OF, compare_value=["person-42"])
    query = ItemsPageQuery(board_id="111", rules=[rule], limit=100)
    text = query.to_graphql()
    assert "boards(ids: [111])" in text
    assert "items_page(limit: 100" in text
    assert '{column_id: "person", compare_value: ["person-42"], operator: any_of}' in text

    assert "columns { id title type }" in BoardsQuery(board_ids=["111"]).to_graphql()
    assert "delete_item(item_id: 77)" in DeleteItemMutation(item_id="77").to_graphql()


def test_validation_result_validity():
    """Warnings and errors alone don't make a result invalid."""
    result = ValidationResult(warnings=["w"], errors=["e"])
    assert result.is_valid is True
    assert result.has_warnings is True

    result.missing_columns.append(MissingItem(key="dateColumnId"))
    assert result.is_valid is False
    assert result.model_dump()["is_valid"] is False
