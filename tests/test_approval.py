"""Tests for event type categories and manager approval."""

from datetime import datetime, timedelta

import pytest

from board_calendar.models.event import ApprovalState, Event
from board_calendar.models.query import ChangeColumnValuesMutation
from board_calendar.processing.approval import (
    ApprovalCategory,
    ApprovalService,
    auto_approval_mapping,
    migrate_approval_mapping,
    resolve_approval_state,
    validate_approval_mapping,
)
from board_calendar.processing.board_resolver import effective_board_id
from board_calendar.processing.event_types import (
    EventCategory,
    auto_event_type_mapping,
    category_for,
    is_all_day_label,
    timed_event_label,
    validate_event_type_mapping,
)

EVENT_TYPE_MAPPING = {"שעתי": "billable", "לא לחיוב": "nonBillable", "זמני": "temporary", "חופשה": "allDay"}

APPROVAL_MAPPING = {"0": "pending", "1": "approved_billable", "2": "approved_unbillable", "3": "rejected"}


@pytest.fixture
def approval_settings(settings):
    return settings.model_copy(
        update={
            "enable_approval": True,
            "approval_status_column_id": "approval",
            "approval_status_mapping": APPROVAL_MAPPING,
            "approved_manager_ids": ["42"],
        }
    )


def _event(record_id, state=ApprovalState.PENDING):
    start = datetime(2025, 3, 2, 9)
    return Event(
        id=record_id,
        title="Report",
        start=start,
        end=start + timedelta(hours=1),
        source_record_id=record_id,
        approval_state=state,
    )


def test_event_type_categories():
    assert category_for("שעתי", EVENT_TYPE_MAPPING) == EventCategory.BILLABLE
    assert category_for("unknown", EVENT_TYPE_MAPPING) is None
    assert category_for("שעתי", None) is None
    assert is_all_day_label("חופשה", EVENT_TYPE_MAPPING)


def test_timed_event_label_falls_back_to_legacy_labels():
    assert timed_event_label(True, {"Billable": "billable"}) == "Billable"
    assert timed_event_label(True, None) == "שעתי"
    assert timed_event_label(False, None) == "לא לחיוב"


def test_validate_event_type_mapping():
    assert validate_event_type_mapping(EVENT_TYPE_MAPPING) == []
    assert validate_event_type_mapping(None) == ["Event type mapping is missing or empty"]

    errors = validate_event_type_mapping({"a": "billable", "b": "billable", "c": "allDay"})
    assert 'Only one label may be mapped to "billable"' in errors
    assert 'Exactly one label must be mapped to "temporary"' in errors


def test_auto_event_type_mapping():
    mapping = auto_event_type_mapping(["שעתי", "זמני", "מחלה", "Other"])
    assert mapping == {"שעתי": "billable", "זמני": "temporary", "מחלה": "allDay"}
    assert auto_event_type_mapping(["שעתי"]) is None


def test_resolve_approval_state():
    assert resolve_approval_state(0, APPROVAL_MAPPING) == ApprovalState.PENDING
    assert resolve_approval_state("2", APPROVAL_MAPPING) == ApprovalState.APPROVED
    assert resolve_approval_state(3, APPROVAL_MAPPING) == ApprovalState.REJECTED
    assert resolve_approval_state(None, APPROVAL_MAPPING) == ApprovalState.NONE
    assert resolve_approval_state(0, None) == ApprovalState.NONE


def test_approval_mapping_helpers():
    assert validate_approval_mapping(APPROVAL_MAPPING) == []
    assert len(validate_approval_mapping({"0": "pending"})) == 3

    auto = auto_approval_mapping({"0": "ממתין", "1": "מאושר", "2": "מאושר - לא לחיוב", "3": "נדחה", "4": "approved"})
    assert auto == APPROVAL_MAPPING
    assert auto_approval_mapping({"0": "ממתין"}) is None

    assert migrate_approval_mapping(APPROVAL_MAPPING) is None
    assert migrate_approval_mapping({"1": "approved"}) == {"1": ApprovalCategory.APPROVED_BILLABLE.value}


def test_effective_board_id(settings):
    """The configured reporting board wins unless the current board is selected."""
    assert effective_board_id(settings, "555") == "111"
    current = settings.model_copy(update={"use_current_board_for_reporting": True})
    assert effective_board_id(current, "555") == "555"


async def test_approve_and_reject_write_label_index(store, client, approval_settings, make_record):
    for i in ("1", "2", "3"):
        store.add_record("111", make_record(i))
    service = ApprovalService(client, approval_settings, "111", user_id=42)
    assert service.enabled
    assert service.is_manager

    assert await service.approve(_event("1")) is True
    assert await service.approve(_event("2"), billable=False) is True
    assert await service.reject(_event("3")) is True

    writes = [(c.item_id, c.column_values) for c in store.calls_of(ChangeColumnValuesMutation)]
    assert writes == [
        ("1", {"approval": {"index": 1}}),
        ("2", {"approval": {"index": 2}}),
        ("3", {"approval": {"index": 3}}),
    ]


async def test_non_manager_is_not_manager(client, approval_settings):
    assert ApprovalService(client, approval_settings, "111", user_id="7").is_manager is False


async def test_approve_without_mapped_label(store, client, approval_settings):
    settings = approval_settings.model_copy(update={"approval_status_mapping": {"0": "pending"}})
    assert await ApprovalService(client, settings, "111").approve(_event("1")) is False
    assert store.calls_of(ChangeColumnValuesMutation) == []


async def test_approve_all_pending_counts_failures(store, client, approval_settings, make_record):
    for i in range(1, 7):
        store.add_record("111", make_record(str(i)))
    store.failing_items = {"4"}

    events = [_event(str(i)) for i in range(1, 7)]
    events.append(_event("9", state=ApprovalState.APPROVED))
    service = ApprovalService(client, approval_settings, "111", batch_size=2)

    result = await service.approve_all_pending(events)
    assert result.succeeded == 5
    assert result.failed == 1
    assert len(store.calls_of(ChangeColumnValuesMutation)) == 6
    assert store.find_record("1").column("approval").index == 1


async def test_approve_all_pending_with_nothing_pending(store, client, approval_settings):
    result = await ApprovalService(client, approval_settings, "111").approve_all_pending(
        [_event("1", state=ApprovalState.APPROVED)]
    )
    assert (result.succeeded, result.failed) == (0, 0)
    assert store.calls == []
