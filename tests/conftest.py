import json
from datetime import datetime

import pytest

from board_calendar.models.mapping import FieldMapping, FieldRole
from board_calendar.models.record import Board, BoardColumn, RecordColumn, StoreRecord
from board_calendar.models.settings import CalendarSettings
from board_calendar.storage.memory_store import InMemoryStore
from board_calendar.storage.store_client import StoreClient

REPORTING_BOARD = "111"
PROJECTS_BOARD = "222"

EVENT_TYPE_MAPPING = {
    "שעתי": "billable",
    "לא לחיוב": "nonBillable",
    "זמני": "temporary",
    "חופשה": "allDay",
}

SAMPLE_ICS = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//test//holidays//EN
BEGIN:VEVENT
UID:rh1-2025
DTSTART;VALUE=DATE:20250923
SUMMARY:Rosh Hashana 5786
END:VEVENT
BEGIN:VEVENT
UID:rh2-2025
DTSTART;VALUE=DATE:20250924
SUMMARY:Rosh Hashana II
END:VEVENT
BEGIN:VEVENT
UID:yk-2025
DTSTART;VALUE=DATE:20251002
SUMMARY:Yom Kippur
END:VEVENT
BEGIN:VEVENT
UID:yk-2025-dup
DTSTART;VALUE=DATE:20251002
SUMMARY:Yom Kippur
END:VEVENT
BEGIN:VEVENT
UID:shabbat-2025
DTSTART;VALUE=DATE:20251004
SUMMARY:Shabbat Shuva
END:VEVENT
BEGIN:VEVENT
UID:chanukah-2025
DTSTART;VALUE=DATE:20251215
SUMMARY:Chanukah: 1 Candle
END:VEVENT
BEGIN:VEVENT
UID:atzmaut-2026
DTSTART;VALUE=DATE:20260422
SUMMARY:Yom HaAtzma'ut
END:VEVENT
END:VCALENDAR
"""


@pytest.fixture
def mapping():
    """Field mapping for the reporting board."""
    return FieldMapping.from_columns(
        {
            FieldRole.START_DATE: "date4",
            FieldRole.DURATION: "hour",
            FieldRole.PROJECT: "project_rel",
            FieldRole.REPORTER: "person",
            FieldRole.NOTES: "text",
            FieldRole.EVENT_TYPE: "status",
        },
        event_type_mapping=EVENT_TYPE_MAPPING,
    )


@pytest.fixture
def settings():
    """Complete settings for the reporting board."""
    return CalendarSettings(
        time_reporting_board_id=REPORTING_BOARD,
        connected_board_id=PROJECTS_BOARD,
        date_column_id="date4",
        end_time_column_id="end_hour",
        duration_column_id="hour",
        project_column_id="project_rel",
        reporter_column_id="person",
        notes_column_id="text",
        event_type_status_column_id="status",
        enable_notes=True,
        event_type_mapping=EVENT_TYPE_MAPPING,
    )


@pytest.fixture
def make_record():
    """Factory for reporting board records."""

    def _make(
        record_id,
        day="2025-03-02",
        at="09:00:00",
        minutes=90,
        project="501",
        reporter="42",
        label="שעתי",
        created_at=None,
    ):
        columns = []
        if day is not None:
            columns.append(RecordColumn(id="date4", type="date", date=day, time=at))
        if minutes is not None:
            columns.append(
                RecordColumn(
                    id="hour",
                    type="hour",
                    value=json.dumps({"hour": minutes // 60, "minute": minutes % 60}),
                )
            )
        if project is not None:
            columns.append(
                RecordColumn(id="project_rel", type="board_relation", linked_items=[{"id": project}])
            )
        if reporter is not None:
            columns.append(
                RecordColumn(
                    id="person",
                    type="people",
                    persons_and_teams=[{"id": int(reporter), "kind": "person"}],
                )
            )
        if label is not None:
            columns.append(RecordColumn(id="status", type="status", label=label, index=0))
        return StoreRecord(
            id=str(record_id),
            name=f"Report {record_id}",
            created_at=created_at,
            column_values=columns,
        )

    return _make


@pytest.fixture
def boards():
    return [
        Board(
            id=REPORTING_BOARD,
            name="Time reports",
            columns=[
                BoardColumn(id="name", title="Name", type="name"),
                BoardColumn(id="date4", title="Date", type="date"),
                BoardColumn(id="end_hour", title="End", type="hour"),
                BoardColumn(id="hour", title="Duration", type="hour"),
                BoardColumn(id="project_rel", title="Project", type="board_relation"),
                BoardColumn(id="person", title="Reporter", type="people"),
                BoardColumn(id="text", title="Notes", type="text"),
                BoardColumn(id="status", title="Type", type="status"),
            ],
        ),
        Board(
            id=PROJECTS_BOARD,
            name="Projects",
            columns=[BoardColumn(id="name", title="Name", type="name")],
        ),
    ]


@pytest.fixture
def store(boards):
    """In-memory store with the reporting and projects boards."""
    return InMemoryStore(boards=boards, current_user_id="42")


@pytest.fixture
def client(store):
    return StoreClient(store)


@pytest.fixture
def holiday_ics(tmp_path):
    """Sample holiday ICS feed."""
    path = tmp_path / "holidays.ics"
    path.write_text(SAMPLE_ICS, encoding="utf-8")
    return path


@pytest.fixture
def report_time():
    return datetime(2025, 3, 2, 9, 0)
