"""Typed store column values.

Each column kind has an explicit ``parse`` (store payload -> value) and
``serialize`` (value -> store write payload). Parsing never raises:
malformed store data yields None.
"""

import logging
import math
from datetime import date as dt_date
from datetime import datetime
from datetime import time as dt_time
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from board_calendar.models.record import RecordColumn

logger = logging.getLogger(__name__)


# One year; longer durations are treated as malformed.
MAX_DURATION_MINUTES = 366 * 24 * 60


def _as_int(value: Any) -> int | None:
    """Coerce a store number (int, float or numeric string) to int."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    return None


class DateValue(BaseModel):
    """Date column with optional time of day."""

    kind: Literal["date"] = "date"
    date: dt_date
    time: dt_time | None = None

    @classmethod
    def parse(cls, column: RecordColumn | None) -> "DateValue | None":
        """Parse from the typed fragment or the JSON payload."""
        if column is None:
            return None
        date_str = column.date
        time_str = column.time
        if not date_str:
            raw = column.raw_value()
            if isinstance(raw, dict):
                date_str = raw.get("date")
                time_str = raw.get("time")
        if not date_str:
            return None
        try:
            parsed_date = datetime.strptime(date_str, "%Y-%m-%d").date()
        except (ValueError, TypeError):
            logger.warning(f"Unparsable date in column {column.id}: {date_str!r}")
            return None

        parsed_time = None
        if time_str:
            for fmt in ("%H:%M:%S", "%H:%M"):
                try:
                    parsed_time = datetime.strptime(time_str, fmt).time()
                    break
                except (ValueError, TypeError):
                    continue
            else:
                logger.warning(f"Unparsable time in column {column.id}: {time_str!r}")
                return None
        return cls(date=parsed_date, time=parsed_time)

    @classmethod
    def from_datetime(cls, value: datetime) -> "DateValue":
        return cls(date=value.date(), time=value.time().replace(microsecond=0))

    def to_datetime(self) -> datetime:
        """Combine date and time; a missing time means midnight."""
        return datetime.combine(self.date, self.time or dt_time(0, 0))

    def serialize(self) -> dict:
        payload = {"date": self.date.strftime("%Y-%m-%d")}
        if self.time is not None:
            payload["time"] = self.time.strftime("%H:%M:%S")
        return payload


class DurationValue(BaseModel):
    """Hour column holding a duration as hour and minute sub-fields."""

    kind: Literal["duration"] = "duration"
    hour: int = Field(default=0, ge=0)
    minute: int = Field(default=0, ge=0, le=59)

    @classmethod
    def parse(cls, column: RecordColumn | None) -> "DurationValue | None":
        """Parse ``{"hour": h, "minute": m}``; a bare number is decimal hours."""
        if column is None:
            return None
        raw = column.raw_value()
        if isinstance(raw, dict):
            hours = _as_int(raw.get("hour", 0) or 0)
            minutes = _as_int(raw.get("minute", 0) or 0)
            if hours is None or minutes is None or hours < 0 or minutes < 0:
                return None
            return cls._bounded(hours * 60 + minutes)
        if isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
            try:
                decimal_hours = float(raw)
            except (ValueError, OverflowError):
                return None
            if not math.isfinite(decimal_hours) or decimal_hours < 0:
                return None
            return cls._bounded(round(min(decimal_hours, MAX_DURATION_MINUTES) * 60))
        return None

    @classmethod
    def _bounded(cls, minutes: int) -> "DurationValue | None":
        if minutes > MAX_DURATION_MINUTES:
            logger.warning(f"Ignoring out of range duration of {minutes} minutes")
            return None
        return cls.from_minutes(minutes)

    @classmethod
    def from_minutes(cls, minutes: int) -> "DurationValue":
        return cls(hour=minutes // 60, minute=minutes % 60)

    @property
    def total_minutes(self) -> int:
        return self.hour * 60 + self.minute

    def serialize(self) -> dict:
        return {"hour": self.hour, "minute": self.minute}


class RelationValue(BaseModel):
    """Board relation column linking to items on another board."""

    kind: Literal["relation"] = "relation"
    item_ids: list[str] = []

    @classmethod
    def parse(cls, column: RecordColumn | None) -> "RelationValue | None":
        """Prefer ``linked_items``; fall back to the JSON payload."""
        if column is None:
            return None
        if column.linked_items:
            return cls(item_ids=[item.id for item in column.linked_items])
        raw = column.raw_value()
        if not isinstance(raw, dict):
            return None
        if raw.get("item_ids"):
            return cls(item_ids=[str(i) for i in raw["item_ids"]])
        linked = raw.get("linkedPulseIds") or []
        ids = [
            str(entry["linkedPulseId"])
            for entry in linked
            if isinstance(entry, dict) and entry.get("linkedPulseId") is not None
        ]
        return cls(item_ids=ids) if ids else None

    @property
    def first(self) -> str | None:
        return self.item_ids[0] if self.item_ids else None

    def serialize(self) -> dict:
        return {"item_ids": [int(i) for i in self.item_ids]}


class PeopleValue(BaseModel):
    """People column."""

    kind: Literal["people"] = "people"
    person_ids: list[str] = []

    @classmethod
    def parse(cls, column: RecordColumn | None) -> "PeopleValue | None":
        if column is None:
            return None
        entries = column.persons_and_teams
        if entries is None:
            raw = column.raw_value()
            entries = raw.get("personsAndTeams") if isinstance(raw, dict) else None
        if not entries:
            return None
        ids = [
            str(entry["id"])
            for entry in entries
            if isinstance(entry, dict) and entry.get("kind", "person") == "person" and "id" in entry
        ]
        return cls(person_ids=ids) if ids else None

    @property
    def first(self) -> str | None:
        return self.person_ids[0] if self.person_ids else None

    def serialize(self) -> dict:
        return {
            "personsAndTeams": [{"id": int(i), "kind": "person"} for i in self.person_ids]
        }


class TextValue(BaseModel):
    """Free text column."""

    kind: Literal["text"] = "text"
    text: str

    @classmethod
    def parse(cls, column: RecordColumn | None) -> "TextValue | None":
        if column is None:
            return None
        if column.text:
            return cls(text=column.text)
        raw = column.raw_value()
        if isinstance(raw, str) and raw:
            return cls(text=raw)
        if isinstance(raw, dict) and isinstance(raw.get("text"), str) and raw["text"]:
            return cls(text=raw["text"])
        return None

    def serialize(self) -> str:
        return self.text


class StatusValue(BaseModel):
    """Status column label, identified by its index."""

    kind: Literal["status"] = "status"
    index: int | None = None
    label: str | None = None
    color: str | None = None

    @classmethod
    def parse(cls, column: RecordColumn | None) -> "StatusValue | None":
        if column is None:
            return None
        index = column.index
        if index is None:
            raw = column.raw_value()
            if isinstance(raw, dict):
                index = _as_int(raw.get("index"))
        label = column.label or column.text or None
        if index is None and not label:
            return None
        return cls(index=index, label=label, color=column.label_color)

    def serialize(self) -> dict:
        if self.index is None:
            return {"label": self.label}
        return {"index": self.index}


ColumnValue = Annotated[
    Union[DateValue, DurationValue, RelationValue, PeopleValue, TextValue, StatusValue],
    Field(discriminator="kind"),
]
