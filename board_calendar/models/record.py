"""Raw store record models."""

import json
import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator, model_validator

logger = logging.getLogger(__name__)


class LinkedItem(BaseModel):
    """Item referenced by a relation column."""

    id: str
    name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if isinstance(v, int) else v


class RecordColumn(BaseModel):
    """One column value of a store record, as returned by the store.

    ``value`` is the store's serialized payload (usually a JSON string).
    The typed fields are filled when the query asked for them.
    """

    id: str
    type: str | None = None
    text: str | None = None
    value: Any = None

    # DateValue fragment
    date: str | None = None
    time: str | None = None

    # StatusValue fragment
    index: int | None = None
    label: str | None = None
    label_color: str | None = None

    # Relation / people fragments
    linked_items: list[LinkedItem] | None = None
    persons_and_teams: list[dict] | None = None

    @model_validator(mode="before")
    @classmethod
    def flatten_label_style(cls, data):
        """Status columns report their color under ``label_style``."""
        if isinstance(data, dict) and isinstance(data.get("label_style"), dict):
            data = dict(data)
            data.setdefault("label_color", data["label_style"].get("color"))
        return data

    def raw_value(self) -> Any:
        """Decode the serialized payload; None when absent or malformed."""
        if self.value is None or self.value == "":
            return None
        if not isinstance(self.value, str):
            return self.value
        try:
            return json.loads(self.value)
        except (ValueError, TypeError):
            logger.debug(f"Column {self.id} has a non-JSON value: {self.value!r}")
            return self.value


class BoardColumn(BaseModel):
    """Column definition in a board's live schema."""

    id: str
    title: str = ""
    type: str | None = None


class Board(BaseModel):
    """Board as reported by a schema probe."""

    id: str
    name: str = ""
    columns: list[BoardColumn] = []

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if isinstance(v, int) else v

    def has_column(self, column_id: str) -> bool:
        return any(column.id == column_id for column in self.columns)


class StoreRecord(BaseModel):
    """One item of a store board."""

    id: str
    name: str = ""
    board_id: str | None = None
    created_at: datetime | None = None
    column_values: list[RecordColumn] = []

    @field_validator("id", "board_id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if isinstance(v, int) else v

    def column(self, column_id: str | None) -> RecordColumn | None:
        """Find a column value by id."""
        if not column_id:
            return None
        for column in self.column_values:
            if column.id == column_id:
                return column
        return None
