"""In-process store evaluating expression models against local board data."""

import itertools
import json
import logging
from pathlib import Path
from typing import Any

from board_calendar.models.query import (
    BoardsQuery,
    ChangeColumnValuesMutation,
    CreateItemMutation,
    DeleteItemMutation,
    FilterOperator,
    FilterRule,
    ItemsPageQuery,
    MutationExpression,
    NextItemsPageQuery,
    QueryExpression,
    StoreResponse,
)
from board_calendar.models.record import Board, RecordColumn, StoreRecord

logger = logging.getLogger(__name__)


def _error(message: str, code: str) -> StoreResponse:
    return StoreResponse(errors=[{"message": message, "extensions": {"code": code}}])


def _column_tokens(column: RecordColumn) -> set[str]:
    """Comparable tokens of a column value for ``any_of`` rules."""
    tokens: set[str] = set()
    raw = column.raw_value()
    if column.index is not None:
        tokens.add(str(column.index))
    if column.linked_items:
        tokens.update(item.id for item in column.linked_items)
    if column.persons_and_teams:
        tokens.update(f"person-{entry.get('id')}" for entry in column.persons_and_teams)
    if isinstance(raw, dict):
        tokens.update(str(i) for i in raw.get("item_ids") or [])
        tokens.update(
            str(entry.get("linkedPulseId")) for entry in raw.get("linkedPulseIds") or []
        )
        tokens.update(
            f"person-{entry.get('id')}" for entry in raw.get("personsAndTeams") or []
        )
        if raw.get("index") is not None:
            tokens.add(str(raw["index"]))
    elif isinstance(raw, str):
        tokens.add(raw)
    if column.text:
        tokens.add(column.text)
    return tokens


def _column_date(column: RecordColumn) -> str | None:
    if column.date:
        return column.date
    raw = column.raw_value()
    return raw.get("date") if isinstance(raw, dict) else None


def record_matches(record: StoreRecord, rule: FilterRule, current_user_id: str | None = None) -> bool:
    """Evaluate one filter rule against a record."""
    column = record.column(rule.column_id)
    if column is None:
        return False
    if rule.operator == FilterOperator.BETWEEN:
        value = _column_date(column)
        if value is None or len(rule.compare_value) != 2:
            return False
        low, high = (str(v) for v in rule.compare_value)
        return low <= value <= high
    wanted = {str(v) for v in rule.compare_value}
    if "assigned_to_me" in wanted:
        wanted.discard("assigned_to_me")
        if current_user_id:
            wanted.add(f"person-{current_user_id}")
    return bool(wanted & _column_tokens(column))


def column_from_payload(column_id: str, payload: Any) -> RecordColumn:
    """Build a stored column from a serialized write payload."""
    if isinstance(payload, str):
        return RecordColumn(id=column_id, text=payload, value=json.dumps(payload))
    column = RecordColumn(id=column_id, value=json.dumps(payload))
    if isinstance(payload, dict):
        if "date" in payload:
            column.date = payload.get("date")
            column.time = payload.get("time")
            column.text = " ".join(filter(None, [payload.get("date"), payload.get("time")]))
        if "index" in payload:
            column.index = payload.get("index")
    return column


class InMemoryStore:
    """Store implementation backed by in-process board data.

    Items listed in ``failing_items`` make update and delete mutations
    answer with an ``errors`` array.
    """

    def __init__(self, boards: list[Board] | None = None, current_user_id: str | None = None):
        self.current_user_id = current_user_id
        self.boards: dict[str, Board] = {}
        self.records: dict[str, list[StoreRecord]] = {}
        self.calls: list[QueryExpression | MutationExpression] = []
        self.failing_items: set[str] = set()
        self._cursors: dict[str, tuple[list[StoreRecord], int]] = {}
        self._cursor_ids = itertools.count(1)
        self._item_ids = itertools.count(1000)
        for board in boards or []:
            self.add_board(board)

    def add_board(self, board: Board, records: list[StoreRecord] | None = None) -> None:
        self.boards[board.id] = board
        self.records.setdefault(board.id, [])
        for record in records or []:
            self.add_record(board.id, record)

    def add_record(self, board_id: str, record: StoreRecord) -> StoreRecord:
        record = record.model_copy(update={"board_id": board_id})
        self.records.setdefault(board_id, []).append(record)
        return record

    def find_record(self, item_id: str) -> StoreRecord | None:
        for records in self.records.values():
            for record in records:
                if record.id == str(item_id):
                    return record
        return None

    def calls_of(self, expression_type: type) -> list:
        """Recorded calls of one expression type."""
        return [call for call in self.calls if isinstance(call, expression_type)]

    @classmethod
    def from_snapshot(cls, path: Path) -> "InMemoryStore":
        """Load boards and items from a JSON snapshot file.

        Format: ``{"boards": [{"id", "name", "columns": [...], "items": [...]}]}``.
        A missing file yields an empty store.
        """
        store = cls()
        if not path.exists():
            logger.warning(f"Store snapshot does not exist: {path}")
            return store
        data = json.loads(path.read_text(encoding="utf-8"))
        for board_data in data.get("boards", []):
            items = board_data.pop("items", [])
            board = Board.model_validate(board_data)
            store.add_board(board, [StoreRecord.model_validate(item) for item in items])
        logger.info(f"Loaded store snapshot with {len(store.boards)} boards from {path}")
        return store

    def save_snapshot(self, path: Path) -> None:
        boards = []
        for board_id, board in self.boards.items():
            board_data = board.model_dump(mode="json")
            board_data["items"] = [
                record.model_dump(mode="json", exclude_none=True)
                for record in self.records.get(board_id, [])
            ]
            boards.append(board_data)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"boards": boards}, indent=2, ensure_ascii=False), encoding="utf-8")

    def _page(self, records: list[StoreRecord], offset: int, limit: int) -> dict:
        page = records[offset : offset + limit]
        cursor = None
        if offset + limit < len(records):
            cursor = f"cursor-{next(self._cursor_ids)}"
            self._cursors[cursor] = (records, offset + limit)
        return {
            "cursor": cursor,
            "items": [record.model_dump(mode="json") for record in page],
        }

    async def query(self, expression: QueryExpression) -> StoreResponse:
        self.calls.append(expression)
        match expression:
            case ItemsPageQuery(board_id=board_id, rules=rules, limit=limit):
                if board_id not in self.boards:
                    return StoreResponse(data={"boards": []})
                matching = [
                    record
                    for record in self.records.get(board_id, [])
                    if all(record_matches(record, rule, self.current_user_id) for rule in rules)
                ]
                return StoreResponse(data={"boards": [{"items_page": self._page(matching, 0, limit)}]})

            case NextItemsPageQuery(cursor=cursor, limit=limit):
                if cursor not in self._cursors:
                    return _error("Invalid cursor", "InvalidArgumentException")
                records, offset = self._cursors.pop(cursor)
                return StoreResponse(data={"next_items_page": self._page(records, offset, limit)})

            case BoardsQuery(board_ids=board_ids, include_columns=include_columns):
                exclude = None if include_columns else {"columns"}
                boards = [
                    self.boards[str(board_id)].model_dump(mode="json", exclude=exclude)
                    for board_id in board_ids
                    if str(board_id) in self.boards
                ]
                return StoreResponse(data={"boards": boards})

        raise TypeError(f"Unsupported query expression: {type(expression).__name__}")

    async def mutate(self, expression: MutationExpression) -> StoreResponse:
        self.calls.append(expression)
        match expression:
            case CreateItemMutation(board_id=board_id, item_name=name, column_values=values):
                if board_id not in self.boards:
                    return _error(f"Board {board_id} not found", "InvalidBoardIdException")
                record = StoreRecord(
                    id=str(next(self._item_ids)),
                    name=name,
                    column_values=[column_from_payload(cid, payload) for cid, payload in values.items()],
                )
                record = self.add_record(board_id, record)
                return StoreResponse(data={"create_item": {"id": record.id}})

            case ChangeColumnValuesMutation(item_id=item_id, column_values=values):
                record = self.find_record(item_id)
                if record is None or item_id in self.failing_items:
                    return _error(f"Item {item_id} could not be updated", "ResourceNotFoundException")
                for column_id, payload in values.items():
                    new_column = column_from_payload(column_id, payload)
                    record.column_values = [c for c in record.column_values if c.id != column_id]
                    record.column_values.append(new_column)
                return StoreResponse(data={"change_multiple_column_values": {"id": item_id}})

            case DeleteItemMutation(item_id=item_id):
                if item_id in self.failing_items:
                    return _error(f"Item {item_id} could not be deleted", "InternalServerError")
                for board_id, records in self.records.items():
                    self.records[board_id] = [r for r in records if r.id != item_id]
                return StoreResponse(data={"delete_item": {"id": item_id}})

        raise TypeError(f"Unsupported mutation expression: {type(expression).__name__}")
