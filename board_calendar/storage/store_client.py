"""Store access boundary.

Every store call goes through ``StoreClient``, which times and logs the
call and turns both transport exceptions and non-empty ``errors`` arrays
into a single ``StoreError``.
"""

import logging
import time
from typing import Any, Protocol

from pydantic import ValidationError

from board_calendar.exceptions import StoreError
from board_calendar.models.query import (
    BoardsQuery,
    ChangeColumnValuesMutation,
    CreateItemMutation,
    DeleteItemMutation,
    ItemsPageQuery,
    MutationExpression,
    NextItemsPageQuery,
    QueryExpression,
    StoreResponse,
)
from board_calendar.models.record import Board, BoardColumn, StoreRecord

logger = logging.getLogger(__name__)


class Store(Protocol):
    """Opaque query/mutate capability of the remote store."""

    async def query(self, expression: QueryExpression) -> StoreResponse | dict:
        """Run a read-only query."""
        ...

    async def mutate(self, expression: MutationExpression) -> StoreResponse | dict:
        """Run a create/update/delete mutation."""
        ...


def _error_details(error: Any) -> tuple[str, str | None]:
    """Message and code of one ``errors`` entry, whatever its shape."""
    if not isinstance(error, dict):
        return str(error) or "Unknown error", None
    message = error.get("message")
    extensions = error.get("extensions")
    code = extensions.get("code") if isinstance(extensions, dict) else None
    return (str(message) if message else "Unknown error"), (str(code) if code else None)


def _malformed(function_name: str, expression: Any, error: Exception) -> StoreError:
    logger.error(f"{function_name} returned a malformed response: {error}")
    return StoreError("Malformed store response", request=expression, function_name=function_name)


class StoreClient:
    """Wraps a Store with timing, logging and error normalization."""

    def __init__(self, store: Store):
        self.store = store

    async def _call(self, function_name: str, expression: Any, operation) -> dict:
        started = time.monotonic()
        try:
            raw = await operation(expression)
        except StoreError:
            raise
        except Exception as e:
            duration_ms = (time.monotonic() - started) * 1000
            logger.error(f"{function_name} failed after {duration_ms:.0f}ms: {e}")
            raise StoreError(
                str(e) or "Unknown error",
                request=expression,
                error_code=getattr(e, "error_code", None),
                status_code=getattr(e, "status_code", None),
                function_name=function_name,
                duration_ms=duration_ms,
            ) from e

        duration_ms = (time.monotonic() - started) * 1000
        try:
            response = raw if isinstance(raw, StoreResponse) else StoreResponse.model_validate(raw)
        except ValidationError as e:
            logger.error(f"{function_name} returned a malformed response: {e}")
            raise StoreError(
                "Malformed store response",
                request=expression,
                function_name=function_name,
                duration_ms=duration_ms,
            ) from e
        logger.debug(f"{function_name} completed in {duration_ms:.0f}ms")

        if response.has_errors:
            message, error_code = _error_details(response.first_error)
            logger.error(f"{function_name} returned errors: {message}")
            raise StoreError(
                message,
                request=expression,
                error_code=error_code,
                function_name=function_name,
                duration_ms=duration_ms,
                response=response.model_dump(),
            )
        return response.data or {}

    async def query(self, expression: QueryExpression, function_name: str = "query") -> dict:
        return await self._call(function_name, expression, self.store.query)

    async def mutate(self, expression: MutationExpression, function_name: str = "mutate") -> dict:
        return await self._call(function_name, expression, self.store.mutate)

    async def fetch_items_page(
        self, expression: ItemsPageQuery | NextItemsPageQuery
    ) -> tuple[list[StoreRecord], str | None]:
        """Fetch one page of records and the cursor of the next page."""
        data = await self.query(expression, function_name="fetchItemsPage")
        try:
            if isinstance(expression, NextItemsPageQuery):
                page = data.get("next_items_page") or {}
            else:
                boards = data.get("boards") or []
                page = (boards[0].get("items_page") if boards else None) or {}
            items, cursor = page.get("items") or [], page.get("cursor")
        except (AttributeError, IndexError, TypeError) as e:
            raise _malformed("fetchItemsPage", expression, e) from e

        records = []
        for item in items:
            try:
                records.append(StoreRecord.model_validate(item))
            except ValueError as e:
                logger.warning(f"Skipping malformed store item: {e}")
        return records, cursor

    async def fetch_boards(self, board_ids: list[str], include_columns: bool = True) -> list[Board]:
        """Fetch existing boards; unknown ids are simply absent."""
        expression = BoardsQuery(board_ids=board_ids, include_columns=include_columns)
        data = await self.query(expression, function_name="fetchBoards")
        try:
            return [Board.model_validate(board) for board in data.get("boards") or []]
        except (ValidationError, TypeError) as e:
            raise _malformed("fetchBoards", expression, e) from e

    async def fetch_board_columns(self, board_id: str) -> list[BoardColumn] | None:
        """Columns of a board, or None when the board does not exist."""
        boards = await self.fetch_boards([board_id])
        for board in boards:
            if board.id == str(board_id):
                return board.columns
        return None

    async def create_item(self, board_id: str, item_name: str, column_values: dict) -> str | None:
        logger.info(f"Creating item '{item_name}' on board {board_id}")
        expression = CreateItemMutation(board_id=board_id, item_name=item_name, column_values=column_values)
        data = await self.mutate(expression, function_name="createItem")
        created = data.get("create_item") or {}
        if not isinstance(created, dict):
            raise _malformed("createItem", expression, TypeError(f"unexpected create_item {created!r}"))
        item_id = created.get("id")
        return str(item_id) if item_id is not None else None

    async def update_item_column_values(self, board_id: str, item_id: str, column_values: dict) -> None:
        logger.info(f"Updating item {item_id} on board {board_id}")
        await self.mutate(
            ChangeColumnValuesMutation(board_id=board_id, item_id=item_id, column_values=column_values),
            function_name="updateItemColumnValues",
        )

    async def delete_item(self, item_id: str) -> None:
        logger.info(f"Deleting item {item_id}")
        await self.mutate(DeleteItemMutation(item_id=item_id), function_name="deleteItem")
