"""Tests for the store access boundary and error normalization."""

import pytest

from board_calendar.exceptions import (
    ERROR_CATALOG,
    UNKNOWN_ERROR,
    StoreError,
    classify_error_code,
    extract_operation_name,
)
from board_calendar.models.query import CreateItemMutation, DeleteItemMutation, ItemsPageQuery
from board_calendar.storage.store_client import StoreClient


class HTTPFailure(Exception):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


class RaisingStore:
    """Store whose every call raises."""

    def __init__(self, exc):
        self.exc = exc

    async def query(self, expression):
        raise self.exc

    async def mutate(self, expression):
        raise self.exc


class ErrorStore:
    """Store whose every call answers with an errors array."""

    async def query(self, expression):
        return {"data": None, "errors": [{"message": "Budget gone", "extensions": {"code": "ComplexityBudgetExhausted"}}]}

    async def mutate(self, expression):
        return {"errors": [{"message": "User unauthorized to perform action", "extensions": {"code": "USER_UNAUTHORIZED"}}]}


async def test_transport_exception_is_wrapped():
    client = StoreClient(RaisingStore(HTTPFailure("Too many requests", 429)))
    with pytest.raises(StoreError) as exc_info:
        await client.fetch_boards(["111"])

    error = exc_info.value
    assert error.status_code == 429
    assert error.error_code == "Rate Limit Exceeded"
    assert error.can_retry is True
    assert error.function_name == "fetchBoards"
    assert error.duration_ms is not None
    assert isinstance(error.__cause__, HTTPFailure)


async def test_errors_array_becomes_store_error():
    client = StoreClient(ErrorStore())
    with pytest.raises(StoreError) as exc_info:
        await client.fetch_board_columns("111")
    assert exc_info.value.error_code == "ComplexityBudgetExhausted"
    assert exc_info.value.can_retry is True

    with pytest.raises(StoreError) as exc_info:
        await client.delete_item("5")
    error = exc_info.value
    assert error.error_code == "USER_UNAUTHORIZED"
    assert error.can_retry is False
    assert error.user_message == ERROR_CATALOG["USER_UNAUTHORIZED"][0]
    assert error.response["errors"][0]["message"] == "User unauthorized to perform action"


async def test_store_error_to_dict():
    client = StoreClient(ErrorStore())
    with pytest.raises(StoreError) as exc_info:
        await client.delete_item("5")

    report = exc_info.value.to_dict()
    assert set(report) == {"error", "apiRequest", "request"}
    assert report["error"]["errorCode"] == "USER_UNAUTHORIZED"
    assert report["error"]["canRetry"] is False
    assert report["apiRequest"]["request"] == {"item_id": "5"}
    assert report["apiRequest"]["operationName"] == "delete_item"
    assert report["request"]["functionName"] == "deleteItem"


def test_classify_error_code_precedence():
    assert classify_error_code("ParseError", 500) == "ParseError"
    assert classify_error_code(None, 404) == "ResourceNotFoundException"
    assert classify_error_code(None, None, "hit ComplexityBudgetExhausted again") == "ComplexityBudgetExhausted"
    assert classify_error_code(None, 418, "teapot") == UNKNOWN_ERROR


def test_unknown_error_is_retryable_with_raw_message():
    error = StoreError("Something odd")
    assert error.error_code == UNKNOWN_ERROR
    assert error.can_retry is True
    assert error.user_message == "Something odd"
    assert error.action_required is None


def test_extract_operation_name():
    assert extract_operation_name("mutation DeleteThing { x }") == "DeleteThing"
    assert extract_operation_name("query Boards { boards { id } }") == "Boards"
    assert extract_operation_name("delete_item(item_id: 1)") == "delete_item"
    assert extract_operation_name(None) is None


async def test_fetch_board_columns(client):
    columns = await client.fetch_board_columns("222")
    assert [c.id for c in columns] == ["name"]
    assert await client.fetch_board_columns("999") is None


async def test_create_update_delete(store, client):
    item_id = await client.create_item("111", "Report", {"text": "hello", "status": {"index": 2}})
    assert item_id is not None
    record = store.find_record(item_id)
    assert record.name == "Report"
    assert record.column("status").index == 2

    await client.update_item_column_values("111", item_id, {"text": "bye"})
    assert store.find_record(item_id).column("text").text == "bye"

    await client.delete_item(item_id)
    assert store.find_record(item_id) is None
    assert [type(c) for c in store.calls][0] is CreateItemMutation
    assert isinstance(store.calls[-1], DeleteItemMutation)


async def test_failing_update_raises(store, client, make_record):
    store.add_record("111", make_record("7"))
    store.failing_items = {"7"}
    with pytest.raises(StoreError) as exc_info:
        await client.update_item_column_values("111", "7", {"text": "x"})
    assert exc_info.value.error_code == "ResourceNotFoundException"


class CannedStore:
    """Store answering every call with a fixed reply."""

    def __init__(self, reply):
        self.reply = reply

    async def query(self, expression):
        return self.reply

    async def mutate(self, expression):
        return self.reply


@pytest.mark.parametrize(
    "reply",
    [
        None,
        "not json",
        {"data": ["boards"]},
        {"errors": "Budget gone"},
    ],
)
async def test_malformed_reply_becomes_store_error(reply):
    client = StoreClient(CannedStore(reply))
    with pytest.raises(StoreError) as exc_info:
        await client.delete_item("5")
    assert exc_info.value.function_name == "deleteItem"
    assert exc_info.value.request == DeleteItemMutation(item_id="5")


async def test_errors_entries_of_any_shape_become_store_error():
    client = StoreClient(CannedStore({"errors": ["Complexity budget exhausted"]}))
    with pytest.raises(StoreError) as exc_info:
        await client.delete_item("5")
    assert exc_info.value.message == "Complexity budget exhausted"

    client = StoreClient(CannedStore({"errors": [{"message": "x", "extensions": "bad"}]}))
    with pytest.raises(StoreError) as exc_info:
        await client.delete_item("5")
    assert exc_info.value.message == "x"


@pytest.mark.parametrize(
    "data",
    [
        {"boards": ["111"]},
        {"boards": [{"id": "111", "columns": "none"}]},
        {"boards": {"id": "111"}},
    ],
)
async def test_malformed_boards_become_store_error(data):
    client = StoreClient(CannedStore({"data": data}))
    with pytest.raises(StoreError):
        await client.fetch_boards(["111"])


async def test_malformed_items_page_becomes_store_error():
    client = StoreClient(CannedStore({"data": {"boards": [{"items_page": ["1"]}]}}))
    with pytest.raises(StoreError):
        await client.fetch_items_page(ItemsPageQuery(board_id="111"))


async def test_malformed_create_reply_becomes_store_error():
    client = StoreClient(CannedStore({"data": {"create_item": "42"}}))
    with pytest.raises(StoreError):
        await client.create_item("111", "Report", {})
