"""Store query and mutation expressions.

Expressions are plain data; ``to_graphql()`` renders the store-native
query text. Stores may evaluate the models directly (see
``storage.memory_store``) or send the rendered text.
"""

import json
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field

from board_calendar.models.mapping import FieldRole

# Fields requested for every item
ITEM_FIELDS = """
      id
      name
      created_at
      column_values {
        id
        type
        text
        value
        ... on DateValue { date time }
        ... on StatusValue { index label }
        ... on BoardRelationValue { linked_items { id name } }
      }"""


def _literal(value: Any) -> str:
    """Render a Python value as a GraphQL literal."""
    return json.dumps(value, ensure_ascii=False)


def _id_literal(value: str) -> str:
    """Numeric ids render bare, anything else quoted."""
    return value if str(value).isdigit() else _literal(str(value))


class FilterOperator(str, Enum):
    ANY_OF = "any_of"
    BETWEEN = "between"


class FilterRule(BaseModel):
    """One predicate of a retrieval query."""

    column_id: str
    operator: FilterOperator
    compare_value: list[Any]
    role: FieldRole | None = None

    class Config:
        frozen = True

    def to_graphql(self) -> str:
        values = ", ".join(_literal(v) for v in self.compare_value)
        return (
            f"{{column_id: {_literal(self.column_id)}, "
            f"compare_value: [{values}], operator: {self.operator.value}}}"
        )


class ItemsPageQuery(BaseModel):
    """First page of a board's items, filtered by rules."""

    board_id: str
    rules: list[FilterRule] = Field(default_factory=list)
    limit: int = Field(default=500, ge=1)

    def to_graphql(self) -> str:
        rules = ", ".join(rule.to_graphql() for rule in self.rules)
        return (
            "query {\n"
            f"  boards(ids: [{_id_literal(self.board_id)}]) {{\n"
            f"    items_page(limit: {self.limit}, query_params: {{rules: [{rules}]}}) {{\n"
            "      cursor\n"
            f"      items {{{ITEM_FIELDS}\n      }}\n"
            "    }\n"
            "  }\n"
            "}"
        )


class NextItemsPageQuery(BaseModel):
    """Follow-up page addressed by a cursor."""

    cursor: str
    limit: int = Field(default=500, ge=1)

    def to_graphql(self) -> str:
        return (
            "query {\n"
            f"  next_items_page(cursor: {_literal(self.cursor)}, limit: {self.limit}) {{\n"
            "    cursor\n"
            f"    items {{{ITEM_FIELDS}\n    }}\n"
            "  }\n"
            "}"
        )


class BoardsQuery(BaseModel):
    """Board existence and column schema probe."""

    board_ids: list[str]
    include_columns: bool = True

    def to_graphql(self) -> str:
        ids = ", ".join(_id_literal(b) for b in self.board_ids)
        columns = "\n    columns { id title type }" if self.include_columns else ""
        return f"query {{\n  boards(ids: [{ids}]) {{\n    id\n    name{columns}\n  }}\n}}"


class CreateItemMutation(BaseModel):
    board_id: str
    item_name: str
    column_values: dict[str, Any] = Field(default_factory=dict)

    def to_graphql(self) -> str:
        return (
            "mutation {\n"
            f"  create_item(board_id: {_id_literal(self.board_id)}, "
            f"item_name: {_literal(self.item_name)}, "
            f"column_values: {_literal(json.dumps(self.column_values, ensure_ascii=False))}) {{\n"
            "    id\n"
            "  }\n"
            "}"
        )


class ChangeColumnValuesMutation(BaseModel):
    board_id: str
    item_id: str
    column_values: dict[str, Any]

    def to_graphql(self) -> str:
        return (
            "mutation {\n"
            f"  change_multiple_column_values(board_id: {_id_literal(self.board_id)}, "
            f"item_id: {_id_literal(self.item_id)}, "
            f"column_values: {_literal(json.dumps(self.column_values, ensure_ascii=False))}) {{\n"
            "    id\n"
            "  }\n"
            "}"
        )


class DeleteItemMutation(BaseModel):
    item_id: str

    def to_graphql(self) -> str:
        return f"mutation {{\n  delete_item(item_id: {_id_literal(self.item_id)}) {{\n    id\n  }}\n}}"


QueryExpression = Union[ItemsPageQuery, NextItemsPageQuery, BoardsQuery]
MutationExpression = Union[CreateItemMutation, ChangeColumnValuesMutation, DeleteItemMutation]


class StoreResponse(BaseModel):
    """Store reply: data, or a non-empty errors array, or both."""

    data: dict | None = None
    errors: list[Any] | None = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def first_error(self) -> Any:
        return self.errors[0] if self.errors else {}
