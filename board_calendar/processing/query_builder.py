"""Retrieval query and filter rule construction."""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable

from board_calendar.models.mapping import FieldMapping, FieldRole
from board_calendar.models.query import FilterOperator, FilterRule, ItemsPageQuery, NextItemsPageQuery
from board_calendar.models.record import StoreRecord
from board_calendar.storage.store_client import StoreClient

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
CURRENT_USER_TOKEN = "assigned_to_me"
SUNDAY = 6


class DateCondition(str, Enum):
    BETWEEN = "between"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass
class FilterSelection:
    """User-selected reporter and project ids."""

    reporter_ids: list[str] = field(default_factory=list)
    project_ids: list[str] = field(default_factory=list)


def _civil(value: date) -> str:
    # datetime is a date subclass; only the civil date is compared
    return date(value.year, value.month, value.day).strftime(DATE_FORMAT)


def date_range_rule(column_id: str, range_start: date, range_end: date) -> FilterRule:
    """Inclusive ``between`` on civil dates."""
    return FilterRule(
        column_id=column_id,
        role=FieldRole.START_DATE,
        operator=FilterOperator.BETWEEN,
        compare_value=[_civil(range_start), _civil(range_end)],
    )


def build_retrieval_query(
    board_id: str,
    range_start: date,
    range_end: date,
    date_column_id: str,
    extra_rules: Iterable[FilterRule] = (),
    page_size: int = 500,
) -> ItemsPageQuery:
    """First-page query for records whose start date is within the range."""
    rules = [date_range_rule(date_column_id, range_start, range_end), *extra_rules]
    return ItemsPageQuery(board_id=str(board_id), rules=rules, limit=page_size)


def _project_values(project_ids: Iterable[str]) -> list[int]:
    values = []
    for project_id in project_ids:
        try:
            values.append(int(project_id))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric project id in filter: {project_id!r}")
    return values


def build_filter_rules(selection: FilterSelection, mapping: FieldMapping) -> list[FilterRule]:
    """Reporter and project predicates for the current selection.

    A predicate is omitted when its selection is empty or its role is
    unmapped.
    """
    rules = []

    reporter_column = mapping.column_for(FieldRole.REPORTER)
    if selection.reporter_ids and reporter_column:
        rules.append(
            FilterRule(
                column_id=reporter_column,
                role=FieldRole.REPORTER,
                operator=FilterOperator.ANY_OF,
                compare_value=[f"person-{rid}" for rid in selection.reporter_ids],
            )
        )

    project_column = mapping.column_for(FieldRole.PROJECT)
    if selection.project_ids and project_column:
        values = _project_values(selection.project_ids)
        if values:
            rules.append(
                FilterRule(
                    column_id=project_column,
                    role=FieldRole.PROJECT,
                    operator=FilterOperator.ANY_OF,
                    compare_value=values,
                )
            )
    return rules


def current_user_rule(mapping: FieldMapping) -> FilterRule | None:
    """Default reporter predicate limiting results to the current user."""
    reporter_column = mapping.column_for(FieldRole.REPORTER)
    if not reporter_column:
        return None
    return FilterRule(
        column_id=reporter_column,
        role=FieldRole.REPORTER,
        operator=FilterOperator.ANY_OF,
        compare_value=[CURRENT_USER_TOKEN],
    )


def _week_bounds(anchor: date, week_starts_on: int) -> tuple[date, date]:
    offset = (anchor.weekday() - week_starts_on) % 7
    start = anchor - timedelta(days=offset)
    return start, start + timedelta(days=6)


def effective_date_range(
    condition: DateCondition | str,
    date_from: date,
    date_to: date | None = None,
    week_starts_on: int = SUNDAY,
) -> tuple[date, date]:
    """Concrete date range for a period condition anchored at ``date_from``."""
    match DateCondition(condition):
        case DateCondition.WEEK:
            return _week_bounds(date_from, week_starts_on)
        case DateCondition.MONTH:
            last_day = calendar.monthrange(date_from.year, date_from.month)[1]
            return date_from.replace(day=1), date_from.replace(day=last_day)
        case DateCondition.YEAR:
            return date(date_from.year, 1, 1), date(date_from.year, 12, 31)
        case _:
            return date_from, date_to or date_from


def build_date_filter_rule(
    condition: DateCondition | str,
    column_id: str,
    date_from: date,
    date_to: date | None = None,
    week_starts_on: int = SUNDAY,
) -> FilterRule:
    """Date predicate for a between/week/month/year condition."""
    start, end = effective_date_range(condition, date_from, date_to, week_starts_on)
    return date_range_rule(column_id, start, end)


async def fetch_all_records(client: StoreClient, query: ItemsPageQuery) -> list[StoreRecord]:
    """Fetch every page of a query, following the cursor until exhausted.

    Pages are concatenated in arrival order.
    """
    records, cursor = await client.fetch_items_page(query)
    pages = 1
    while cursor:
        page, cursor = await client.fetch_items_page(
            NextItemsPageQuery(cursor=cursor, limit=query.limit)
        )
        records.extend(page)
        pages += 1
    logger.info(f"Fetched {len(records)} records from board {query.board_id} in {pages} page(s)")
    return records
