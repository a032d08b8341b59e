"""CLI helpers for argument parsing and running coroutines."""

import asyncio
import logging
from datetime import date, datetime

import typer

logger = logging.getLogger(__name__)


def parse_date(date_str: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Raises:
        typer.BadParameter: If the date format is invalid.
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"Invalid date format: {date_str}. Use YYYY-MM-DD.")


def parse_datetime(value: str) -> datetime:
    """Parse an ISO date or datetime (YYYY-MM-DD or YYYY-MM-DDTHH:MM)."""
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date/time: {value}. Use YYYY-MM-DD[THH:MM].")


def run_async(coro):
    """Run a coroutine to completion from synchronous command code."""
    return asyncio.run(coro)
