"""Check whether a report would be editable under an edit lock mode."""

from datetime import datetime, timedelta

import typer
from typing_extensions import Annotated

from board_calendar.models.event import Event
from board_calendar.models.settings import EditLockMode
from board_calendar.processing.edit_lock import is_locked
from cli.context import get_context
from cli.display import console, format_datetime
from cli.utils import parse_datetime


def lock(
    mode: Annotated[EditLockMode, typer.Argument(help="Edit lock mode")],
    start: Annotated[str, typer.Argument(help="Report start (YYYY-MM-DD[THH:MM])")],
    created_at: Annotated[
        str | None,
        typer.Option("--created-at", help="When the report was created (YYYY-MM-DD[THH:MM])"),
    ] = None,
    now: Annotated[
        str | None,
        typer.Option("--now", help="Evaluate at this instant instead of the current time"),
    ] = None,
) -> None:
    """Check whether a report is locked for editing.

    Examples:
        board-calendar lock two_days 2025-03-02T09:00 --created-at 2025-03-01T08:00
        board-calendar lock current_week 2025-03-02 --now 2025-03-05T12:00
    """
    ctx = get_context()
    report_start = parse_datetime(start)
    evaluated_at = parse_datetime(now) if now else datetime.now()

    event = Event(
        id="report",
        title="Report",
        start=report_start,
        end=report_start + timedelta(minutes=ctx.config.default_duration_minutes),
        created_at=parse_datetime(created_at) if created_at else None,
    )
    decision = is_locked(
        event,
        mode,
        evaluated_at,
        week_starts_on=ctx.config.week_starts_on,
        lock_window=timedelta(hours=ctx.config.two_days_lock_hours),
    )

    console.print(f"[dim]Evaluated at {format_datetime(evaluated_at)} with mode {mode.value}[/dim]")
    if decision.locked:
        console.print(f"[red]Locked[/red]: {decision.reason}")
    else:
        console.print("[green]Editable[/green]")
