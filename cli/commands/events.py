"""Load and display calendar events for a date range."""

import logging

import typer
from typing_extensions import Annotated

from board_calendar.processing.filter_engine import CalendarFilterEngine
from board_calendar.processing.sync_session import SyncSession
from cli.context import get_context
from cli.display import RichEventRenderer, ValidationRenderer, console
from cli.utils import parse_date, run_async

logger = logging.getLogger(__name__)


def events(
    start: Annotated[str, typer.Argument(help="First day (YYYY-MM-DD)")],
    end: Annotated[str, typer.Argument(help="Last day, inclusive (YYYY-MM-DD)")],
    reporters: Annotated[
        list[str] | None,
        typer.Option("--reporter", "-r", help="Only reports by this person (repeatable)"),
    ] = None,
    projects: Annotated[
        list[str] | None,
        typer.Option("--project", "-p", help="Only reports on this project (repeatable)"),
    ] = None,
    everyone: Annotated[
        bool,
        typer.Option("--everyone", help="Do not default to the current user's reports"),
    ] = False,
    show_holidays: Annotated[
        bool,
        typer.Option("--holidays/--no-holidays", help="Overlay holidays"),
    ] = True,
) -> None:
    """Display reported events between two dates.

    Without --reporter, only the current user's reports are shown
    (pass --user on the main command, or --everyone).

    Examples:
        board-calendar --board 111 --user 42 events 2025-03-01 2025-03-31
        board-calendar --board 111 events 2025-03-01 2025-03-07 -r 42 -p 501
    """
    ctx = get_context()
    start_date, end_date = parse_date(start), parse_date(end)
    if end_date < start_date:
        raise typer.BadParameter("END must not be before START")

    filters = CalendarFilterEngine(default_to_current_user=not everyone)
    filters.select_reporters(reporters or [])
    filters.select_projects(projects or [])

    session = SyncSession(
        ctx.client,
        ctx.settings,
        config=ctx.config,
        holidays=ctx.holidays if show_holidays else None,
        context_board_id=ctx.board_id,
        filter_engine=filters,
    )
    result = run_async(session.run(start_date, end_date))

    if not result.validation.is_valid:
        ValidationRenderer().render(result.validation)
        raise typer.Exit(1)

    RichEventRenderer().render_agenda(
        result.all_events,
        title=f"Board {result.board_id}",
        subtitle=f"{start_date} to {end_date}",
    )
    if result.skipped:
        console.print(f"[dim]{result.skipped} records without a start date were skipped[/dim]")
