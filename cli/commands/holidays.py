"""List holidays overlaid on the calendar for a date range."""

import typer
from typing_extensions import Annotated

from cli.context import get_context
from cli.display import RichEventRenderer
from cli.utils import parse_date


def holidays(
    start: Annotated[str, typer.Argument(help="First day (YYYY-MM-DD)")],
    end: Annotated[str, typer.Argument(help="Last day, inclusive (YYYY-MM-DD)")],
) -> None:
    """List holidays between two dates.

    Holidays are read from the ICS feed at HOLIDAY_CALENDAR_PATH, or
    computed from the Hebrew calendar when no feed is configured.

    Examples:
        board-calendar holidays 2025-09-01 2025-10-31
    """
    ctx = get_context()
    start_date, end_date = parse_date(start), parse_date(end)

    RichEventRenderer().render_agenda(
        ctx.holidays.holidays_between(start_date, end_date),
        title="Holidays",
        subtitle=f"{start_date} to {end_date}",
    )
