"""CLI application and command routing."""

import logging

import typer
from typing_extensions import Annotated

from cli import setup_logging
from cli.commands import color, config, events, holidays, lock, validate
from cli.context import CLIContext, set_context

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="board-calendar",
    help="Calendar view over time-report boards.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show info logging on the console")
    ] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only show errors")] = False,
    board: Annotated[
        str | None, typer.Option("--board", "-b", help="Board the calendar is opened from")
    ] = None,
    user: Annotated[
        str | None, typer.Option("--user", "-u", help="Current user id")
    ] = None,
) -> None:
    """Board calendar command line."""
    ctx = CLIContext(verbose=verbose, quiet=quiet, board_id=board, user_id=user)
    set_context(ctx)
    setup_logging(verbose=verbose, quiet=quiet, config=ctx.config)


app.command()(color)
app.command()(holidays)
app.command()(lock)
app.command()(validate)
app.command()(events)
app.command()(config)
