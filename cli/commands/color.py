"""Show the deterministic colors assigned to identifiers."""

import typer
from rich.table import Table
from typing_extensions import Annotated

from board_calendar.colors import color_for, contrast_color, hash_identifier
from cli.display import color_swatch, console


def color(
    identifiers: Annotated[
        list[str],
        typer.Argument(help="Project or reporter identifiers"),
    ],
) -> None:
    """Show the color each identifier is drawn with.

    The same identifier always gets the same color.

    Examples:
        board-calendar color 1234567 proj-42
    """
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("HASH", justify="right", style="dim")
    table.add_column("COLOR")
    table.add_column("TEXT", style="dim")

    for identifier in identifiers:
        hex_color = color_for(identifier)
        table.add_row(
            identifier,
            str(hash_identifier(identifier)),
            color_swatch(hex_color),
            contrast_color(hex_color),
        )

    console.print(table)
