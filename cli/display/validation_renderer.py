"""Renderer for settings validation results."""

from rich.console import Console
from rich.table import Table

from board_calendar.models.validation import MissingItem, ValidationResult
from cli.display.console import console as shared_console


class ValidationRenderer:
    """Render a ValidationResult as sections of missing items."""

    def __init__(self, console: Console | None = None):
        self.console = console or shared_console

    def render(self, result: ValidationResult) -> None:
        self.console.print()
        if result.is_valid:
            self.console.print("[green]✓ Settings are valid[/green]")
        else:
            self.console.print("[red]✗ Settings are incomplete[/red]")

        self._render_section("Missing settings", result.missing_settings)
        self._render_section("Boards not found", result.missing_boards)
        self._render_section("Columns not found", result.missing_columns)

        if result.errors:
            self.console.print("\n[bold]Errors:[/bold]")
            for error in result.errors:
                self.console.print(f"  [red]•[/red] {error}")
        if result.warnings:
            self.console.print("\n[bold]Warnings:[/bold]")
            for warning in result.warnings:
                self.console.print(f"  [yellow]•[/yellow] {warning}")
        self.console.print()

    def _render_section(self, title: str, items: list[MissingItem]) -> None:
        if not items:
            return
        self.console.print(f"\n[bold]{title}:[/bold]")
        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("KEY", style="cyan", no_wrap=True)
        table.add_column("LABEL")
        table.add_column("ID", style="dim")
        for item in items:
            table.add_row(item.key, item.label or "", item.id or "")
        self.console.print(table)
