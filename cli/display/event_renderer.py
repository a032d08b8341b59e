"""Rich-based event renderer for terminal display."""

from collections import defaultdict
from datetime import date

from rich.console import Console
from rich.text import Text

from board_calendar.models.event import Event
from cli.display.console import console as shared_console
from cli.display.formatters import format_duration


class RichEventRenderer:
    """Render calendar events grouped by day.

    Each event line shows its color, time range, title and duration.
    Holidays are dim and marked read-only.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or shared_console

    def render_agenda(
        self,
        events: list[Event],
        title: str | None = None,
        subtitle: str | None = None,
    ) -> None:
        """Render events grouped by their start day."""
        if not events:
            self.render_empty()
            return

        self._print_header(title, subtitle)

        by_date: dict[date, list[Event]] = defaultdict(list)
        for event in events:
            by_date[event.start.date()].append(event)

        for event_date in sorted(by_date):
            self.console.print(f"\n[cyan]{event_date.strftime('%a %b %d, %Y')}[/cyan]")
            for event in sorted(by_date[event_date], key=lambda e: (not e.all_day, e.start)):
                self._render_agenda_event(event)

        self._print_footer(len(events))

    def render_empty(self, message: str | None = None) -> None:
        msg = message or "No events found"
        self.console.print(f"\n[dim]{msg}[/dim]\n")

    def _print_header(self, title: str | None, subtitle: str | None) -> None:
        self.console.print()
        self.console.print("━" * 40)
        if title:
            header_text = f"  {title}"
            if subtitle:
                header_text += f" [dim]({subtitle})[/dim]"
            self.console.print(f"[bold]{header_text}[/bold]")
        self.console.print("━" * 40)

    def _print_footer(self, count: int) -> None:
        self.console.print()
        self.console.print("─" * 40)
        event_word = "event" if count == 1 else "events"
        self.console.print(f"[dim]{count} {event_word}[/dim]")
        self.console.print()

    def _format_time_range(self, event: Event) -> str:
        if event.all_day:
            return "All day"
        return f"{event.start.strftime('%H:%M')}–{event.end.strftime('%H:%M')}"

    def _render_agenda_event(self, event: Event) -> None:
        line = Text()
        line.append("  ")
        line.append("● ", style=event.color or "white")
        line.append(f"{self._format_time_range(event):<14}", style="dim")
        line.append(event.title, style="dim" if event.is_holiday else None)

        if event.is_holiday:
            line.append(" (holiday)", style="dim italic")
        elif not event.all_day:
            line.append(f" {format_duration(event.duration_minutes)}", style="dim")
        if event.event_type_key:
            line.append(f" [{event.event_type_key}]", style="dim")

        self.console.print(line)
