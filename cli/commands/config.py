"""Display configuration file path, engine configuration and saved settings."""

import os
from pathlib import Path

from rich.table import Table

from board_calendar.config import EngineConfig
from cli.context import get_context
from cli.display import console

ENV_KEYS = {
    "undo_grace_ms": "UNDO_GRACE_MS",
    "delete_batch_size": "DELETE_BATCH_SIZE",
    "page_size": "PAGE_SIZE",
    "default_duration_minutes": "DEFAULT_DURATION_MINUTES",
    "two_days_lock_hours": "TWO_DAYS_LOCK_HOURS",
    "week_starts_on": "WEEK_STARTS_ON",
    "holiday_calendar_path": "HOLIDAY_CALENDAR_PATH",
    "settings_path": "SETTINGS_PATH",
    "snapshot_path": "STORE_SNAPSHOT_PATH",
    "log_dir": "LOG_DIR",
    "log_filename": "LOG_FILENAME",
}

SECTIONS = {
    "Undoable Delete": ["undo_grace_ms", "delete_batch_size"],
    "Retrieval": ["page_size", "default_duration_minutes"],
    "Edit Lock": ["two_days_lock_hours", "week_starts_on"],
    "Paths": ["holiday_calendar_path", "settings_path", "snapshot_path", "log_dir", "log_filename"],
}


def _find_env_file() -> Path | None:
    """Find .env file by searching current directory and parent directories."""
    current = Path.cwd()
    for path in [current] + list(current.parents):
        env_file = path / ".env"
        if env_file.exists():
            return env_file.resolve()
    return None


def _get_source(field: str, value, default_value) -> str:
    if ENV_KEYS[field] in os.environ or value != default_value:
        return "env"
    return "default"


def _create_table() -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("SETTING", style="cyan", min_width=24, no_wrap=True)
    table.add_column("SOURCE", style="dim", min_width=7, no_wrap=True)
    table.add_column("VALUE")
    return table


def config() -> None:
    """Display engine configuration and the saved calendar settings."""
    ctx = get_context()
    env_file = _find_env_file()
    default_config = EngineConfig()
    cfg = ctx.config

    console.print()
    console.print("━" * 50)
    console.print("[bold]  Configuration[/bold]")
    console.print("━" * 50)

    console.print("\n[bold]Config File:[/bold]")
    if env_file:
        console.print(f"  [cyan]{env_file}[/cyan]")
    else:
        console.print("  [dim]Not found (using defaults and environment variables)[/dim]")

    for section_name, fields in SECTIONS.items():
        console.print(f"\n[bold]{section_name}:[/bold]")
        table = _create_table()
        for field in fields:
            value = getattr(cfg, field)
            display = "[dim]None[/dim]" if value is None else str(value)
            table.add_row(field, _get_source(field, value, getattr(default_config, field)), display)
        console.print(table)

    console.print("\n[bold]Calendar Settings:[/bold]")
    saved = ctx.settings.model_dump(mode="json", by_alias=True, exclude_defaults=True)
    if not saved:
        console.print("  [dim]No saved settings (using defaults)[/dim]")
    else:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Value")
        for key, value in saved.items():
            table.add_row(key, str(value))
        console.print(table)

    console.print()
