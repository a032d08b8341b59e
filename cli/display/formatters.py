"""Pure formatting functions for display output."""

from datetime import date, datetime


def format_datetime(dt: datetime | date | None) -> str:
    """Format a datetime or date, or "N/A" when missing."""
    if dt is None:
        return "N/A"
    if isinstance(dt, date) and not isinstance(dt, datetime):
        return dt.strftime("%Y-%m-%d")
    return dt.strftime("%Y-%m-%d %H:%M")


def format_duration(minutes: int) -> str:
    """Format minutes as e.g. "1h 30m", "45m" or "2h"."""
    hours, rest = divmod(minutes, 60)
    if hours and rest:
        return f"{hours}h {rest}m"
    if hours:
        return f"{hours}h"
    return f"{rest}m"


def color_swatch(hex_color: str) -> str:
    """Rich markup showing a block of the color followed by its hex value."""
    return f"[{hex_color}]██[/{hex_color}] {hex_color}"
