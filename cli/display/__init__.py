"""Display module for rendering calendar output.

This module provides:
- console: Shared Rich console instance
- RichEventRenderer: Agenda view of events and holidays
- ValidationRenderer: Settings validation findings
- Formatting functions for dates, durations and colors
"""

from cli.display.console import console
from cli.display.event_renderer import RichEventRenderer
from cli.display.formatters import color_swatch, format_datetime, format_duration
from cli.display.validation_renderer import ValidationRenderer

__all__ = [
    # Console
    "console",
    # Renderers
    "RichEventRenderer",
    "ValidationRenderer",
    # Formatters
    "color_swatch",
    "format_datetime",
    "format_duration",
]
