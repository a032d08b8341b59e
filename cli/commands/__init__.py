"""CLI commands package."""

from cli.commands.color import color
from cli.commands.config import config
from cli.commands.events import events
from cli.commands.holidays import holidays
from cli.commands.lock import lock
from cli.commands.validate import validate

__all__ = [
    "color",
    "config",
    "events",
    "holidays",
    "lock",
    "validate",
]
