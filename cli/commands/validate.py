"""Validate the saved settings against the store snapshot."""

import logging

import typer

from board_calendar.processing.board_resolver import effective_board_id
from board_calendar.processing.settings_validator import SettingsValidator
from cli.context import get_context
from cli.display import ValidationRenderer
from cli.utils import run_async

logger = logging.getLogger(__name__)


def validate() -> None:
    """Check that every configured board and column exists.

    Exits with status 1 when settings are incomplete.
    """
    ctx = get_context()
    settings = ctx.settings
    board_id = effective_board_id(settings, ctx.board_id)

    result = run_async(SettingsValidator(ctx.client).validate(settings, board_id))
    ValidationRenderer().render(result)

    if not result.is_valid:
        raise typer.Exit(1)
