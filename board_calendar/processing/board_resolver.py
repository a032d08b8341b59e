"""Effective reporting board resolution."""

from board_calendar.models.settings import CalendarSettings


def effective_board_id(settings: CalendarSettings, context_board_id: str | None) -> str | None:
    """Board that holds the time reports.

    The host board wins when the settings ask for it; otherwise the
    configured reporting board, falling back to the host board.
    """
    if settings.use_current_board_for_reporting and context_board_id:
        return str(context_board_id)
    if settings.time_reporting_board_id:
        return settings.time_reporting_board_id
    return str(context_board_id) if context_board_id else None


def has_reporting_board(settings: CalendarSettings, context_board_id: str | None) -> bool:
    return effective_board_id(settings, context_board_id) is not None
