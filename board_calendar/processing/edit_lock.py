"""Time-window edit locking for reported events.

The lock is advisory: the write path does not enforce it, so the code
that owns write access must consult ``is_locked`` before every mutation.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from board_calendar.models.event import ApprovalState, Event
from board_calendar.models.settings import EditLockMode

logger = logging.getLogger(__name__)

TWO_DAYS = timedelta(hours=48)
SUNDAY = 6

LOCK_REASONS = {
    EditLockMode.TWO_DAYS: "Report is locked: more than two days have passed since it was created",
    EditLockMode.CURRENT_WEEK: "Report is locked: only reports from the current week can be edited",
    EditLockMode.CURRENT_MONTH: "Report is locked: only reports from the current month can be edited",
}
APPROVED_REASON = "Report is locked: it was approved by a manager"


@dataclass(frozen=True)
class LockDecision:
    locked: bool
    reason: str = ""


UNLOCKED = LockDecision(locked=False)


def _align(value: datetime, reference: datetime) -> datetime:
    """Drop or keep tzinfo so the two datetimes are comparable."""
    if (value.tzinfo is None) == (reference.tzinfo is None):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value.astimezone(reference.tzinfo) if reference.tzinfo else value.replace(tzinfo=None)


def week_bounds(now: datetime, week_starts_on: int = SUNDAY) -> tuple[datetime, datetime]:
    """First and last instant of the civil week containing ``now``."""
    offset = (now.weekday() - week_starts_on) % 7
    start = datetime.combine(now.date() - timedelta(days=offset), time(0, 0), tzinfo=now.tzinfo)
    end = start + timedelta(days=7) - timedelta(microseconds=1)
    return start, end


def _parse_mode(lock_mode: EditLockMode | str | None) -> EditLockMode:
    try:
        return EditLockMode(lock_mode)
    except ValueError:
        if lock_mode:
            logger.warning(f"Unknown edit lock mode {lock_mode!r}, treating as none")
        return EditLockMode.NONE


def is_locked(
    event: Event,
    lock_mode: EditLockMode | str | None,
    now: datetime,
    week_starts_on: int = SUNDAY,
    lock_window: timedelta = TWO_DAYS,
) -> LockDecision:
    """Whether an event may currently be mutated.

    Missing attributes never lock: an event without ``created_at`` is
    unlocked under two_days, one without ``start`` under the calendar
    modes. Unknown modes behave as none.
    """
    mode = _parse_mode(lock_mode)

    if mode == EditLockMode.TWO_DAYS:
        created_at = getattr(event, "created_at", None)
        if created_at is None:
            return UNLOCKED
        if now - _align(created_at, now) > lock_window:
            return LockDecision(locked=True, reason=LOCK_REASONS[mode])
        return UNLOCKED

    start = getattr(event, "start", None)
    if start is None:
        return UNLOCKED
    start = _align(start, now)

    if mode == EditLockMode.CURRENT_WEEK:
        week_start, week_end = week_bounds(now, week_starts_on)
        if start < week_start or start > week_end:
            return LockDecision(locked=True, reason=LOCK_REASONS[mode])
        return UNLOCKED

    if mode == EditLockMode.CURRENT_MONTH:
        if (start.year, start.month) != (now.year, now.month):
            return LockDecision(locked=True, reason=LOCK_REASONS[mode])
        return UNLOCKED

    return UNLOCKED


def is_locked_for(
    event: Event,
    lock_mode: EditLockMode | str | None,
    now: datetime,
    approval_enabled: bool = False,
    is_manager: bool = False,
    week_starts_on: int = SUNDAY,
    lock_window: timedelta = TWO_DAYS,
) -> LockDecision:
    """Lock decision for a user, adding the approval lock.

    Approved events are locked for everyone but managers; managers are
    still subject to the time-window lock.
    """
    if (
        approval_enabled
        and not is_manager
        and getattr(event, "approval_state", None) == ApprovalState.APPROVED
    ):
        return LockDecision(locked=True, reason=APPROVED_REASON)
    return is_locked(event, lock_mode, now, week_starts_on, lock_window)
