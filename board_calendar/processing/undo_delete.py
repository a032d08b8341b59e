"""Deletes with a cancellable grace window and batched remote commit."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from board_calendar.config import EngineConfig
from board_calendar.exceptions import DeleteCommitError, StoreError
from board_calendar.models.event import Event
from board_calendar.models.query import DeleteItemMutation
from board_calendar.storage.store_client import StoreClient

logger = logging.getLogger(__name__)

UNDO_GRACE_MS = 4000
DELETE_BATCH_SIZE = 5


def delete_message(count: int) -> str:
    return "1 event deleted" if count == 1 else f"{count} events deleted"


def _as_store_error(error: BaseException, event: Event) -> StoreError:
    """Failed delete result as a StoreError; cancellation counts as failure."""
    if isinstance(error, StoreError):
        return error
    wrapped = StoreError(
        str(error) or f"Delete of item {event.record_id} was cancelled",
        request=DeleteItemMutation(item_id=event.record_id),
        function_name="deleteItem",
    )
    wrapped.__cause__ = error
    return wrapped


@dataclass
class PendingDelete:
    """Events waiting for their grace window to elapse."""

    events: list[Event]
    scheduled_at: datetime
    grace_deadline: datetime
    message: str


class UndoableDeleteQueue:
    """Schedules deletions that can be undone until the grace window ends.

    At most one batch is pending: scheduling a new batch commits the
    previous one immediately. The callers hide deleted events themselves;
    the queue hands them back through ``restore_events`` on undo and on
    any commit failure. The timer is owned by the queue: its firing is the
    only trigger for a commit and cancelling it the only trigger for a
    restore. Closing the queue commits a pending batch instead of
    dropping it.
    """

    def __init__(
        self,
        client: StoreClient,
        restore_events: Callable[[list[Event]], None],
        on_error: Callable[[DeleteCommitError], None] | None = None,
        grace_ms: int = UNDO_GRACE_MS,
        batch_size: int = DELETE_BATCH_SIZE,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.restore_events = restore_events
        self.on_error = on_error
        self.grace_ms = grace_ms
        self.batch_size = batch_size
        self.clock = clock
        self._pending: PendingDelete | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._commits: set[asyncio.Task] = set()

    @classmethod
    def from_config(
        cls,
        client: StoreClient,
        config: EngineConfig,
        restore_events: Callable[[list[Event]], None],
        on_error: Callable[[DeleteCommitError], None] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "UndoableDeleteQueue":
        """Queue with the grace window and batch size of ``config``."""
        return cls(
            client,
            restore_events,
            on_error=on_error,
            grace_ms=config.undo_grace_ms,
            batch_size=config.delete_batch_size,
            clock=clock,
        )

    def __del__(self) -> None:
        if self._pending is not None:
            logger.warning(
                f"Delete queue discarded with {len(self._pending.events)} events still pending; "
                "nothing was deleted"
            )

    @property
    def pending(self) -> PendingDelete | None:
        return self._pending

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    @property
    def message(self) -> str:
        return self._pending.message if self._pending else ""

    def _take_pending(self) -> PendingDelete | None:
        """Cancel the timer and detach the pending batch."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        pending, self._pending = self._pending, None
        return pending

    def schedule_delete(self, events: list[Event]) -> PendingDelete | None:
        """Start a grace window for ``events``.

        A batch that is still pending is committed right away. Must be
        called from a running event loop.
        """
        if not events:
            return None
        loop = asyncio.get_running_loop()

        previous = self._take_pending()
        if previous is not None:
            logger.info(f"Committing previous pending delete of {len(previous.events)} events")
            self._start_commit(previous.events)

        now = self.clock()
        self._pending = PendingDelete(
            events=list(events),
            scheduled_at=now,
            grace_deadline=now + timedelta(milliseconds=self.grace_ms),
            message=delete_message(len(events)),
        )
        self._timer = loop.call_later(self.grace_ms / 1000, self._on_grace_elapsed)
        logger.info(f"Scheduled delete of {len(events)} events with undo")
        return self._pending

    def undo_delete(self) -> list[Event]:
        """Cancel the pending delete and restore its events."""
        pending = self._take_pending()
        if pending is None:
            return []
        logger.info(f"Undo delete of {len(pending.events)} events")
        self.restore_events(pending.events)
        return pending.events

    def _on_grace_elapsed(self) -> None:
        self._timer = None
        pending, self._pending = self._pending, None
        if pending is not None:
            self._start_commit(pending.events)

    def _start_commit(self, events: list[Event]) -> asyncio.Task:
        task = asyncio.ensure_future(self.commit(events))
        self._commits.add(task)
        task.add_done_callback(self._commits.discard)
        return task

    async def commit(self, events: list[Event]) -> bool:
        """Delete events remotely in batches.

        Every batch runs even if an earlier one failed. Any failure
        restores all events of this commit and reports one aggregated
        DeleteCommitError. Returns True when every delete succeeded.
        """
        if not events:
            return True

        failures: list[StoreError] = []
        for i in range(0, len(events), self.batch_size):
            batch = events[i : i + self.batch_size]
            results = await asyncio.gather(
                *(self.client.delete_item(event.record_id) for event in batch),
                return_exceptions=True,
            )
            batch_failures = [
                _as_store_error(result, event)
                for result, event in zip(results, batch)
                if isinstance(result, BaseException)
            ]
            if batch_failures:
                logger.error(f"{len(batch_failures)} of {len(batch)} deletions failed in batch")
                failures.extend(batch_failures)

        if not failures:
            logger.info(f"Committed delete of {len(events)} events")
            return True

        self.restore_events(events)
        error = DeleteCommitError(
            f"Failed to delete {len(failures)} of {len(events)} events; all were restored",
            events=list(events),
            failures=failures,
        )
        logger.error(str(error))
        if self.on_error is not None:
            self.on_error(error)
        return False

    async def drain(self) -> None:
        """Wait for commits already in flight."""
        if self._commits:
            await asyncio.gather(*list(self._commits))

    async def flush(self) -> None:
        """Commit the pending batch now and wait for all commits."""
        pending = self._take_pending()
        if pending is not None:
            self._start_commit(pending.events)
        await self.drain()

    async def aclose(self) -> None:
        await self.flush()

    async def __aenter__(self) -> "UndoableDeleteQueue":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
