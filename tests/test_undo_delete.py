"""Tests for deletes with an undo grace window."""

import asyncio
import gc
from datetime import datetime, timedelta

from board_calendar.config import EngineConfig
from board_calendar.exceptions import DeleteCommitError, StoreError
from board_calendar.models.event import Event
from board_calendar.models.query import DeleteItemMutation
from board_calendar.processing.undo_delete import UndoableDeleteQueue, delete_message
from board_calendar.storage.store_client import StoreClient

GRACE_MS = 50


def _events(ids):
    start = datetime(2025, 3, 2, 9, 0)
    return [
        Event(
            id=str(i),
            title=f"Report {i}",
            start=start,
            end=start + timedelta(hours=1),
            source_record_id=str(i),
        )
        for i in ids
    ]


class Recorder:
    """Collects restored events and reported errors."""

    def __init__(self):
        self.restored = []
        self.errors = []

    def restore(self, events):
        self.restored.append(list(events))

    def error(self, error):
        self.errors.append(error)


def _queue(client, recorder, **kwargs):
    return UndoableDeleteQueue(
        client,
        restore_events=recorder.restore,
        on_error=recorder.error,
        grace_ms=GRACE_MS,
        **kwargs,
    )


def _deleted_ids(store):
    return [call.item_id for call in store.calls_of(DeleteItemMutation)]


def test_delete_message():
    assert delete_message(1) == "1 event deleted"
    assert delete_message(3) == "3 events deleted"


async def test_undo_within_grace_window_issues_no_deletes(store, client):
    """Undo before the timer fires restores everything and deletes nothing."""
    recorder = Recorder()
    queue = _queue(client, recorder)
    events = _events([1, 2, 3])

    pending = queue.schedule_delete(events)
    assert queue.is_pending
    assert pending.message == "3 events deleted"
    assert pending.grace_deadline - pending.scheduled_at == timedelta(milliseconds=GRACE_MS)

    restored = queue.undo_delete()
    await asyncio.sleep(GRACE_MS / 1000 * 3)

    assert restored == events
    assert recorder.restored == [events]
    assert _deleted_ids(store) == []
    assert queue.is_pending is False


async def test_grace_window_elapsing_commits(store, client):
    recorder = Recorder()
    queue = _queue(client, recorder)

    queue.schedule_delete(_events([1, 2]))
    await asyncio.sleep(GRACE_MS / 1000 * 3)
    await queue.drain()

    assert sorted(_deleted_ids(store)) == ["1", "2"]
    assert recorder.restored == []
    assert recorder.errors == []
    assert queue.undo_delete() == []


async def test_scheduling_commits_previous_pending_batch(store, client):
    """A new delete commits the pending batch right away; the new batch waits."""
    recorder = Recorder()
    queue = _queue(client, recorder)

    queue.schedule_delete(_events(["A"]))
    queue.schedule_delete(_events(["B"]))
    await asyncio.sleep(0)
    await queue.drain()

    assert _deleted_ids(store) == ["A"]
    assert [e.id for e in queue.pending.events] == ["B"]

    queue.undo_delete()
    await asyncio.sleep(GRACE_MS / 1000 * 3)
    assert _deleted_ids(store) == ["A"]


async def test_partial_failure_restores_every_event(store, client):
    """With 7 events and 2 failures, all 7 are restored and one error is reported."""
    store.failing_items = {"3", "6"}
    recorder = Recorder()
    queue = _queue(client, recorder, batch_size=5)
    events = _events(range(1, 8))

    queue.schedule_delete(events)
    await asyncio.sleep(GRACE_MS / 1000 * 3)
    await queue.drain()

    assert sorted(_deleted_ids(store), key=int) == [str(i) for i in range(1, 8)]
    assert recorder.restored == [events]
    assert len(recorder.errors) == 1

    error = recorder.errors[0]
    assert isinstance(error, DeleteCommitError)
    assert error.events == events
    assert len(error.failures) == 2
    assert all(isinstance(f, StoreError) for f in error.failures)


async def test_commit_runs_in_batches(store, client):
    """At most batch_size deletes are issued before the batch completes."""
    recorder = Recorder()
    queue = _queue(client, recorder, batch_size=5)

    assert await queue.commit(_events(range(1, 13))) is True
    assert len(_deleted_ids(store)) == 12


async def test_flush_commits_pending_batch(store, client):
    recorder = Recorder()
    queue = _queue(client, recorder)
    queue.schedule_delete(_events([1]))

    await queue.flush()

    assert _deleted_ids(store) == ["1"]
    assert queue.is_pending is False


async def test_context_manager_commits_on_exit(store, client):
    """Closing the queue commits instead of dropping the pending batch."""
    recorder = Recorder()
    async with _queue(client, recorder) as queue:
        queue.schedule_delete(_events([1, 2]))

    assert sorted(_deleted_ids(store)) == ["1", "2"]


async def test_schedule_empty_list_is_noop(store, client):
    queue = _queue(client, Recorder())
    assert queue.schedule_delete([]) is None
    assert queue.is_pending is False
    assert queue.message == ""


class CancellingStore:
    """Store whose deletes are cancelled mid-flight."""

    async def query(self, expression):
        return {"data": {}}

    async def mutate(self, expression):
        raise asyncio.CancelledError()


async def test_cancelled_delete_counts_as_failure():
    """A cancelled delete restores the events instead of passing as success."""
    recorder = Recorder()
    queue = _queue(StoreClient(CancellingStore()), recorder)
    events = _events([1])

    assert await queue.commit(events) is False

    assert recorder.restored == [events]
    [error] = recorder.errors
    assert len(error.failures) == 1
    assert isinstance(error.failures[0], StoreError)
    assert isinstance(error.failures[0].__cause__, asyncio.CancelledError)


async def test_queue_from_config(store, client):
    config = EngineConfig(undo_grace_ms=GRACE_MS, delete_batch_size=2)
    queue = UndoableDeleteQueue.from_config(client, config, restore_events=Recorder().restore)
    assert queue.grace_ms == GRACE_MS
    assert queue.batch_size == 2

    pending = queue.schedule_delete(_events([1, 2, 3]))
    assert pending.grace_deadline - pending.scheduled_at == timedelta(milliseconds=GRACE_MS)
    await asyncio.sleep(GRACE_MS / 1000 * 3)
    await queue.drain()
    assert sorted(_deleted_ids(store)) == ["1", "2", "3"]


def test_discarded_pending_batch_is_logged(client, caplog):
    """A queue dropped with a batch still pending leaves a warning behind."""

    async def leave_pending():
        queue = UndoableDeleteQueue(client, restore_events=Recorder().restore, grace_ms=60_000)
        queue.schedule_delete(_events([1]))

    asyncio.run(leave_pending())
    gc.collect()

    assert "1 events still pending" in caplog.text
