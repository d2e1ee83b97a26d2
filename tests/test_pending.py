# tests/test_pending.py

from __future__ import annotations

import asyncio

import pytest

from tasklane.tasks.pending import PendingUpdates
from tasklane.tasks.task_models import Task

SETTLE = 0.05


@pytest.mark.asyncio
async def test_entry_expires_after_settle_delay() -> None:
    pending = PendingUpdates(settle_seconds=SETTLE)
    task = Task(title="a").with_id(1)
    snapshots: list[dict[int, Task]] = []
    pending.observe().subscribe(snapshots.append)

    pending.put(task)
    assert pending.get(1) == task
    assert 1 in pending

    await asyncio.sleep(SETTLE * 3)

    assert pending.get(1) is None
    assert snapshots == [{}, {1: task}, {}]


@pytest.mark.asyncio
async def test_put_again_rearms_the_timer() -> None:
    pending = PendingUpdates(settle_seconds=SETTLE * 2)
    task = Task(title="a").with_id(1)

    pending.put(task)
    await asyncio.sleep(SETTLE * 1.5)
    pending.put(task.toggled())
    await asyncio.sleep(SETTLE * 1.5)

    # The first timer would have fired by now.
    assert pending.get(1) == task.toggled()

    await asyncio.sleep(SETTLE * 2)
    assert len(pending) == 0


@pytest.mark.asyncio
async def test_evict_and_clear() -> None:
    pending = PendingUpdates(settle_seconds=10.0)
    pending.put(Task(title="a").with_id(1))
    pending.put(Task(title="b").with_id(2))

    pending.evict(1)
    pending.evict(42)  # unknown id: no-op
    assert list(pending.observe().value) == [2]

    pending.clear()
    assert len(pending) == 0


@pytest.mark.asyncio
async def test_unsaved_task_cannot_be_cached() -> None:
    pending = PendingUpdates(settle_seconds=SETTLE)
    with pytest.raises(ValueError):
        pending.put(Task(title="draft"))
