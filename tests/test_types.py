from __future__ import annotations

import asyncio

import pytest

from qthrottle.exceptions import InvariantError
from qthrottle.types import EntryStatus, QItem, QResult

from tests.helpers import make_entry


def test_new_entry_is_queued():
    entry = make_entry(1)
    assert entry.status == EntryStatus.QUEUED
    assert entry.is_pending
    assert entry.skipped is False
    assert entry.attempts == 0
    assert entry.wait_time == 0


def test_derived_durations():
    entry = make_entry(1)
    assert entry.elapsed is None
    assert entry.run_time is None

    entry.queued_at = 1000.0
    entry.started_at = 1250.0
    assert entry.elapsed == 250.0
    assert entry.run_time is None

    entry.finished_at = 1400.0
    assert entry.run_time == 150.0


def test_status_values():
    assert [s.value for s in EntryStatus] == ["queued", "active", "finish", "error", "skipped"]


async def test_item_settles_once():
    item = QItem(entry=make_entry(1), future=asyncio.get_running_loop().create_future())
    item.resolve(QResult(entry=item.entry, result=1))

    with pytest.raises(InvariantError):
        item.resolve(None)
    with pytest.raises(InvariantError):
        item.reject(ValueError("late"))

    assert item.future.result().result == 1


async def test_item_ignores_cancelled_future():
    item = QItem(entry=make_entry(1), future=asyncio.get_running_loop().create_future())
    item.future.cancel()

    item.resolve(None)
    assert item.future.cancelled()


async def test_items_sort_by_priority_then_id():
    loop = asyncio.get_running_loop()
    a = QItem(entry=make_entry(2, priority=1), future=loop.create_future())
    b = QItem(entry=make_entry(1, priority=1), future=loop.create_future())
    c = QItem(entry=make_entry(3, priority=0), future=loop.create_future())
    assert sorted([a, b, c]) == [c, b, a]
