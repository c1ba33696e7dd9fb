from __future__ import annotations

import asyncio
import random

import pytest

from qthrottle.dispatch_queue import DispatchQueue
from qthrottle.exceptions import ItemNotFoundError
from qthrottle.types import QItem

from tests.helpers import make_entry


def _item(id: int, priority: int = 100) -> QItem:
    return QItem(entry=make_entry(id, priority=priority), future=asyncio.get_running_loop().create_future())


async def test_orders_by_priority_then_id():
    queue = DispatchQueue()
    specs = [(1, 50), (2, 10), (3, 50), (4, 0), (5, 10), (6, 100)]
    shuffled = specs[:]
    random.Random(7).shuffle(shuffled)
    for id, priority in shuffled:
        queue.insert(_item(id, priority))

    assert [item.entry.id for item in queue] == [4, 2, 5, 1, 3, 6]


async def test_peek_and_pop_head():
    queue = DispatchQueue()
    assert queue.peek_head() is None

    queue.insert(_item(1, priority=5))
    queue.insert(_item(2, priority=1))

    assert queue.peek_head().entry.id == 2
    assert len(queue) == 2
    assert queue.pop_head().entry.id == 2
    assert queue.pop_head().entry.id == 1
    assert not queue


async def test_pop_empty_raises():
    with pytest.raises(ItemNotFoundError):
        DispatchQueue().pop_head()


async def test_remove_by_id_resolves_none():
    queue = DispatchQueue()
    first, second = _item(1), _item(2)
    queue.insert(first)
    queue.insert(second)

    removed = queue.remove_by_id(2)

    assert removed is second
    assert second.future.result() is None
    assert 2 not in queue
    assert 1 in queue
    assert not first.future.done()


async def test_remove_missing_raises():
    queue = DispatchQueue()
    queue.insert(_item(1))
    with pytest.raises(ItemNotFoundError):
        queue.remove_by_id(99)


async def test_clear_resolves_everything():
    queue = DispatchQueue()
    items = [_item(i) for i in range(1, 4)]
    for item in items:
        queue.insert(item)

    assert queue.clear() == items
    assert len(queue) == 0
    assert all(item.future.result() is None for item in items)


async def test_find():
    queue = DispatchQueue()
    queue.insert(_item(1, priority=3))
    queue.insert(_item(2, priority=4))
    assert queue.find(lambda item: item.entry.priority == 4).entry.id == 2
    assert queue.find(lambda item: item.entry.priority == 9) is None
