from __future__ import annotations

import bisect
from collections.abc import Callable, Iterator

from .exceptions import ItemNotFoundError
from .types import QItem


class DispatchQueue:
    """
    pending items ordered by (priority, id)

    lower priority values come first; equal priorities keep submission order
    """

    def __init__(self) -> None:
        self._items: list[QItem] = []

    def insert(self, item: QItem) -> QItem:
        bisect.insort_right(self._items, item)
        return item

    def peek_head(self) -> QItem | None:
        return self._items[0] if self._items else None

    def pop_head(self) -> QItem:
        if not self._items:
            raise ItemNotFoundError("dispatch queue is empty")
        return self._items.pop(0)

    def remove_by_id(self, entry_id: int) -> QItem:
        for index, item in enumerate(self._items):
            if item.entry.id == entry_id:
                del self._items[index]
                item.resolve(None)
                return item
        raise ItemNotFoundError(f"no pending entry {entry_id}")

    def find(self, predicate: Callable[[QItem], bool]) -> QItem | None:
        return next((item for item in self._items if predicate(item)), None)

    def clear(self) -> list[QItem]:
        removed, self._items = self._items, []
        for item in removed:
            item.resolve(None)
        return removed

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[QItem]:
        return iter(list(self._items))

    def __contains__(self, entry_id: object) -> bool:
        return any(item.entry.id == entry_id for item in self._items)
