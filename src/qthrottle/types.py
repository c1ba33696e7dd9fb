from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import msgspec

from .exceptions import InvariantError
from .options import QOptions

type QAction = Callable[..., Any | Awaitable[Any]]


class EntryStatus(StrEnum):
    QUEUED = "queued"
    ACTIVE = "active"
    FINISH = "finish"
    ERROR = "error"
    SKIPPED = "skipped"


class QEntry(msgspec.Struct, kw_only=True):
    """
    one submitted unit of work and its lifecycle

    timestamps are milliseconds since the epoch and stay `None` until reached
    """

    id: int
    action: QAction
    options: QOptions
    priority: int
    key: Any = None
    context: Any = None

    status: EntryStatus = EntryStatus.QUEUED
    skipped: bool = False
    error: BaseException | None = None

    queued_at: float
    started_at: float | None = None
    finished_at: float | None = None

    wait_started_at: float | None = None
    wait_finished_at: float | None = None
    wait_until: float | None = None
    wait_time: float = 0.0
    attempts: int = 0

    @property
    def elapsed(self) -> float | None:
        """time spent queued before starting"""
        if self.started_at is None:
            return None
        return self.started_at - self.queued_at

    @property
    def run_time(self) -> float | None:
        if self.started_at is None or self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    @property
    def is_pending(self) -> bool:
        return self.status == EntryStatus.QUEUED


class QResult(msgspec.Struct, frozen=True):
    entry: QEntry
    result: Any = None
    error: BaseException | None = None


@dataclass(order=True)
class QItem:
    """an entry waiting in (or taken from) the dispatch queue, with the future handed to the caller"""

    sort_key: tuple[int, int] = field(init=False, repr=False)
    entry: QEntry = field(compare=False)
    future: asyncio.Future[QResult | None] = field(compare=False, repr=False)

    def __post_init__(self) -> None:
        self.sort_key = (self.entry.priority, self.entry.id)

    def resolve(self, value: QResult | None) -> None:
        if self._fulfillable():
            self.future.set_result(value)

    def reject(self, error: BaseException) -> None:
        if self._fulfillable():
            self.future.set_exception(error)

    def _fulfillable(self) -> bool:
        # a caller may cancel the future it holds; that is not a second fulfilment
        if self.future.cancelled():
            return False
        if self.future.done():
            raise InvariantError(f"entry {self.entry.id} was already settled")
        return True
