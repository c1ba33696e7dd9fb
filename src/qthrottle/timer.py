"""Clock and timer primitives, all in milliseconds."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable


def now_ms() -> float:
    return time.time() * 1000


async def timer(ms: float = 0) -> float:
    await asyncio.sleep(ms / 1000)
    return ms


class QTimer:
    """one-shot cancellable delay; arming it again replaces the pending callback"""

    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None
        self._fires_at: float | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled()

    @property
    def fires_at(self) -> float | None:
        return self._fires_at if self.pending else None

    def arm(self, delay_ms: float, callback: Callable[[], object]) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._fires_at = now_ms() + delay_ms
        self._handle = loop.call_later(max(delay_ms, 0) / 1000, self._fire, callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._fires_at = None

    def _fire(self, callback: Callable[[], object]) -> None:
        self._handle = None
        self._fires_at = None
        callback()
