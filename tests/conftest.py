from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest

from qthrottle.events import QEventType
from qthrottle.throttle import QThrottle


@pytest.fixture
async def make_throttle() -> AsyncGenerator[Callable[..., QThrottle]]:
    created: list[QThrottle] = []

    def _make(**options: Any) -> QThrottle:
        q = QThrottle(**options)
        created.append(q)
        return q

    yield _make

    for q in created:
        await q.shutdown()


@pytest.fixture
def record_events():
    """subscribe to every event of a queue and collect (event_type, entry key) pairs"""

    def _record(q: QThrottle) -> list[tuple[QEventType, Any]]:
        seen: list[tuple[QEventType, Any]] = []
        for event_type in QEventType:
            q.on(event_type, lambda e: seen.append((e.event_type, getattr(getattr(e, "entry", None), "key", None))))
        return seen

    return _record
