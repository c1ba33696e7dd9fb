from __future__ import annotations

import asyncio

from qthrottle.timer import QTimer, now_ms, timer


async def test_timer_waits_and_returns_ms():
    before = now_ms()
    assert await timer(30) == 30
    assert now_ms() - before >= 25


async def test_qtimer_fires_once():
    fired = []
    t = QTimer()
    t.arm(10, lambda: fired.append(now_ms()))
    assert t.pending
    assert t.fires_at is not None

    await asyncio.sleep(0.05)

    assert len(fired) == 1
    assert not t.pending
    assert t.fires_at is None


async def test_qtimer_rearm_replaces_pending_callback():
    fired = []
    t = QTimer()
    t.arm(10, lambda: fired.append("first"))
    t.arm(20, lambda: fired.append("second"))

    await asyncio.sleep(0.06)

    assert fired == ["second"]


async def test_qtimer_cancel():
    fired = []
    t = QTimer()
    t.arm(10, lambda: fired.append(1))
    t.cancel()

    await asyncio.sleep(0.03)

    assert fired == []
    assert not t.pending
