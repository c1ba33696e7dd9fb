from __future__ import annotations

from qthrottle.events import (
    QEventType,
    _entry_added_event,
    _entry_failed_event,
    _entry_finished_event,
    _entry_skipped_event,
    _entry_started_event,
    _queue_event,
    _rate_wait_event,
)

from tests.helpers import make_entry


def test_event_types():
    assert {t.value for t in QEventType} == {
        "empty",
        "error",
        "finish",
        "skip",
        "start",
        "startqueue",
        "stopqueue",
        "ratewait",
        "add",
    }


def test_queue_event():
    event = _queue_event(QEventType.START_QUEUE, "pub")
    assert event.event_type == QEventType.START_QUEUE
    assert event.queue_name == "pub"
    assert event.timestamp > 0


def test_entry_events():
    entry = make_entry(3, key="k")
    entry.started_at = 10.0
    entry.finished_at = 25.0

    added = _entry_added_event(entry, "q")
    assert added.event_type == QEventType.ADD
    assert added.timestamp == entry.queued_at

    started = _entry_started_event(entry, "q")
    assert started.event_type == QEventType.START
    assert started.timestamp == 10.0

    assert _entry_skipped_event(entry, "q").event_type == QEventType.SKIP

    finished = _entry_finished_event(entry, "q", result=42)
    assert finished.event_type == QEventType.FINISH
    assert finished.result == 42
    assert finished.timestamp == 25.0


def test_failure_and_rate_wait_events():
    entry = make_entry(4)
    error = ValueError("nope")

    failed = _entry_failed_event(entry, "q", error)
    assert failed.event_type == QEventType.ERROR
    assert failed.error is error

    waiting = _rate_wait_event(entry, "q", 180.0)
    assert waiting.event_type == QEventType.RATE_WAIT
    assert waiting.wait_time == 180.0
    assert waiting.entry is entry
