from __future__ import annotations

from typing import Any

from ..timer import now_ms
from ..types import QEntry
from .core import QEntryEvent, QEntryFailed, QEntryFinished, QEventType, QQueueEvent, QRateWait


def _queue_event(event_type: QEventType, queue_name: str) -> QQueueEvent:
    return QQueueEvent(event_type=event_type, queue_name=queue_name, timestamp=now_ms())


def _entry_added_event(entry: QEntry, queue_name: str) -> QEntryEvent:
    return QEntryEvent(event_type=QEventType.ADD, queue_name=queue_name, timestamp=entry.queued_at, entry=entry)


def _entry_started_event(entry: QEntry, queue_name: str) -> QEntryEvent:
    return QEntryEvent(
        event_type=QEventType.START, queue_name=queue_name, timestamp=entry.started_at or now_ms(), entry=entry
    )


def _entry_skipped_event(entry: QEntry, queue_name: str) -> QEntryEvent:
    return QEntryEvent(event_type=QEventType.SKIP, queue_name=queue_name, timestamp=now_ms(), entry=entry)


def _entry_finished_event(entry: QEntry, queue_name: str, result: Any) -> QEntryFinished:
    return QEntryFinished(
        queue_name=queue_name, timestamp=entry.finished_at or now_ms(), entry=entry, result=result
    )


def _entry_failed_event(entry: QEntry, queue_name: str, error: BaseException) -> QEntryFailed:
    return QEntryFailed(queue_name=queue_name, timestamp=entry.finished_at or now_ms(), entry=entry, error=error)


def _rate_wait_event(entry: QEntry, queue_name: str, wait_time: float) -> QRateWait:
    return QRateWait(queue_name=queue_name, timestamp=now_ms(), entry=entry, wait_time=wait_time)
