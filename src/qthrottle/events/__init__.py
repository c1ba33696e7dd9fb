from .core import QEntryEvent, QEntryFailed, QEntryFinished, QEvent, QEventType, QQueueEvent, QRateWait
from .shortcuts import (
    _entry_added_event,
    _entry_failed_event,
    _entry_finished_event,
    _entry_skipped_event,
    _entry_started_event,
    _queue_event,
    _rate_wait_event,
)

__all__ = [
    "QEventType",
    "QEvent",
    "QQueueEvent",
    "QEntryEvent",
    "QEntryFinished",
    "QEntryFailed",
    "QRateWait",
    "_queue_event",
    "_entry_added_event",
    "_entry_started_event",
    "_entry_skipped_event",
    "_entry_finished_event",
    "_entry_failed_event",
    "_rate_wait_event",
]
