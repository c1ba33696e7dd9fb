from __future__ import annotations

from enum import StrEnum
from typing import Any

import msgspec

from ..types import QEntry


class QEventType(StrEnum):
    EMPTY = "empty"
    ERROR = "error"
    FINISH = "finish"
    SKIP = "skip"
    START = "start"
    START_QUEUE = "startqueue"
    STOP_QUEUE = "stopqueue"
    RATE_WAIT = "ratewait"
    ADD = "add"


class QQueueEvent(msgspec.Struct, frozen=True):
    event_type: QEventType
    queue_name: str
    timestamp: float


class QEntryEvent(msgspec.Struct, frozen=True):
    event_type: QEventType
    queue_name: str
    timestamp: float
    entry: QEntry


class QEntryFinished(msgspec.Struct, frozen=True):
    queue_name: str
    timestamp: float
    entry: QEntry
    result: Any = None

    event_type: QEventType = QEventType.FINISH


class QEntryFailed(msgspec.Struct, frozen=True):
    queue_name: str
    timestamp: float
    entry: QEntry
    error: BaseException

    event_type: QEventType = QEventType.ERROR


class QRateWait(msgspec.Struct, frozen=True):
    queue_name: str
    timestamp: float
    entry: QEntry
    wait_time: float

    event_type: QEventType = QEventType.RATE_WAIT


type QEvent = QQueueEvent | QEntryEvent | QEntryFinished | QEntryFailed | QRateWait
