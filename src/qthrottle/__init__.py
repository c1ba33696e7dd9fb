from .dispatch_queue import DispatchQueue
from .event_router import EventRouter, QListener
from .events import QEntryEvent, QEntryFailed, QEntryFinished, QEvent, QEventType, QQueueEvent, QRateWait
from .exceptions import (
    ActionFailedError,
    DuplicateKeyError,
    InvalidConfigurationError,
    InvariantError,
    ItemNotFoundError,
    ListenerNotFoundError,
    NotAFunctionError,
    QEntryError,
    QThrottleError,
    UnknownEventError,
)
from .history import RateLimitHistory, RateLimitPolicy, RateLimitRecord
from .options import QOptions
from .throttle import QThrottle
from .timer import QTimer, now_ms, timer
from .types import EntryStatus, QEntry, QItem, QResult

__all__ = [
    "QThrottle",
    "QOptions",
    "QEntry",
    "QItem",
    "QResult",
    "EntryStatus",
    "DispatchQueue",
    "RateLimitHistory",
    "RateLimitPolicy",
    "RateLimitRecord",
    "EventRouter",
    "QListener",
    "QEventType",
    "QEvent",
    "QQueueEvent",
    "QEntryEvent",
    "QEntryFinished",
    "QEntryFailed",
    "QRateWait",
    "QTimer",
    "now_ms",
    "timer",
    "QThrottleError",
    "InvalidConfigurationError",
    "NotAFunctionError",
    "UnknownEventError",
    "ItemNotFoundError",
    "ListenerNotFoundError",
    "InvariantError",
    "QEntryError",
    "ActionFailedError",
    "DuplicateKeyError",
]
