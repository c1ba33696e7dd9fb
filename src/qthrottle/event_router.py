from __future__ import annotations

from collections.abc import Callable
from typing import Any

import msgspec
from loguru import logger
from ulid import ULID

from .events import QEvent, QEventType
from .exceptions import ListenerNotFoundError, UnknownEventError
from .util.misc import check_callable

type QListenerCallback = Callable[[QEvent], Any]

ALL_EVENTS = "all"


class QListener(msgspec.Struct, frozen=True):
    event_type: QEventType
    callback: QListenerCallback
    id: str = msgspec.field(default_factory=lambda: str(ULID()))


def _event_type(event_name: str | QEventType) -> QEventType:
    try:
        return QEventType(event_name)
    except ValueError as e:
        raise UnknownEventError(f"unknown event name {event_name}") from e


class EventRouter:
    """
    synchronous fan-out of queue events to registered listeners

    listeners run in registration order; anything they raise propagates to whoever emitted
    """

    def __init__(self) -> None:
        self._listeners: dict[QEventType, list[QListener]] = {event_type: [] for event_type in QEventType}

    def register_listener(self, event_name: str | QEventType, callback: QListenerCallback) -> QListener:
        listener = QListener(event_type=_event_type(event_name), callback=check_callable(callback, "listener"))
        self._listeners[listener.event_type].append(listener)
        return listener

    def unregister_listener(self, listener: QListener) -> QListener:
        listeners = self._listeners[listener.event_type]
        for index, registered in enumerate(listeners):
            if registered.id == listener.id:
                del listeners[index]
                return registered
        raise ListenerNotFoundError(f"listener {listener.event_type}:{listener.id} not found")

    def clear(self, event_name: str | QEventType = ALL_EVENTS) -> None:
        if event_name == ALL_EVENTS:
            for listeners in self._listeners.values():
                listeners.clear()
            return
        self._listeners[_event_type(event_name)].clear()

    def listeners(self, event_name: str | QEventType) -> list[QListener]:
        return list(self._listeners[_event_type(event_name)])

    def emit(self, event: QEvent) -> None:
        listeners = self.listeners(event.event_type)
        if listeners:
            logger.trace("routing {} to {} listeners", event.event_type, len(listeners))
        for listener in listeners:
            listener.callback(event)
