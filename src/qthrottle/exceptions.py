from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import QEntry


class QThrottleError(Exception):
    """base class for every error raised by qthrottle"""


class InvalidConfigurationError(QThrottleError, ValueError):
    pass


class NotAFunctionError(QThrottleError, TypeError):
    pass


class UnknownEventError(QThrottleError, ValueError):
    pass


class ItemNotFoundError(QThrottleError, LookupError):
    pass


class ListenerNotFoundError(ItemNotFoundError):
    pass


class InvariantError(QThrottleError, RuntimeError):
    pass


class QEntryError(QThrottleError):
    """
    raised into an entry's future; carries the entry and the underlying error

    mirrors the shape of a resolved `QResult` so callers can handle both the same way
    """

    def __init__(self, message: str, entry: QEntry, error: BaseException | None = None) -> None:
        super().__init__(message)
        self.entry = entry
        self.error = error if error is not None else self


class ActionFailedError(QEntryError):
    pass


class DuplicateKeyError(QEntryError):
    pass
