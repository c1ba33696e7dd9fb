from __future__ import annotations

import asyncio
import itertools
from typing import Any

from loguru import logger

from .dispatch_queue import DispatchQueue
from .event_router import ALL_EVENTS, EventRouter, QListener, QListenerCallback
from .events import (
    QEvent,
    QEventType,
    _entry_added_event,
    _entry_failed_event,
    _entry_finished_event,
    _entry_skipped_event,
    _entry_started_event,
    _queue_event,
    _rate_wait_event,
)
from .exceptions import ActionFailedError, DuplicateKeyError, ItemNotFoundError
from .history import RateLimitHistory, RateLimitPolicy, RateLimitRecord
from .options import QOptions, build_options, merge_options
from .timer import QTimer, now_ms
from .types import EntryStatus, QAction, QEntry, QItem, QResult
from .util.misc import await_if_async, check_callable, invoke_action


class QThrottle:
    """
    in-process queue that runs actions under concurrency, priority and rate limits

    usage:
        q = QThrottle(concurrency_limit=2, rate_limit_enabled=True, rate_limit_window_ms=1000)
        outcome = await q.add(fetch_page, key=url)
    """

    def __init__(self, **options: Any) -> None:
        self.options: QOptions = build_options(options)
        self.event_router = EventRouter()
        self.rate_limit_history = RateLimitHistory()

        self._queue = DispatchQueue()
        self._active: list[QItem] = []
        self._retained: list[QItem] = []
        self._counter = itertools.count(1)
        self._retry_timer = QTimer()
        self._running_tasks: set[asyncio.Task] = set()
        self._paused = True

        if self.options.auto_start:
            self.start()
        else:
            self.stop()

    @property
    def name(self) -> str:
        return self.options.instance_name

    @property
    def is_started(self) -> bool:
        return not self._paused

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    @property
    def active_size(self) -> int:
        return len(self._active)

    @property
    def retained_size(self) -> int:
        return len(self._retained)

    def entries(self) -> list[QEntry]:
        return [item.entry for item in self._all_items()]

    def get_by_key(self, key: Any) -> QEntry | None:
        if key is None:
            return None
        return next((item.entry for item in self._all_items() if item.entry.key == key), None)

    def _all_items(self) -> list[QItem]:
        return [*self._active, *self._queue, *self._retained]

    # listeners

    def on(self, event_name: str | QEventType, callback: QListenerCallback) -> QListener:
        return self.event_router.register_listener(event_name, callback)

    def off(self, listener: QListener) -> QListener:
        return self.event_router.unregister_listener(listener)

    def clear_listeners(self, event_name: str | QEventType = ALL_EVENTS) -> QThrottle:
        self.event_router.clear(event_name)
        return self

    def _emit(self, event: QEvent) -> None:
        self.event_router.emit(event)

    # submission

    def add(
        self,
        action: QAction,
        *,
        priority: int | None = None,
        key: Any = None,
        context: Any = None,
        **overrides: Any,
    ) -> asyncio.Future[QResult | None]:
        """
        queue an action

        `return:` future resolving to a `QResult`, or to None if the entry is removed before it runs
        """
        check_callable(action, "action")
        options = merge_options(self.options, overrides)

        entry = QEntry(
            id=next(self._counter),
            action=action,
            options=options,
            priority=options.default_priority if priority is None else priority,
            key=options.default_key if key is None else key,
            context=context,
            queued_at=now_ms(),
        )
        item = QItem(entry=entry, future=asyncio.get_running_loop().create_future())

        if options.skip_duplicate_keys and self.get_by_key(entry.key) is not None:
            self._handle_duplicate(item)
        else:
            self._add_to_queue(item)
            self.service_queue()

        return item.future

    def _add_to_queue(self, item: QItem) -> None:
        self._queue.insert(item)
        self._log(item.entry, "added {}{} to queue", item.entry.id, _key_text(item.entry))
        self._emit(_entry_added_event(item.entry, self.name))

    def _handle_duplicate(self, item: QItem) -> None:
        entry = item.entry
        entry.skipped = True
        entry.status = EntryStatus.SKIPPED
        self._log(entry, "skipped {} as duplicated{}", entry.id, _key_text(entry))

        error = DuplicateKeyError(f"entry was skipped because of duplicate key {entry.key}", entry)
        entry.error = error
        if entry.options.error_on_duplicate:
            item.reject(error)
            self._emit(_entry_failed_event(entry, self.name, error))
        else:
            item.resolve(QResult(entry=entry, error=error))
            self._emit(_entry_skipped_event(entry, self.name))

    def remove(self, entry: QEntry) -> QEntry:
        """cancel an entry that has not started yet; its future resolves to None"""
        self._queue.remove_by_id(entry.id)
        self._log(entry, "removed {}{} from queue", entry.id, _key_text(entry))
        self._check_empty()
        return entry

    # queue control

    def start(self) -> QThrottle:
        self._paused = False
        self._emit(_queue_event(QEventType.START_QUEUE, self.name))
        self.service_queue()
        return self

    def stop(self) -> QThrottle:
        """stop dispatching; anything already running carries on"""
        self._paused = True
        self._emit(_queue_event(QEventType.STOP_QUEUE, self.name))
        return self

    def clear(self) -> QThrottle:
        removed = self._queue.clear()
        if removed:
            logger.debug("queue {}: cleared {} pending entries", self.name, len(removed))
            self._check_empty()
        return self

    def clear_retained(self) -> QThrottle:
        self._retained.clear()
        return self

    def clear_rate_limit_history(self) -> QThrottle:
        self.rate_limit_history.clear()
        return self

    def tidy_rate_limit_history(self) -> list[RateLimitRecord]:
        return self.rate_limit_history.prune(now_ms(), RateLimitPolicy.from_options(self.options))

    def drain(self) -> list[QEntry]:
        self.clear()
        self.clear_retained()
        self.clear_rate_limit_history()
        logger.info(
            "queue {}: drained, {} still running - drain again when completed", self.name, self.active_size
        )
        return self.entries()

    async def shutdown(self) -> None:
        self.stop()
        self._retry_timer.cancel()

        active = [t for t in self._running_tasks if not t.done()]
        if active:
            logger.info("queue {}: waiting for {} running entries", self.name, len(active))
            await asyncio.gather(*active, return_exceptions=True)

    # dispatch

    def _is_room_for_another(self) -> bool:
        limit = self.options.concurrency_limit
        return limit is None or self.active_size < limit

    def service_queue(self) -> None:
        """
        dispatch as many queued entries as the gates allow

        safe to call at any time and from any trigger; every pass re-reads the current state
        """
        while self.is_started and (head := self._queue.peek_head()) is not None and self._is_room_for_another():
            now = now_ms()
            policy = RateLimitPolicy.from_options(self.options, enabled=head.entry.options.rate_limit_enabled)
            eligible_at = self.rate_limit_history.next_eligible_time(now, policy)

            if eligible_at:
                self._wait_for_rate_limit(head, now, eligible_at)
                return

            self._retry_timer.cancel()
            self._start_item(self._queue.pop_head(), now)

    def _wait_for_rate_limit(self, item: QItem, now: float, eligible_at: float) -> None:
        entry = item.entry
        until = max(now + self.options.min_wait_floor_ms, eligible_at)
        wait_time = until - now

        if entry.wait_started_at is None:
            entry.wait_started_at = now

        # armed before emitting: a blocked head always has a pending retry
        self._retry_timer.arm(wait_time, self._service_from_loop)

        # entries that slipped in ahead or a cleared window change the target; only a real change is a new attempt
        if entry.wait_until is None or abs(entry.wait_until - until) > self.options.new_attempt_threshold_ms:
            entry.attempts += 1
            entry.wait_until = until
            self._log(entry, "rate limited {}{}, waiting {:.0f}ms", entry.id, _key_text(entry), wait_time)
            self._emit(_rate_wait_event(entry, self.name, wait_time))

    def _start_item(self, item: QItem, now: float) -> None:
        entry = item.entry
        self._active.append(item)

        entry.status = EntryStatus.ACTIVE
        entry.started_at = now
        if entry.wait_started_at is not None:
            entry.wait_finished_at = entry.started_at
            entry.wait_time = entry.wait_finished_at - entry.wait_started_at

        self.rate_limit_history.record(entry.started_at, entry.id, entry.key)
        self.rate_limit_history.prune(now, RateLimitPolicy.from_options(self.options))

        # the task only runs on the next loop iteration, so the start event still comes first
        task = asyncio.get_running_loop().create_task(self._run_item(item))
        self._running_tasks.add(task)
        task.add_done_callback(self._running_tasks.discard)

        self._log(entry, "starting {}{}", entry.id, _key_text(entry))
        self._emit(_entry_started_event(entry, self.name))

    async def _run_item(self, item: QItem) -> None:
        try:
            try:
                result = await await_if_async(invoke_action(item.entry.action, item.entry))
            except asyncio.CancelledError as e:
                self._register_failure(item, e)
                # only a cancel aimed at this task goes on; a cancelled await inside the action is a failure
                if _is_being_cancelled():
                    raise
            except Exception as e:
                self._register_failure(item, e)
            else:
                self._register_success(item, result)
        except Exception:
            logger.exception("queue {}: listener failed while settling entry {}", self.name, item.entry.id)
        finally:
            self._service_from_loop()

    def _service_from_loop(self) -> None:
        # nobody is waiting on these calls, so a failing listener is logged instead of raised
        try:
            self.service_queue()
        except Exception:
            logger.exception("queue {}: listener failed while servicing the queue", self.name)

    def _register_success(self, item: QItem, result: Any) -> None:
        entry = item.entry
        self._settle(item, EntryStatus.FINISH)
        item.resolve(QResult(entry=entry, result=result))

        self._log(entry, "finish {}{} in {:.0f}ms", entry.id, _key_text(entry), entry.run_time)
        try:
            self._emit(_entry_finished_event(entry, self.name, result))
        finally:
            self._check_empty()

    def _register_failure(self, item: QItem, error: BaseException) -> None:
        entry = item.entry
        self._settle(item, EntryStatus.ERROR)
        entry.error = error

        if entry.options.catch_errors:
            item.resolve(QResult(entry=entry, error=error))
        else:
            failure = ActionFailedError(f"entry {entry.id} failed: {error}", entry, error)
            failure.__cause__ = error
            item.reject(failure)

        self._log(entry, "error {}{}: {!r}", entry.id, _key_text(entry), error, level="WARNING")
        try:
            self._emit(_entry_failed_event(entry, self.name, error))
        finally:
            self._check_empty()

    def _settle(self, item: QItem, status: EntryStatus) -> None:
        entry = item.entry
        entry.finished_at = now_ms()
        entry.status = status

        try:
            self._active.remove(item)
        except ValueError as e:
            raise ItemNotFoundError(f"{self.name}: couldn't find entry {entry.id} in active queue") from e

        if self.options.retain_completed:
            self._retained.append(item)

    def _check_empty(self) -> bool:
        empty = not self._active and not self._queue
        if empty:
            self._emit(_queue_event(QEventType.EMPTY, self.name))
        return empty

    def _log(self, entry: QEntry, message: str, *args: Any, level: str = "INFO") -> None:
        logger.log(level if entry.options.logging else "DEBUG", "queue {}: " + message, self.name, *args)

    def __repr__(self) -> str:
        return (
            f"<QThrottle {self.name} queued={self.queue_size} active={self.active_size} "
            f"retained={self.retained_size} started={self.is_started}>"
        )


def _is_being_cancelled() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


def _key_text(entry: QEntry) -> str:
    return f"({entry.key})" if entry.key is not None else ""
