"""
Rate limit bookkeeping.

Every dispatch leaves a `RateLimitRecord`. Admission is decided purely from those records:
a call is blocked while the last call is closer than the minimum delay, or while the window
already holds the maximum number of calls.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import msgspec

from .options import QOptions


class RateLimitRecord(msgspec.Struct, frozen=True):
    started_at: float
    id: int
    key: Any = None


class RateLimitPolicy(msgspec.Struct, frozen=True):
    enabled: bool = False
    window_ms: float = 0.0
    max_per_window: int = 0
    min_delay_ms: float = 0.0

    @classmethod
    def from_options(cls, options: QOptions, enabled: bool | None = None) -> RateLimitPolicy:
        return cls(
            enabled=options.rate_limit_enabled if enabled is None else enabled,
            window_ms=options.rate_limit_window_ms,
            max_per_window=options.rate_limit_max_per_window,
            min_delay_ms=options.min_inter_call_delay_ms,
        )

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.max_per_window or self.min_delay_ms)

    def in_window(self, record: RateLimitRecord, now: float) -> bool:
        return bool(self.window_ms) and now - record.started_at < self.window_ms

    def too_soon(self, record: RateLimitRecord, now: float) -> bool:
        return bool(self.min_delay_ms) and record.started_at + self.min_delay_ms >= now


class RateLimitHistory:
    def __init__(self) -> None:
        self._records: list[RateLimitRecord] = []

    def record(self, started_at: float, id: int, key: Any = None) -> RateLimitRecord:
        record = RateLimitRecord(started_at=started_at, id=id, key=key)
        self._records.append(record)
        return record

    def calls_within_window(self, now: float, policy: RateLimitPolicy) -> list[RateLimitRecord]:
        return [r for r in self._records if policy.in_window(r, now)]

    def calls_within_min_delay(self, now: float, policy: RateLimitPolicy) -> list[RateLimitRecord]:
        return [r for r in self._records if policy.too_soon(r, now)]

    def next_eligible_time(self, now: float, policy: RateLimitPolicy) -> float:
        """
        earliest time another call may start, or 0 if one may start right now

        `return:` the later of "the delay has elapsed since the latest call" and
        "the latest blocking call has left the window"
        """
        if not policy.active:
            return 0

        in_window = self.calls_within_window(now, policy)
        too_soon = self.calls_within_min_delay(now, policy)
        if not in_window and not too_soon:
            return 0

        if not too_soon and len(in_window) < policy.max_per_window:
            return 0

        last_too_soon = too_soon[-1].started_at if too_soon else 0
        last_in_window = in_window[-1].started_at if in_window else 0
        return max(last_too_soon + policy.min_delay_ms, last_in_window + policy.window_ms)

    def prune(self, now: float, policy: RateLimitPolicy) -> list[RateLimitRecord]:
        self._records = [r for r in self._records if policy.in_window(r, now) or policy.too_soon(r, now)]
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[RateLimitRecord]:
        return iter(list(self._records))
