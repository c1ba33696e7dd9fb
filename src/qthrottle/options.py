from __future__ import annotations

from typing import Annotated, Any

import msgspec

from .exceptions import InvalidConfigurationError

PositiveInt = Annotated[int, msgspec.Meta(ge=1)]
NonNegativeInt = Annotated[int, msgspec.Meta(ge=0)]
Milliseconds = Annotated[float, msgspec.Meta(ge=0)]


class QOptions(msgspec.Struct, frozen=True, kw_only=True, forbid_unknown_fields=True):
    # queue level: how many can run at once, None is unbounded
    concurrency_limit: PositiveInt | None = None
    # keep finished entries around so they stay listed and count as duplicates
    retain_completed: bool = False
    auto_start: bool = True
    instance_name: str = "qthrottle"

    # entry level defaults, 0 happens first
    default_priority: int = 100
    default_key: Any = None
    logging: bool = False
    catch_errors: bool = False
    skip_duplicate_keys: bool = False
    error_on_duplicate: bool = False

    # no more than rate_limit_max_per_window calls in any rate_limit_window_ms
    # and no call within min_inter_call_delay_ms of the previous one
    rate_limit_enabled: bool = False
    rate_limit_window_ms: Milliseconds = 60000.0
    rate_limit_max_per_window: NonNegativeInt = 1
    min_inter_call_delay_ms: Milliseconds = 0.0
    min_wait_floor_ms: Milliseconds = 10.0
    # a recomputed wait target closer than this to the previous one is the same attempt
    new_attempt_threshold_ms: Milliseconds = 20.0


ENTRY_OPTIONS = frozenset(
    {"logging", "catch_errors", "skip_duplicate_keys", "error_on_duplicate", "rate_limit_enabled"}
)


def build_options(options: dict[str, Any] | None = None) -> QOptions:
    try:
        return msgspec.convert(options or {}, QOptions)
    except msgspec.ValidationError as e:
        raise InvalidConfigurationError(f"invalid options: {e}") from e


def merge_options(base: QOptions, overrides: dict[str, Any]) -> QOptions:
    """
    overlay per-entry overrides onto the queue options

    only keys in `ENTRY_OPTIONS` may be overridden; the result is validated again
    """
    if not overrides:
        return base

    invalid = sorted(set(overrides) - ENTRY_OPTIONS)
    if invalid:
        raise InvalidConfigurationError(f"invalid entry options {','.join(invalid)}")

    return build_options({**msgspec.structs.asdict(base), **overrides})
