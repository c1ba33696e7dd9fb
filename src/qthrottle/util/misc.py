from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, cast

from ..exceptions import NotAFunctionError


def check_callable(func: Any, what: str = "function") -> Callable[..., Any]:
    if not callable(func):
        raise NotAFunctionError(f"expected {what} but got {type(func).__name__}")
    return func


def _accepts_argument(func: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False

    return any(
        p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL) for p in signature.parameters.values()
    )


def invoke_action(action: Callable[..., Any], entry: Any) -> Any:
    """call a zero or one argument action, handing it the entry when it takes one"""
    if _accepts_argument(action):
        return action(entry)
    return action()


async def await_if_async[T](arg: T | Awaitable[T]) -> T:
    if inspect.isawaitable(arg):
        return await cast(Awaitable[T], arg)
    return cast(T, arg)
