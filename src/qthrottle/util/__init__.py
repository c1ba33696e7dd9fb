from .misc import await_if_async, check_callable, invoke_action

__all__ = ["await_if_async", "check_callable", "invoke_action"]
