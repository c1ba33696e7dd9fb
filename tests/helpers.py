from __future__ import annotations

from typing import Any

from qthrottle.options import QOptions
from qthrottle.types import QEntry


def make_entry(id: int, priority: int = 100, key: Any = None, **kw: Any) -> QEntry:
    return QEntry(id=id, action=lambda: None, options=QOptions(), priority=priority, key=key, queued_at=0.0, **kw)
