# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Per-request cancellation context.

A RequestContext travels on the HttpRequest itself, so every interceptor link and the
terminal transport observe the same token. A ContextVar-backed ambient context lets
callers set a deadline or cancel flag once around a block of calls instead of passing it
to every ``execute``.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class RequestContext:
    timeout: float | None = None
    cancel_event: threading.Event | None = None
    values: dict[str, Any] = field(default_factory=dict)
    created_at: float = field(default_factory=time.monotonic)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def cancel(self) -> None:
        if self.cancel_event is not None:
            self.cancel_event.set()

    def remaining_timeout(self) -> float | None:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self.timeout is None:
            return None
        return max(0.0, self.timeout - (time.monotonic() - self.created_at))

    @classmethod
    def with_cancel(cls, timeout: float | None = None, **values: Any) -> RequestContext:
        """Create a context that owns a fresh cancel flag."""
        return cls(timeout=timeout, cancel_event=threading.Event(), values=dict(values))


_current_request_context: ContextVar[RequestContext | None] = ContextVar("httpchain_request_context", default=None)


def get_request_context() -> RequestContext:
    """Return the current ambient request context."""
    return _current_request_context.get() or RequestContext()


@contextmanager
def request_context(**overrides: Any) -> Iterator[RequestContext]:
    """
    Context manager that layers overrides onto the ambient RequestContext.

    None-valued overrides are ignored to preserve outer context values. The deadline
    clock restarts when a timeout override is given.
    """
    current = _current_request_context.get() or RequestContext()
    filtered = {key: value for key, value in overrides.items() if value is not None}
    if "timeout" in filtered:
        filtered.setdefault("created_at", time.monotonic())
    new_context = replace(current, **filtered) if filtered else current
    token = _current_request_context.set(new_context)
    try:
        yield new_context
    finally:
        _current_request_context.reset(token)


__all__ = ["RequestContext", "get_request_context", "request_context"]
