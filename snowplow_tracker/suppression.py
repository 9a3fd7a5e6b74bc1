from __future__ import annotations

import contextvars
from collections.abc import Generator
from contextlib import contextmanager

_tracking_suppressed: contextvars.ContextVar[bool] = contextvars.ContextVar(
    "_tracking_suppressed", default=False
)


def is_suppressed() -> bool:
    """Whether a L{suppress_tracking} block is active in the current
    context."""
    return _tracking_suppressed.get()


@contextmanager
def suppress_tracking() -> Generator[None, None, None]:
    """Silence every tracker in nested calls.

    While active, C{Tracker.track*} returns C{None} without building a
    payload and C{Tracker.flush} leaves the emitters alone.
    """
    token = _tracking_suppressed.set(True)
    try:
        yield
    finally:
        _tracking_suppressed.reset(token)
