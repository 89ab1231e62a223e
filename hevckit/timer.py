"""Wall-clock timer measured from the first reading."""

from __future__ import annotations

import threading
import time

_lock = threading.Lock()
_initial_ns: int | None = None


def _trunc_div(value: int, divisor: int) -> int:
    """Integer division that rounds toward zero."""
    if value >= 0:
        return value // divisor
    return -((-value) // divisor)


def get_time_us() -> int:
    """Microseconds elapsed since the first call to this timer."""
    global _initial_ns
    now = time.time_ns()
    with _lock:
        if _initial_ns is None:
            _initial_ns = now
        initial = _initial_ns
    return _trunc_div(now - initial, 1000)


def get_time_ms() -> int:
    """Milliseconds elapsed since the first call to this timer."""
    return _trunc_div(get_time_us(), 1000)