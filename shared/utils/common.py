from __future__ import annotations

import time


def epoch_millis() -> int:
    """Wall-clock time in epoch milliseconds, the unit the chat service stamps messages with."""
    return int(time.time() * 1000)


def monotonic_millis() -> float:
    """Monotonic clock in milliseconds, for measuring elapsed time locally."""
    return time.perf_counter() * 1000


__all__ = ["epoch_millis", "monotonic_millis"]
