from __future__ import annotations

import logging
import math
from typing import Dict, Hashable, List, Optional

from shared.utils.common import monotonic_millis

logger = logging.getLogger(__name__)


class SessionError(Exception):
    pass


class ClientSession:
    """
    Connection-scoped bookkeeping for in-flight requests and latency samples.

    The codec stays stateless; anything that needs memory across frames
    (when did I ask for history? how long did the join take?) lives here,
    one instance per connection.
    """

    def __init__(self) -> None:
        self._pending: Dict[Hashable, float] = {}
        self._samples: Dict[str, List[float]] = {}
        self._counters: Dict[str, int] = {}

    def start(self, key: Hashable) -> None:
        """Mark a request as in flight. Restarting a key resets its clock."""
        self._pending[key] = monotonic_millis()

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending

    def finish(self, key: Hashable, metric: str) -> Optional[float]:
        started = self._pending.pop(key, None)
        if started is None:
            logger.debug("No pending request for %s", key)
            return None
        latency = monotonic_millis() - started
        self.record(metric, latency)
        return latency

    def record(self, metric: str, value_ms: float) -> None:
        self._samples.setdefault(metric, []).append(float(value_ms))

    def increment(self, counter: str, amount: int = 1) -> int:
        self._counters[counter] = self._counters.get(counter, 0) + amount
        return self._counters[counter]

    def counter(self, counter: str) -> int:
        return self._counters.get(counter, 0)

    def samples(self, metric: str) -> List[float]:
        return list(self._samples.get(metric, []))

    def count(self, metric: str) -> int:
        return len(self._samples.get(metric, []))

    def percentile(self, metric: str, p: float) -> Optional[float]:
        """Linear-interpolated percentile (0-100) of a metric, None without samples."""
        if not 0 <= p <= 100:
            raise SessionError(f"percentile must be within 0-100, got {p}")
        values = sorted(self._samples.get(metric, []))
        if not values:
            return None
        rank = (len(values) - 1) * p / 100
        low = math.floor(rank)
        high = math.ceil(rank)
        if low == high:
            return values[low]
        return values[low] + (values[high] - values[low]) * (rank - low)

    def clear(self) -> None:
        self._pending.clear()
        self._samples.clear()
        self._counters.clear()
