"""
Rolling volume window over timestamped trade values.

Keeps every value recorded within a trailing horizon (24h by default) and
answers arbitrary sub-window sums ("volume in the last N minutes").
"""

import logging
import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000
DEFAULT_HORIZON_MINUTES = 24 * 60


def wall_clock_ms() -> int:
    """Current time in milliseconds."""
    return int(time.time() * 1000)


@dataclass(slots=True)
class VolumeEntry:
    """Single value recorded at a timestamp."""

    timestamp_ms: int
    value: float


class VolumeWindow:
    """
    Rolling sum accumulator with a fixed horizon.

    Entries arrive in whatever order the transport delivers them. While
    timestamps are non-decreasing the queue is evicted from the front in
    O(k); once an out-of-order timestamp has been seen, eviction falls
    back to a full scan so stale entries behind a newer one are dropped
    too.

    Example:
        window = VolumeWindow(horizon_minutes=1440)
        window.record(trade.timestamp_ms, trade.transaction_value)
        last_5m = window.sum(5)
    """

    def __init__(
        self,
        horizon_minutes: int = DEFAULT_HORIZON_MINUTES,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Args:
            horizon_minutes: Retention horizon in minutes
            clock: Callable returning "now" in ms (defaults to wall clock)
        """
        if horizon_minutes <= 0:
            raise ValueError("horizon_minutes must be positive")

        self._horizon_ms = horizon_minutes * MS_PER_MINUTE
        self._clock = clock or wall_clock_ms
        self._items: Deque[VolumeEntry] = deque()
        self._newest_ts: Optional[int] = None
        self._ordered = True

    @property
    def horizon_ms(self) -> int:
        return self._horizon_ms

    def record(self, timestamp_ms: int, value: float) -> None:
        """
        Record a value at a timestamp.

        Non-finite or negative values are stored as 0 so sums never go
        negative.
        """
        if not _is_clean_value(value):
            logger.debug(f"Coercing volume value {value!r} at {timestamp_ms} to 0")
            value = 0.0

        if self._newest_ts is not None and timestamp_ms < self._newest_ts:
            self._ordered = False
        if self._newest_ts is None or timestamp_ms > self._newest_ts:
            self._newest_ts = timestamp_ms

        self._items.append(VolumeEntry(timestamp_ms, float(value)))
        self._evict_old(self._newest_ts)

    def _evict_old(self, reference_ms: int) -> int:
        """Remove entries older than the horizon. Returns count removed."""
        if not self._items:
            return 0

        cutoff = reference_ms - self._horizon_ms
        before = len(self._items)

        if self._ordered:
            while self._items and self._items[0].timestamp_ms < cutoff:
                self._items.popleft()
        else:
            self._items = deque(e for e in self._items if e.timestamp_ms >= cutoff)
            if _is_sorted(self._items):
                self._ordered = True

        return before - len(self._items)

    def sum(self, window_minutes: float, now_ms: Optional[int] = None) -> float:
        """
        Sum of values with now - window <= timestamp <= now.

        Entries stamped after the reference time are not counted.

        Args:
            window_minutes: Sub-window length in minutes
            now_ms: Reference time (defaults to the clock)

        Returns:
            Sum of matching values, 0.0 when nothing falls in range
        """
        now = self._clock() if now_ms is None else now_ms
        cutoff = now - window_minutes * MS_PER_MINUTE
        total = 0.0
        for entry in self._items:
            if cutoff <= entry.timestamp_ms <= now:
                total += entry.value
        return total

    def entries(self) -> List[VolumeEntry]:
        """Retained entries in arrival order."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def clear(self) -> None:
        self._items.clear()
        self._newest_ts = None
        self._ordered = True


def _is_clean_value(value: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0


def _is_sorted(items: Deque[VolumeEntry]) -> bool:
    prev = None
    for entry in items:
        if prev is not None and entry.timestamp_ms < prev:
            return False
        prev = entry.timestamp_ms
    return True
