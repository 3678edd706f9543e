"""TTL time units derived from the wall clock."""

from __future__ import annotations

import math
import time
from typing import Callable

from quotacache.config import ConfigView


def wall_clock_milliseconds() -> int:
    """Milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class TTLClock:
    """Converts wall-clock time into configurable time units.

    The unit duration is read from the configuration on every call, so a
    duration change applies to the very next computation.
    """

    def __init__(
        self,
        config: ConfigView,
        time_source: Callable[[], int] = wall_clock_milliseconds,
    ) -> None:
        self._config = config
        self._time_source = time_source

    def now(self) -> int:
        """Current time in time units since the epoch."""
        return self._time_source() // self._config.expiry_milliseconds

    def expiry_of(self, now: int, ttl_units: float) -> int:
        """Expiration for a TTL; fractional units are floored so the record stays an integer."""
        return now + math.floor(ttl_units)

    def max_representable(self) -> int:
        """Expiration used for entries stored without a TTL."""
        return self._config.max_date
