"""In-process host store with a character quota."""

from __future__ import annotations

from quotacache.exceptions import ConfigurationError, QuotaExceededError
from quotacache.stores.base import HostStore, record_size


class MemoryStore(HostStore):
    """Dict-backed host store that refuses writes beyond its capacity.

    Usage counts key and value characters, the way browser storage quotas
    do. Suitable for tests and single-process use.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity <= 0:
            raise ConfigurationError(
                "Store capacity must be positive", context={"capacity": capacity}
            )
        self._capacity = capacity
        self._records: dict[str, str] = {}
        self._usage = 0

    @property
    def capacity(self) -> int | None:
        return self._capacity

    @property
    def usage(self) -> int:
        return self._usage

    def get(self, key: str) -> str | None:
        return self._records.get(key)

    def set(self, key: str, value: str) -> None:
        previous = self._records.get(key)
        freed = record_size(key, previous) if previous is not None else 0
        new_usage = self._usage - freed + record_size(key, value)

        if self._capacity is not None and new_usage > self._capacity:
            raise QuotaExceededError(
                "Host store quota exceeded",
                context={
                    "key": key,
                    "required": record_size(key, value),
                    "capacity": self._capacity,
                },
            )

        self._records[key] = value
        self._usage = new_usage

    def remove(self, key: str) -> None:
        value = self._records.pop(key, None)
        if value is not None:
            self._usage -= record_size(key, value)

    def keys(self) -> list[str]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        """Drop every record, cache or not."""
        self._records.clear()
        self._usage = 0
