"""
Host store interface.

A host store is a synchronous, size-limited string key-value store. The
cache layers buckets, TTLs and eviction on top of it and only needs the
operations declared here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class HostStore(ABC):
    """Abstract interface for host store implementations."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get a record, or None if absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a record.

        Raises:
            QuotaExceededError: If the write would exceed capacity.
            StoreError: On any other failure.
        """
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a record. Missing keys are ignored."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys, in a stable order."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Number of records."""
        ...

    @property
    def capacity(self) -> int | None:
        """Capacity in characters, or None when unbounded."""
        return None

    @property
    def usage(self) -> int:
        """Characters currently used by keys and values."""
        return sum(len(key) + len(self.get(key) or "") for key in self.keys())


def record_size(key: str, value: str) -> int:
    """Characters a record occupies against a store's capacity."""
    return len(key) + len(value)
