"""
Core types for quotacache.

This module defines the small value types shared across the cache:
- SupportState: tri-state result of the host store capability probe
- EvictionCandidate: metadata of one stored entry considered for eviction
- BucketStats: summary of one bucket's contents
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SupportState(str, Enum):
    """Outcome of the host store capability probe."""

    UNKNOWN = "unknown"
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class EvictionCandidate:
    """One logical entry that may be evicted to free space.

    Attributes:
        key: Logical key inside the bucket.
        size: Length of the stored value record (0 if unreadable).
        expiration: Expiration in time units; entries without TTL carry
            the maximum representable value.
    """

    key: str
    size: int
    expiration: int


@dataclass(frozen=True)
class BucketStats:
    """Summary of one bucket's stored entries."""

    namespace: str
    entries: int
    expiring: int
    expired: int
    characters: int

    def to_dict(self) -> dict[str, str | int]:
        """Convert to dictionary for display."""
        return {
            "namespace": self.namespace,
            "entries": self.entries,
            "expiring": self.expiring,
            "expired": self.expired,
            "characters": self.characters,
        }
