"""
Eviction planning for over-quota writes.

When the host store refuses a write, entries of the bucket being written are
removed soonest-to-expire first until the freed characters cover the new
value. Entries without a TTL sort last, so they are only evicted once every
expiring entry is gone. This is not an LRU: no access history is kept.
"""

from __future__ import annotations

from typing import Iterable

from quotacache.types import EvictionCandidate


class EvictionPlanner:
    """Orders stored entries for eviction."""

    def plan(
        self,
        candidates: Iterable[EvictionCandidate],
        required_size: int,
    ) -> list[EvictionCandidate]:
        """Choose entries to evict, in eviction order.

        Args:
            candidates: Live entries of the namespace.
            required_size: Encoded size of the value being written.

        Returns:
            Entries to remove, soonest-to-expire first. Stops as soon as their
            combined size reaches required_size, or when candidates run out.
            Equal expirations keep no particular order.
        """
        # Latest expiration first; popping from the tail yields the soonest.
        stored = sorted(candidates, key=lambda c: c.expiration, reverse=True)

        evictions: list[EvictionCandidate] = []
        remaining = required_size
        while stored and remaining > 0:
            candidate = stored.pop()
            evictions.append(candidate)
            remaining -= candidate.size
        return evictions
