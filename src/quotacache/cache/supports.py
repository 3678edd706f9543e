"""
Host store capability probe.

The probe writes and removes a test record once and remembers the outcome
for the lifetime of the probe. It is run lazily, on the first cache
operation, rather than at construction time.
"""

from __future__ import annotations

from quotacache.exceptions import QuotaExceededError, StoreError
from quotacache.logging import get_logger
from quotacache.stores.base import HostStore
from quotacache.types import SupportState

logger = get_logger(__name__)

PROBE_KEY = "__lscachetest__"


class StoreProbe:
    """One-shot capability check for a host store."""

    def __init__(self, store: HostStore | None) -> None:
        self._store = store
        self.state = SupportState.UNKNOWN

    def supported(self) -> bool:
        """Whether the host store accepts writes. Probed at most once."""
        if self.state is SupportState.UNKNOWN:
            self.state = self._probe()
            logger.debug(f"Host store probe: {self.state.value}")
        return self.state is SupportState.SUPPORTED

    def _probe(self) -> SupportState:
        if self._store is None:
            return SupportState.UNSUPPORTED

        try:
            self._store.set(PROBE_KEY, PROBE_KEY)
            self._store.remove(PROBE_KEY)
        except QuotaExceededError:
            # A full store that already holds data is still usable.
            if len(self._store):
                return SupportState.SUPPORTED
            return SupportState.UNSUPPORTED
        except StoreError as e:
            logger.error(f"Host store unusable: {e}")
            return SupportState.UNSUPPORTED
        return SupportState.SUPPORTED
