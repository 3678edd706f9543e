"""
CacheRegistry: entry point owning the default bucket and named buckets.

The registry owns the runtime configuration, the diagnostics sink and the
capability probe, and hands buckets only what they read. Buckets never
reference the registry.

Usage:
    registry = CacheRegistry(SQLiteStore("cache.db", capacity=5_000_000))
    registry.set("greeting", {"text": "hi"}, 10)
    registry.bucket("sessions").get("abc")
"""

from __future__ import annotations

from typing import Any, Callable

from quotacache.cache.bucket import CacheBucket
from quotacache.cache.clock import TTLClock, wall_clock_milliseconds
from quotacache.cache.codec import ValueCodec
from quotacache.cache.diagnostics import Diagnostics, WarningSink
from quotacache.cache.keys import validate_namespace
from quotacache.cache.supports import StoreProbe
from quotacache.config import CacheConfig, Settings
from quotacache.stores.base import HostStore
from quotacache.types import SupportState


class CacheRegistry:
    """Default bucket, named bucket lookup and process-wide cache settings."""

    def __init__(
        self,
        store: HostStore | None,
        config: CacheConfig | None = None,
        sink: WarningSink | None = None,
        time_source: Callable[[], int] = wall_clock_milliseconds,
        codec: ValueCodec | None = None,
    ) -> None:
        """Initialize CacheRegistry.

        Args:
            store: Host store shared by all buckets. None behaves as an
                unsupported store.
            config: Runtime configuration; defaults to 60 s time units and
                warnings off.
            sink: Optional callback receiving every emitted warning.
            time_source: Wall clock in milliseconds, replaceable for tests.
            codec: Value codec shared by all buckets.
        """
        self.store = store
        self.config = config or CacheConfig()
        self.diagnostics = Diagnostics(self.config, sink)
        self._probe = StoreProbe(store)
        self._time_source = time_source
        self._codec = codec or ValueCodec()
        self.buckets: dict[str, CacheBucket] = {}
        self.global_bucket = self._create_bucket("")

    @classmethod
    def from_settings(
        cls,
        store: HostStore | None,
        settings: Settings,
        sink: WarningSink | None = None,
    ) -> CacheRegistry:
        """Create a registry configured from environment settings."""
        return cls(store, config=CacheConfig.from_settings(settings), sink=sink)

    def _create_bucket(self, namespace: str) -> CacheBucket:
        return CacheBucket(
            self.store,
            self.config,
            self.diagnostics,
            self.supported,
            namespace=namespace,
            clock=TTLClock(self.config, self._time_source),
            codec=self._codec,
        )

    def bucket(self, name: str) -> CacheBucket:
        """Get an existing bucket or create and register one.

        The empty name refers to the default bucket.

        Raises:
            InvalidNamespaceError: If the name is not a string or contains "/".
        """
        validate_namespace(name)
        if not name:
            return self.global_bucket

        bucket = self.buckets.get(name)
        if bucket is None:
            bucket = self._create_bucket(name)
            self.buckets[name] = bucket
        return bucket

    # Default bucket as top level API
    def get(self, key: str) -> Any | None:
        return self.global_bucket.get(key)

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        return self.global_bucket.set(key, value, ttl)

    def remove(self, key: str) -> None:
        self.global_bucket.remove(key)

    def flush(self) -> None:
        self.global_bucket.flush()

    def flush_expired(self) -> None:
        self.global_bucket.flush_expired()

    def supported(self) -> bool:
        """Whether the host store is usable; probed once, then cached."""
        return self._probe.supported()

    @property
    def support_state(self) -> SupportState:
        return self._probe.state

    def get_expiry_milliseconds(self) -> int:
        """Milliseconds each time unit in set()'s ttl argument represents."""
        return self.config.expiry_milliseconds

    def get_max_date(self) -> int:
        """Expiration assigned to entries stored without a TTL."""
        return self.config.max_date

    def set_expiry_milliseconds(self, milliseconds: int) -> None:
        """Set the number of milliseconds one time unit represents.

        Sample values:
            1: each time unit = 1 millisecond
            1000: each time unit = 1 second
            60000: each time unit = 1 minute (default)
            3600000: each time unit = 1 hour

        Stored expirations are not rewritten: they are read under the new
        duration, which shifts when they expire.

        Raises:
            ConfigurationError: If milliseconds is not a positive integer.
        """
        previous = self.config.expiry_milliseconds
        self.config.expiry_milliseconds = milliseconds
        if milliseconds == previous or not self.diagnostics.enabled:
            return

        affected = [
            bucket.namespace or "<default>"
            for bucket in (self.global_bucket, *self.buckets.values())
            if bucket.has_expiring_entries()
        ]
        if affected:
            self.diagnostics.warn(
                f"Time unit changed from {previous} ms to {milliseconds} ms while "
                f"buckets {', '.join(affected)} hold expiring items; "
                "their expirations shift accordingly"
            )

    def enable_warnings(self, enabled: bool) -> None:
        """Set whether to emit warnings when items are evicted or refused."""
        self.config.warnings_enabled = enabled

    def warn(self, message: str, error: BaseException | None = None) -> None:
        self.diagnostics.warn(message, error)
