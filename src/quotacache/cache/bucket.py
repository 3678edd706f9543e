"""
CacheBucket: TTL key-value cache for one namespace of a host store.

Each logical entry is a value record plus an optional expiration record
holding the expiry (in time units, base 10). Writes go value first, then
expiration, so an interrupted write leaves an entry that looks
non-expiring rather than an expiration marker without a value. Readers
treat either half missing as absent.

Expiry is enforced lazily: get() evicts an expired entry when it reads it,
and flush_expired() sweeps the namespace on demand. There is no background
sweep.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator

from quotacache.cache.clock import TTLClock
from quotacache.cache.codec import ValueCodec
from quotacache.cache.diagnostics import Diagnostics
from quotacache.cache.eviction import EvictionPlanner
from quotacache.cache.keys import KeyCodec
from quotacache.config import ConfigView
from quotacache.exceptions import QuotaExceededError, SerializationError, StoreError
from quotacache.logging import get_logger, log_context
from quotacache.stores.base import HostStore
from quotacache.types import BucketStats, EvictionCandidate

logger = get_logger(__name__)

EXPIRY_RADIX = 10


class CacheBucket:
    """Get/set/remove/flush for one namespace.

    Every operation is a safe no-op (returning None or False) when the host
    store is reported unsupported.
    """

    def __init__(
        self,
        store: HostStore,
        config: ConfigView,
        diagnostics: Diagnostics,
        supported: Callable[[], bool],
        namespace: str = "",
        clock: TTLClock | None = None,
        codec: ValueCodec | None = None,
        planner: EvictionPlanner | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._diagnostics = diagnostics
        self._supported = supported
        self.keys_codec = KeyCodec(config, namespace)
        self.clock = clock or TTLClock(config)
        self.codec = codec or ValueCodec()
        self.planner = planner or EvictionPlanner()

    @property
    def namespace(self) -> str:
        return self.keys_codec.namespace

    def __repr__(self) -> str:
        return f"CacheBucket(namespace={self.namespace!r})"

    def get(self, key: str) -> Any | None:
        """Return the stored value, or None if absent, expired or unreadable."""
        value_key = self.keys_codec.value_key(key)
        if not self._supported():
            return None

        with log_context(namespace=self.namespace, operation="get"):
            try:
                expiration = self._expiration_of(key)
                if expiration is not None and self.clock.now() >= expiration:
                    self._flush_item(key)
                    return None
                raw = self._store.get(value_key)
            except StoreError as e:
                self._diagnostics.warn(f"Could not read item with key '{key}'", e)
                return None

        if raw is None:
            return None
        return self.codec.decode(raw)

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Store a value, optionally expiring after `ttl` time units.

        A falsy ttl stores the entry without expiration and clears any
        previous one. When the store is over quota, entries of this bucket
        are evicted soonest-to-expire first and the write is retried once;
        the value and the expiration record each get one such retry.

        Returns:
            True if the value was stored.

        Raises:
            InvalidKeyError: If the default bucket is given a key containing "/".
        """
        value_key = self.keys_codec.value_key(key)
        if not self._supported():
            return False

        try:
            encoded = self.codec.encode(value)
        except SerializationError as e:
            logger.debug(f"Refusing unserializable value for {key!r}: {e}")
            return False

        with log_context(namespace=self.namespace, operation="set"):
            if not self._write(key, value_key, encoded):
                return False

            expiration_key = self.keys_codec.expiration_key(key)
            if not ttl:
                if self._remove_record(key, expiration_key):
                    return True
                # A stale marker would expire the new value early.
                self._remove_record(key, value_key)
                return False

            expires_at = self.clock.expiry_of(self.clock.now(), ttl)
            if not self._write(key, expiration_key, str(expires_at), exclude=key):
                # Never leave the value behind looking non-expiring.
                self._remove_record(key, value_key)
                return False
        return True

    def remove(self, key: str) -> None:
        """Remove an entry. Missing entries and store failures are ignored."""
        self.keys_codec.value_key(key)  # rejects malformed keys
        if not self._supported():
            return
        with log_context(namespace=self.namespace, operation="remove"):
            self._flush_item(key)

    def flush(self) -> None:
        """Remove every entry of this bucket, leaving other data untouched."""
        if not self._supported():
            return
        with log_context(namespace=self.namespace, operation="flush"):
            for key in self._each_key():
                self._flush_item(key)

    def flush_expired(self) -> None:
        """Remove only the entries of this bucket whose expiration has passed."""
        if not self._supported():
            return
        with log_context(namespace=self.namespace, operation="flush_expired"):
            now = self.clock.now()
            for key in self._each_key():
                expiration = self._known_expiration(key)
                if expiration is not None and now >= expiration:
                    self._flush_item(key)

    def keys(self) -> list[str]:
        """Logical keys currently stored in this bucket."""
        if not self._supported():
            return []
        return list(self._each_key())

    def stats(self) -> BucketStats:
        """Count entries and characters used by this bucket."""
        entries = expiring = expired = characters = 0
        if self._supported():
            now = self.clock.now()
            for key in self._each_key():
                entries += 1
                expiration = self._known_expiration(key)
                if expiration is not None:
                    expiring += 1
                    if now >= expiration:
                        expired += 1
                characters += self._value_size(key)
        return BucketStats(
            namespace=self.namespace,
            entries=entries,
            expiring=expiring,
            expired=expired,
            characters=characters,
        )

    def has_expiring_entries(self) -> bool:
        """Whether any entry of this bucket carries an expiration record."""
        if not self._supported():
            return False
        return any(self._known_expiration(key) is not None for key in self._each_key())

    def _each_key(self) -> Iterator[str]:
        try:
            physical_keys = self._store.keys()
        except StoreError as e:
            self._diagnostics.warn("Could not list cache keys", e)
            return
        # Walk from the last key so removals never skip an unvisited one.
        for index in range(len(physical_keys) - 1, -1, -1):
            key = self.keys_codec.logical_key(physical_keys[index])
            if key is not None:
                yield key

    def _expiration_of(self, key: str) -> int | None:
        """Stored expiration of an entry; None if absent or malformed.

        Raises:
            StoreError: If the expiration record cannot be read.
        """
        raw = self._store.get(self.keys_codec.expiration_key(key))
        if not raw:
            return None
        try:
            return int(raw, EXPIRY_RADIX)
        except ValueError:
            logger.debug(f"Ignoring malformed expiration {raw!r} for {key!r}")
            return None

    def _known_expiration(self, key: str) -> int | None:
        try:
            return self._expiration_of(key)
        except StoreError as e:
            logger.debug(f"Could not read expiration of {key!r}, treating it as none: {e}")
            return None

    def _value_size(self, key: str) -> int:
        try:
            return len(self._store.get(self.keys_codec.value_key(key)) or "")
        except StoreError as e:
            logger.debug(f"Could not size {key!r}, counting it as empty: {e}")
            return 0

    def _write(
        self,
        key: str,
        physical_key: str,
        payload: str,
        exclude: str | None = None,
    ) -> bool:
        """Write one record, evicting and retrying once if the store is full."""
        try:
            self._store.set(physical_key, payload)
        except QuotaExceededError:
            self._evict_for(len(payload), exclude)
            try:
                self._store.set(physical_key, payload)
            except StoreError as e:
                self._diagnostics.warn(
                    f"Could not add item with key '{key}', perhaps it's too big?", e
                )
                return False
        except StoreError as e:
            self._diagnostics.warn(f"Could not add item with key '{key}'", e)
            return False
        return True

    def _remove_record(self, key: str, physical_key: str) -> bool:
        try:
            self._store.remove(physical_key)
        except StoreError as e:
            self._diagnostics.warn(f"Could not remove item with key '{key}'", e)
            return False
        return True

    def _flush_item(self, key: str) -> None:
        self._remove_record(key, self.keys_codec.value_key(key))
        self._remove_record(key, self.keys_codec.expiration_key(key))

    def _candidates(self, exclude: str | None = None) -> Iterator[EvictionCandidate]:
        max_date = self.clock.max_representable()
        for key in self._each_key():
            if key == exclude:
                continue
            expiration = self._known_expiration(key)
            yield EvictionCandidate(
                key=key,
                size=self._value_size(key),
                expiration=max_date if expiration is None else expiration,
            )

    def _evict_for(self, required_size: int, exclude: str | None = None) -> None:
        evictions = self.planner.plan(self._candidates(exclude), required_size)
        logger.debug(
            f"Evicting {len(evictions)} entries to free {required_size} characters"
        )
        for candidate in evictions:
            self._diagnostics.warn(
                f"Cache is full, removing item with key '{candidate.key}'"
            )
            self._flush_item(candidate.key)
