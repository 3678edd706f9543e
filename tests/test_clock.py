"""
Tests for TTL time units.
"""

from __future__ import annotations

from quotacache.cache.clock import TTLClock
from quotacache.config import CacheConfig


class TestTTLClock:
    """Tests for TTLClock."""

    def test_now_floors_to_time_units(self, config: CacheConfig, clock) -> None:
        """Test that now() counts whole time units since the epoch."""
        start = clock.milliseconds
        ttl_clock = TTLClock(config, clock)
        assert ttl_clock.now() == start // 60_000

        clock.advance(59_999)
        assert ttl_clock.now() == start // 60_000

        clock.advance(1)
        assert ttl_clock.now() == start // 60_000 + 1

    def test_duration_change_applies_immediately(
        self, config: CacheConfig, clock
    ) -> None:
        """Test that the configured duration is read on every call."""
        start = clock.milliseconds
        ttl_clock = TTLClock(config, clock)
        config.expiry_milliseconds = 1000
        assert ttl_clock.now() == start // 1000

    def test_expiry_of(self, config: CacheConfig) -> None:
        """Test expiration arithmetic."""
        assert TTLClock(config).expiry_of(100, 5) == 105

    def test_fractional_ttl_is_floored(self, config: CacheConfig) -> None:
        """Test that a fractional TTL still yields an integer expiration."""
        expiry = TTLClock(config).expiry_of(100, 1.5)
        assert expiry == 101
        assert isinstance(expiry, int)

    def test_max_representable(self, config: CacheConfig) -> None:
        """Test the synthetic expiration for entries without TTL."""
        ttl_clock = TTLClock(config)
        assert ttl_clock.max_representable() == 8_640_000_000_000_000 // 60_000

        config.expiry_milliseconds = 1
        assert ttl_clock.max_representable() == 8_640_000_000_000_000
