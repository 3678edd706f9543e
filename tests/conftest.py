"""
Pytest configuration and fixtures for quotacache tests.
"""

from __future__ import annotations

import os
from typing import Generator
from unittest.mock import patch

import pytest

from quotacache.cache import CacheRegistry
from quotacache.config import CacheConfig, clear_settings_cache
from quotacache.stores import MemoryStore

# Divisible by one minute, so time units start on a boundary.
START_MILLISECONDS = 1_200_000_000_000


class FakeClock:
    """Controllable wall clock in milliseconds."""

    def __init__(self, milliseconds: int = START_MILLISECONDS) -> None:
        self.milliseconds = milliseconds

    def __call__(self) -> int:
        return self.milliseconds

    def advance(self, milliseconds: int) -> None:
        self.milliseconds += milliseconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock starting on a time-unit boundary."""
    return FakeClock()


@pytest.fixture
def config() -> CacheConfig:
    """Provide a default runtime configuration (60 s time units)."""
    return CacheConfig()


@pytest.fixture
def store() -> MemoryStore:
    """Provide an unbounded in-memory host store."""
    return MemoryStore()


@pytest.fixture
def warnings_seen() -> list[tuple[str, BaseException | None]]:
    """Collect warnings emitted through the diagnostics sink."""
    return []


@pytest.fixture
def registry(
    store: MemoryStore,
    config: CacheConfig,
    clock: FakeClock,
    warnings_seen: list[tuple[str, BaseException | None]],
) -> CacheRegistry:
    """Provide a registry over the memory store with a fake clock."""
    return CacheRegistry(
        store,
        config=config,
        sink=lambda message, error: warnings_seen.append((message, error)),
        time_source=clock,
    )


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Provide QUOTACACHE_* environment variables for testing."""
    env_vars = {
        "QUOTACACHE_EXPIRY_MILLISECONDS": "1000",
        "QUOTACACHE_WARNINGS_ENABLED": "true",
        "QUOTACACHE_CACHE_PREFIX": "test-",
        "QUOTACACHE_STORE_CAPACITY": "4096",
        "QUOTACACHE_LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars
    clear_settings_cache()
