"""
Configuration management using pydantic-settings.

Two layers:
- Settings: loaded once from QUOTACACHE_* environment variables and .env files.
- CacheConfig: the mutable, process-wide runtime configuration that a
  CacheRegistry owns and hands to its buckets as a read-only ConfigView.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Protocol

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from quotacache.exceptions import ConfigurationError

# Largest wall-clock millisecond value a date can hold (epoch + 1e8 days).
MAX_DATE_MILLISECONDS = 8_640_000_000_000_000

DEFAULT_EXPIRY_MILLISECONDS = 60 * 1000
DEFAULT_CACHE_PREFIX = "lscache-"
DEFAULT_EXPIRATION_SUFFIX = "-expires_at"


def calculate_max_date(expiry_milliseconds: int) -> int:
    """Largest expiration timestamp representable in the given time unit."""
    return MAX_DATE_MILLISECONDS // expiry_milliseconds


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Optional:
        QUOTACACHE_EXPIRY_MILLISECONDS: Milliseconds per TTL time unit
        QUOTACACHE_WARNINGS_ENABLED: Emit diagnostics on eviction/refused writes
        QUOTACACHE_CACHE_PREFIX: Prefix of every physical cache key
        QUOTACACHE_EXPIRATION_SUFFIX: Suffix of expiration marker keys
        QUOTACACHE_STORE_PATH: SQLite file used by the CLI
        QUOTACACHE_STORE_CAPACITY: Store capacity in characters
        QUOTACACHE_LOG_LEVEL: Logging level
        QUOTACACHE_LOG_FILE: JSON-lines log file, console only if unset
    """

    model_config = SettingsConfigDict(
        env_prefix="QUOTACACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    EXPIRY_MILLISECONDS: int = Field(
        default=DEFAULT_EXPIRY_MILLISECONDS,
        gt=0,
        description="Milliseconds represented by one TTL time unit",
    )
    WARNINGS_ENABLED: bool = Field(
        default=False, description="Whether cache diagnostics are emitted"
    )
    CACHE_PREFIX: str = Field(
        default=DEFAULT_CACHE_PREFIX, description="Prefix for all cache keys"
    )
    EXPIRATION_SUFFIX: str = Field(
        default=DEFAULT_EXPIRATION_SUFFIX,
        min_length=1,
        description="Suffix for expiration marker keys",
    )

    STORE_PATH: Path = Field(
        default=Path(".quotacache/store.db"), description="SQLite host store file"
    )
    STORE_CAPACITY: int = Field(
        default=5 * 1024 * 1024,
        gt=0,
        description="Host store capacity in characters (keys plus values)",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Logging level"
    )
    LOG_FILE: Path | None = Field(
        default=None, description="JSON-lines log file written alongside the console"
    )

    def display(self) -> dict[str, str | int | bool]:
        """Return settings as a flat dict for display."""
        return {
            "EXPIRY_MILLISECONDS": self.EXPIRY_MILLISECONDS,
            "WARNINGS_ENABLED": self.WARNINGS_ENABLED,
            "CACHE_PREFIX": self.CACHE_PREFIX,
            "EXPIRATION_SUFFIX": self.EXPIRATION_SUFFIX,
            "STORE_PATH": str(self.STORE_PATH),
            "STORE_CAPACITY": self.STORE_CAPACITY,
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else "",
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()


class ConfigView(Protocol):
    """Read-only view of the registry configuration used by buckets."""

    @property
    def cache_prefix(self) -> str: ...

    @property
    def expiration_suffix(self) -> str: ...

    @property
    def expiry_milliseconds(self) -> int: ...

    @property
    def max_date(self) -> int: ...

    @property
    def warnings_enabled(self) -> bool: ...


class CacheConfig:
    """Mutable runtime configuration shared by every bucket of a registry.

    Changing the time-unit duration recomputes max_date. Expiration records
    already in the store keep their integer value and are read under the new
    duration.
    """

    def __init__(
        self,
        cache_prefix: str = DEFAULT_CACHE_PREFIX,
        expiration_suffix: str = DEFAULT_EXPIRATION_SUFFIX,
        expiry_milliseconds: int = DEFAULT_EXPIRY_MILLISECONDS,
        warnings_enabled: bool = False,
    ) -> None:
        if not expiration_suffix:
            raise ConfigurationError("Expiration suffix must be non-empty")
        self.cache_prefix = cache_prefix
        self.expiration_suffix = expiration_suffix
        self.warnings_enabled = warnings_enabled
        self.expiry_milliseconds = expiry_milliseconds

    @classmethod
    def from_settings(cls, settings: Settings) -> CacheConfig:
        """Build a runtime configuration from environment settings."""
        return cls(
            cache_prefix=settings.CACHE_PREFIX,
            expiration_suffix=settings.EXPIRATION_SUFFIX,
            expiry_milliseconds=settings.EXPIRY_MILLISECONDS,
            warnings_enabled=settings.WARNINGS_ENABLED,
        )

    @property
    def expiry_milliseconds(self) -> int:
        return self._expiry_milliseconds

    @expiry_milliseconds.setter
    def expiry_milliseconds(self, milliseconds: int) -> None:
        if isinstance(milliseconds, bool) or not isinstance(milliseconds, int) or milliseconds <= 0:
            raise ConfigurationError(
                "Time-unit duration must be a positive integer",
                context={"expiry_milliseconds": milliseconds},
            )
        self._expiry_milliseconds = milliseconds
        self._max_date = calculate_max_date(milliseconds)

    @property
    def max_date(self) -> int:
        return self._max_date

    def __repr__(self) -> str:
        return (
            f"CacheConfig(cache_prefix={self.cache_prefix!r}, "
            f"expiration_suffix={self.expiration_suffix!r}, "
            f"expiry_milliseconds={self._expiry_milliseconds!r}, "
            f"warnings_enabled={self.warnings_enabled!r})"
        )
