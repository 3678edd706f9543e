"""
quotacache: capacity-bounded TTL key-value cache over a size-limited host store.
"""

from quotacache.cache import CacheBucket, CacheRegistry
from quotacache.config import CacheConfig, Settings, get_settings
from quotacache.stores import HostStore, MemoryStore, SQLiteStore

__version__ = "0.1.0"

__all__ = [
    "CacheBucket",
    "CacheConfig",
    "CacheRegistry",
    "HostStore",
    "MemoryStore",
    "SQLiteStore",
    "Settings",
    "get_settings",
    "__version__",
]
