"""
Host stores: size-limited string key-value backends.

- Memory store (memory.py): in-process dict with a character quota
- SQLite store (sqlite.py): persistent single-file store with a character quota
"""

from quotacache.stores.base import HostStore
from quotacache.stores.memory import MemoryStore
from quotacache.stores.sqlite import SQLiteStore

__all__ = ["HostStore", "MemoryStore", "SQLiteStore"]
