"""
Cache package: buckets layered on a host store.

This package provides:
- Key layout (keys.py): physical value and expiration keys per namespace
- Value codec (codec.py): JSON text encoding with raw-string fallback
- TTL clock (clock.py): wall clock in configurable time units
- Eviction planner (eviction.py): soonest-to-expire-first eviction order
- Buckets (bucket.py) and the registry (registry.py) that owns them
"""

from quotacache.cache.bucket import CacheBucket
from quotacache.cache.registry import CacheRegistry

__all__ = ["CacheBucket", "CacheRegistry"]
