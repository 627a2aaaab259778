"""Cache infrastructure.

Exports:
    RedisCacheAdapter: Redis implementation of CacheProtocol.
    LookupCache: Namespaced get-or-set cache for upstream lookups.
"""

from src.infrastructure.cache.lookup_cache import LookupCache
from src.infrastructure.cache.redis_adapter import RedisCacheAdapter

__all__ = [
    "LookupCache",
    "RedisCacheAdapter",
]
