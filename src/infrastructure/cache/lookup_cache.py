"""Namespaced get-or-set cache for expensive upstream lookups.

Wraps WHOIS, DNS, Wayback and similar fetches so repeated lookups within a
namespace's TTL are served from Redis.

Key Patterns:
    - cache:{namespace}:{key} -> JSON serialized value

Architecture:
    - Uses CacheProtocol for low-level Redis operations
    - Fails open: a store error behaves like a miss, never raises
    - Not single-flight: concurrent misses may each run fetch_fn and
      the last write wins (fetchers are idempotent reads)
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from src.core.result import Failure, Success
from src.domain.enums import CacheNamespace

if TYPE_CHECKING:
    from src.domain.protocols.cache_protocol import CacheProtocol
    from src.domain.protocols.logger_protocol import LoggerProtocol

T = TypeVar("T")

KEY_PREFIX = "cache"
DEFAULT_NAMESPACE = "default"
DEFAULT_TTL_SECONDS = 3600


class LookupCache:
    """Namespaced JSON cache with get-or-set semantics.

    Attributes:
        _cache: Cache instance implementing CacheProtocol.
        _logger: Structured logger.

    Example:
        >>> whois = await lookup_cache.get_or_set(
        ...     "example.com",
        ...     lambda: whois_client.lookup("example.com"),
        ...     namespace=CacheNamespace.WHOIS,
        ... )
    """

    def __init__(self, *, cache: CacheProtocol, logger: LoggerProtocol) -> None:
        self._cache = cache
        self._logger = logger

    def _key(self, key: str, namespace: str | CacheNamespace | None) -> str:
        ns = _namespace_name(namespace)
        return f"{KEY_PREFIX}:{ns}:{key}"

    async def get(
        self,
        key: str,
        *,
        namespace: str | CacheNamespace | None = None,
    ) -> Any | None:
        """Read a cached value.

        Args:
            key: Key within the namespace.
            namespace: Namespace (default "default").

        Returns:
            The cached value, or None on miss or store error.
        """
        full_key = self._key(key, namespace)
        result = await self._cache.get(full_key)

        match result:
            case Success(value=None):
                self._logger.debug("cache miss", key=full_key)
                return None
            case Success(value=raw):
                try:
                    value = json.loads(raw)
                except json.JSONDecodeError:
                    self._logger.warning("Cache entry is not valid JSON", key=full_key)
                    return None
                self._logger.debug("cache hit", key=full_key)
                return value
            case Failure(error=err):
                self._logger.warning(
                    "Cache get failed - treating as miss",
                    key=full_key,
                    error=str(err),
                )
                return None

    async def set(
        self,
        key: str,
        value: Any,
        *,
        ttl: int | None = None,
        namespace: str | CacheNamespace | None = None,
    ) -> None:
        """Store a value. Store errors are logged, never raised.

        Args:
            key: Key within the namespace.
            value: JSON-serializable value.
            ttl: Seconds to keep the value (default: namespace TTL; zero or
                negative also falls back to it).
            namespace: Namespace (default "default").
        """
        full_key = self._key(key, namespace)
        effective_ttl = ttl if ttl and ttl > 0 else _default_ttl(namespace)
        result = await self._cache.set(
            full_key, json.dumps(value, default=str), ttl=effective_ttl
        )

        match result:
            case Success():
                self._logger.debug("cache set", key=full_key, ttl=effective_ttl)
            case Failure(error=err):
                self._logger.warning(
                    "Cache set failed",
                    key=full_key,
                    error=str(err),
                )

    async def delete(
        self,
        key: str,
        *,
        namespace: str | CacheNamespace | None = None,
    ) -> None:
        """Remove a value. Store errors are logged, never raised."""
        full_key = self._key(key, namespace)
        result = await self._cache.delete(full_key)
        if isinstance(result, Failure):
            self._logger.warning(
                "Cache delete failed",
                key=full_key,
                error=str(result.error),
            )

    async def get_or_set(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[T]],
        *,
        ttl: int | None = None,
        namespace: str | CacheNamespace | None = None,
    ) -> T:
        """Return the cached value, or fetch, store and return it.

        A None result from fetch_fn is returned but not cached.

        Args:
            key: Key within the namespace.
            fetch_fn: Zero-argument coroutine function producing the value.
            ttl: Seconds to keep a fetched value (default: namespace TTL).
            namespace: Namespace (default "default").

        Returns:
            The cached or freshly fetched value.

        Raises:
            Exception: Whatever fetch_fn raises (business errors propagate).
        """
        cached = await self.get(key, namespace=namespace)
        if cached is not None:
            return cached  # type: ignore[no-any-return]

        value = await fetch_fn()
        if value is not None:
            await self.set(key, value, ttl=ttl, namespace=namespace)
        return value

    async def invalidate_namespace(self, namespace: str | CacheNamespace) -> int:
        """Delete every entry in a namespace.

        Args:
            namespace: Namespace to clear.

        Returns:
            int: Entries deleted (0 on store error).
        """
        pattern = f"{KEY_PREFIX}:{_namespace_name(namespace)}:*"
        result = await self._cache.delete_pattern(pattern)

        match result:
            case Success(value=count):
                self._logger.info(
                    "Cache namespace invalidated",
                    namespace=_namespace_name(namespace),
                    deleted=count,
                )
                return count
            case Failure(error=err):
                self._logger.warning(
                    "Cache namespace invalidation failed",
                    namespace=_namespace_name(namespace),
                    error=str(err),
                )
                return 0

    async def get_stats(self) -> dict[str, bool]:
        """Report cache availability.

        Returns:
            dict: {"available": bool}.
        """
        result = await self._cache.ping()
        return {"available": isinstance(result, Success) and bool(result.value)}


def _namespace_name(namespace: str | CacheNamespace | None) -> str:
    if namespace is None:
        return DEFAULT_NAMESPACE
    if isinstance(namespace, CacheNamespace):
        return namespace.value
    return namespace


def _default_ttl(namespace: str | CacheNamespace | None) -> int:
    if isinstance(namespace, CacheNamespace):
        return namespace.default_ttl
    if namespace is not None:
        try:
            return CacheNamespace(namespace).default_ttl
        except ValueError:
            pass
    return DEFAULT_TTL_SECONDS
