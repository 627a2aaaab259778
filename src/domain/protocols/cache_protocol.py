"""Key-value store port used by LookupCache.

String in, string out: JSON encoding of lookup results happens in
LookupCache, not here. Every operation returns a Result so the caller picks
the failure policy (LookupCache treats any Failure as a miss).
"""

from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result


class CacheProtocol(Protocol):
    """Minimal string store with expiry, pattern delete and health check."""

    async def get(self, key: str) -> Result[str | None, DomainError]:
        """Stored value, or Success(None) when the key is absent."""
        ...

    async def set(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
    ) -> Result[None, DomainError]:
        """Store `value`; `ttl` in seconds, None keeps it until deleted."""
        ...

    async def delete(self, key: str) -> Result[bool, DomainError]:
        """Remove `key`; Success(True) only if it existed."""
        ...

    async def delete_pattern(self, pattern: str) -> Result[int, DomainError]:
        """Remove every key matching a glob such as "cache:whois:*".

        Implementations iterate with SCAN so a large namespace never blocks
        the store. Returns the number of keys removed.
        """
        ...

    async def ping(self) -> Result[bool, DomainError]: ...
