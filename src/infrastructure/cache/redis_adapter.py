"""Redis implementation of CacheProtocol for the lookup cache.

Every call returns a Result: redis-py exceptions (and anything unexpected
raised by the client) become CacheError with the InfrastructureErrorCode of
the failing operation. The adapter has no failure policy of its own;
LookupCache decides to treat failures as misses.
"""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.infrastructure.enums import InfrastructureErrorCode
from src.infrastructure.errors import CacheError

_SCAN_BATCH_SIZE = 500


def _cache_error(
    code: InfrastructureErrorCode,
    message: str,
    exc: Exception,
    **details: str,
) -> CacheError:
    extra: dict[str, str] = {"error": str(exc)}
    if not isinstance(exc, RedisError):
        extra["type"] = type(exc).__name__
    return CacheError(
        code=ErrorCode.CACHE_OPERATION_FAILED,
        infrastructure_code=code,
        message=message,
        details={**details, **extra},
    )


class RedisCacheAdapter:
    """CacheProtocol over a shared redis.asyncio client.

    The client belongs to AdmissionContainer, which also closes it; the
    adapter never owns a connection.

    Args:
        redis_client: Async Redis client (bytes or str responses).
    """

    def __init__(self, redis_client: Redis) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> Result[str | None, CacheError]:
        """Stored string (bytes decoded as UTF-8), or None when absent."""
        try:
            raw = await self._redis.get(key)
        except Exception as e:
            return Failure(
                error=_cache_error(
                    InfrastructureErrorCode.CACHE_GET_ERROR,
                    f"Cache read failed for '{key}'",
                    e,
                    key=key,
                )
            )
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return Success(value=raw)

    async def set(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
    ) -> Result[None, CacheError]:
        """SET with EX when `ttl` is given, plain SET otherwise."""
        try:
            await self._redis.set(key, value, ex=ttl)
        except Exception as e:
            return Failure(
                error=_cache_error(
                    InfrastructureErrorCode.CACHE_SET_ERROR,
                    f"Cache write failed for '{key}'",
                    e,
                    key=key,
                )
            )
        return Success(value=None)

    async def delete(self, key: str) -> Result[bool, CacheError]:
        try:
            removed = await self._redis.delete(key)
        except Exception as e:
            return Failure(
                error=_cache_error(
                    InfrastructureErrorCode.CACHE_DELETE_ERROR,
                    f"Cache delete failed for '{key}'",
                    e,
                    key=key,
                )
            )
        return Success(value=removed > 0)

    async def delete_pattern(self, pattern: str) -> Result[int, CacheError]:
        """Delete keys matching `pattern`, SCAN-ing in batches of 500.

        Keys are deleted batch by batch while the scan proceeds, so a
        failure part-way leaves earlier batches deleted.
        """
        removed = 0
        batch: list[bytes | str] = []
        try:
            async for key in self._redis.scan_iter(
                match=pattern, count=_SCAN_BATCH_SIZE
            ):
                batch.append(key)
                if len(batch) == _SCAN_BATCH_SIZE:
                    removed += await self._redis.delete(*batch)
                    batch = []
            if batch:
                removed += await self._redis.delete(*batch)
        except Exception as e:
            return Failure(
                error=_cache_error(
                    InfrastructureErrorCode.CACHE_DELETE_ERROR,
                    f"Cache pattern delete failed for '{pattern}'",
                    e,
                    pattern=pattern,
                )
            )
        return Success(value=removed)

    async def ping(self) -> Result[bool, CacheError]:
        """PING the server; used by the health endpoint via LookupCache."""
        try:
            await self._redis.ping()  # type: ignore[misc]
        except Exception as e:
            return Failure(
                error=_cache_error(
                    InfrastructureErrorCode.CACHE_CONNECTION_ERROR,
                    "Redis ping failed",
                    e,
                )
            )
        return Success(value=True)
