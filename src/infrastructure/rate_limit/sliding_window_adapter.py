"""Sliding window adapter implementing RateLimitProtocol.

This adapter integrates RedisStorage with the domain protocol, providing:
- Key construction (ratelimit:{identifier}, blocked:ip:{ip})
- Conversion of raw window state into RateLimitResult
- Structured logging
- Fail-open semantics for every check

Architecture:
    Domain Protocol <- SlidingWindowAdapter -> RedisStorage -> Redis

Usage:
    rate_limiter: RateLimitProtocol = container.rate_limiter
    result = await rate_limiter.check_limit("ip:203.0.113.7", 10, 60)
"""

from __future__ import annotations

import math
from time import perf_counter, time
from typing import TYPE_CHECKING

from src.core.result import Failure, Result, Success
from src.domain.errors import RateLimitError
from src.domain.value_objects.rate_limit_rule import RateLimitResult, RateLimitRule

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.infrastructure.rate_limit.redis_storage import RedisStorage

WINDOW_KEY_PREFIX = "ratelimit"
BLOCK_KEY_PREFIX = "blocked:ip"


def _now_ms() -> int:
    return int(time() * 1000)


class SlidingWindowAdapter:
    """Sliding window rate limiter implementing RateLimitProtocol.

    Fail-Open Design:
        check_limit and get_limit return success with remaining=limit when
        Redis fails; is_blocked returns False; block_ip becomes a no-op.
        Rate limit failures should NEVER cause denial-of-service.

    Args:
        storage: RedisStorage instance for atomic window operations.
        logger: Structured logger for observability.
    """

    def __init__(
        self,
        *,
        storage: RedisStorage,
        logger: LoggerProtocol,
    ) -> None:
        self._storage = storage
        self._logger = logger

    # -------------------------------------------------------------------------
    # RateLimitProtocol implementation
    # -------------------------------------------------------------------------
    async def check_limit(
        self,
        identifier: str,
        limit: int = 10,
        window_seconds: int = 60,
        *,
        now_ms: int | None = None,
    ) -> Result[RateLimitResult, RateLimitError]:
        """Check the window and record the request if it is admitted.

        Args:
            identifier: Window identifier (e.g. "ip:203.0.113.7").
            limit: Maximum admitted requests in the window.
            window_seconds: Trailing window length.
            now_ms: Override current epoch milliseconds (for testing).

        Returns:
            Result[RateLimitResult, RateLimitError]: Always Success.

        Raises:
            ValueError: If limit <= 0 or window_seconds <= 0.

        Fail-Open:
            On Redis errors, returns Success(success=True, remaining=limit).
        """
        rule = RateLimitRule(limit=limit, window_seconds=window_seconds)
        now = now_ms if now_ms is not None else _now_ms()
        start_time = perf_counter()

        result = await self._storage.evaluate_window(
            key=self._window_key(identifier), rule=rule, now_ms=now
        )

        elapsed_ms = (perf_counter() - start_time) * 1000

        match result:
            case Success(value=state) if state.allowed:
                decision = RateLimitResult(
                    success=True,
                    limit=limit,
                    remaining=limit - state.count - 1,
                    reset=now + rule.window_ms,
                )
            case Success(value=state):
                reset_at = state.oldest_ms + rule.window_ms
                decision = RateLimitResult(
                    success=False,
                    limit=limit,
                    remaining=0,
                    reset=reset_at,
                    retry_after=max(1, math.ceil((reset_at - now) / 1000)),
                )
            case Failure(error=err):
                self._logger.warning(
                    "Rate limit storage error - allowing request",
                    identifier=identifier,
                    error=str(err),
                )
                return Success(value=self._allow_all(rule, now))

        self._logger.debug(
            "Rate limit decision",
            identifier=identifier,
            allowed=decision.success,
            remaining=decision.remaining,
            execution_time_ms=round(elapsed_ms, 3),
        )
        return Success(value=decision)

    async def get_limit(
        self,
        identifier: str,
        limit: int = 10,
        window_seconds: int = 60,
        *,
        now_ms: int | None = None,
    ) -> Result[RateLimitResult, RateLimitError]:
        """Report remaining capacity without recording a request.

        Args:
            identifier: Window identifier.
            limit: Maximum admitted requests in the window.
            window_seconds: Trailing window length.
            now_ms: Override current epoch milliseconds (for testing).

        Returns:
            Result[RateLimitResult, RateLimitError]: Always Success.

        Fail-Open:
            On Redis errors, returns Success(success=True, remaining=limit).
        """
        rule = RateLimitRule(limit=limit, window_seconds=window_seconds)
        now = now_ms if now_ms is not None else _now_ms()

        result = await self._storage.count_window(
            key=self._window_key(identifier), rule=rule, now_ms=now
        )

        match result:
            case Success(value=count):
                return Success(
                    value=RateLimitResult(
                        success=count < limit,
                        limit=limit,
                        remaining=max(0, limit - count),
                        reset=now + rule.window_ms,
                    )
                )
            case Failure(error=err):
                self._logger.warning(
                    "Rate limit storage error - reporting full capacity",
                    identifier=identifier,
                    error=str(err),
                )
                return Success(value=self._allow_all(rule, now))

    async def block_ip(
        self,
        ip_address: str,
        duration_seconds: int = 3600,
    ) -> Result[None, RateLimitError]:
        """Set an explicit block on an IP for `duration_seconds`.

        Fail-Open:
            On Redis errors, logs a warning and returns Success(None).
        """
        result = await self._storage.set_flag(
            key=self._block_key(ip_address), ttl_seconds=duration_seconds
        )
        match result:
            case Success():
                self._logger.info(
                    "IP blocked",
                    ip_address=ip_address,
                    duration_seconds=duration_seconds,
                )
            case Failure(error=err):
                self._logger.warning(
                    "Rate limit storage error - IP block not applied",
                    ip_address=ip_address,
                    error=str(err),
                )
        return Success(value=None)

    async def is_blocked(self, ip_address: str) -> Result[bool, RateLimitError]:
        """Check for an explicit block set by block_ip().

        Fail-Open:
            On Redis errors, logs a warning and returns Success(False).
        """
        result = await self._storage.get_flag(key=self._block_key(ip_address))
        match result:
            case Success(value=blocked):
                return Success(value=blocked)
            case Failure(error=err):
                self._logger.warning(
                    "Rate limit storage error - treating IP as not blocked",
                    ip_address=ip_address,
                    error=str(err),
                )
                return Success(value=False)

    async def reset(self, identifier: str) -> Result[None, RateLimitError]:
        """Clear a window.

        Unlike the checks, this method does NOT fail open.
        Admin operations should know if they succeeded or failed.

        Args:
            identifier: Window identifier.

        Returns:
            Result[None, RateLimitError]: Success or failure.
        """
        result = await self._storage.delete(key=self._window_key(identifier))

        match result:
            case Success():
                self._logger.info("Rate limit reset", identifier=identifier)
            case Failure(error=err):
                self._logger.error(
                    "Rate limit reset failed",
                    identifier=identifier,
                    error_message=str(err),
                )

        return result

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    @staticmethod
    def _window_key(identifier: str) -> str:
        return f"{WINDOW_KEY_PREFIX}:{identifier}"

    @staticmethod
    def _block_key(ip_address: str) -> str:
        return f"{BLOCK_KEY_PREFIX}:{ip_address}"

    @staticmethod
    def _allow_all(rule: RateLimitRule, now_ms: int) -> RateLimitResult:
        return RateLimitResult(
            success=True,
            limit=rule.limit,
            remaining=rule.limit,
            reset=now_ms + rule.window_ms,
        )
