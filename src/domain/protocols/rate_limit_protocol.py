"""Rate limit protocol (port) for sliding-window rate limiting.

Following hexagonal architecture:
- Domain defines the PORT (this protocol)
- Infrastructure provides the ADAPTER (SlidingWindowAdapter)
- Application layer uses the protocol (AdmissionService)

Usage:
    result = await rate_limiter.check_limit("ip:203.0.113.7", 10, 60)
    match result:
        case Success(value=decision) if not decision.success:
            raise HTTPException(
                429, headers={"Retry-After": str(decision.retry_after)}
            )
"""

from typing import Protocol

from src.core.result import Result
from src.domain.errors import RateLimitError
from src.domain.value_objects.rate_limit_rule import RateLimitResult


class RateLimitProtocol(Protocol):
    """Protocol for sliding-window rate limiters.

    Fail-Open Design:
        check_limit, get_limit, block_ip and is_blocked MUST return Success
        when the store is unreachable: check_limit/get_limit with
        remaining=limit, is_blocked with False, block_ip as a no-op.
        Rate limit failures must NEVER deny a legitimate request.

    Error Handling:
        Only reset() returns Failure, because admin callers need to know
        whether it worked.
    """

    async def check_limit(
        self,
        identifier: str,
        limit: int = 10,
        window_seconds: int = 60,
        *,
        now_ms: int | None = None,
    ) -> Result[RateLimitResult, RateLimitError]:
        """Atomically evict, count and conditionally record one request.

        Eviction, counting and insertion run as a single atomic unit in
        the store; splitting them would let concurrent callers exceed
        the limit.

        Args:
            identifier: Window identifier (e.g. "ip:203.0.113.7",
                "bulk:key:42"). Not validated.
            limit: Maximum admitted requests in the window.
            window_seconds: Trailing window length.
            now_ms: Override current epoch milliseconds (tests).

        Returns:
            Result[RateLimitResult, RateLimitError]:
                success=True with remaining=limit-count-1 and
                reset=now+window, or success=False with remaining=0,
                reset=oldest+window and retry_after >= 1.

        Raises:
            ValueError: If limit <= 0 or window_seconds <= 0.
        """
        ...

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
            now_ms: Override current epoch milliseconds (tests).

        Returns:
            Result[RateLimitResult, RateLimitError]: success = count < limit,
                remaining = max(0, limit - count).
        """
        ...

    async def block_ip(
        self,
        ip_address: str,
        duration_seconds: int = 3600,
    ) -> Result[None, RateLimitError]:
        """Set an explicit, time-boxed block on an IP.

        Independent of the sliding windows and of abuse records.

        Args:
            ip_address: IP to block.
            duration_seconds: Block length.

        Returns:
            Result[None, RateLimitError]: Always Success (no-op on store errors).
        """
        ...

    async def is_blocked(self, ip_address: str) -> Result[bool, RateLimitError]:
        """Check for an explicit block set by block_ip().

        Args:
            ip_address: IP to check.

        Returns:
            Result[bool, RateLimitError]: Success(False) on store errors.
        """
        ...

    async def reset(self, identifier: str) -> Result[None, RateLimitError]:
        """Clear a window (admin operation, does NOT fail open).

        Args:
            identifier: Window identifier.

        Returns:
            Result[None, RateLimitError]: Failure on store errors.
        """
        ...
