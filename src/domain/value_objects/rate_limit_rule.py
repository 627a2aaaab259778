"""Rate limit rule and result value objects.

RateLimitRule is the immutable pair of parameters for one sliding window:
how many events are admitted and over how many seconds. RateLimitResult is
the decision returned by the limiter, carrying everything a caller needs to
build X-RateLimit-* and Retry-After headers.

Usage:
    from src.domain.value_objects import RateLimitRule

    rule = RateLimitRule(limit=10, window_seconds=60)
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitRule:
    """Sliding-window rate limit rule (value object).

    Sliding Window Algorithm:
        - Every admitted request stores its timestamp in an ordered set
        - Entries older than window_seconds are evicted before counting
        - A request is admitted while fewer than `limit` entries remain

    Attributes:
        limit: Maximum admitted requests inside any trailing window.
        window_seconds: Length of the trailing window in seconds.

    Example:
        # Anonymous burst limit: 10 requests per minute
        burst = RateLimitRule(limit=10, window_seconds=60)

        # Bulk endpoint bucket: 20 items per two minutes
        bulk = RateLimitRule(limit=20, window_seconds=120)

    Raises:
        ValueError: If limit <= 0 or window_seconds <= 0.
    """

    limit: int
    """Maximum admitted requests inside the trailing window.

    Typical values:
        - 1-10 for expensive anonymous endpoints
        - 100-300 for API keys and paid tiers
    """

    window_seconds: int
    """Length of the trailing window in seconds.

    Also used as the TTL of the window key, so an idle identifier
    leaves nothing behind in Redis.
    """

    def __post_init__(self) -> None:
        """Validate rule configuration after initialization.

        Raises:
            ValueError: If any numeric field is invalid.
        """
        if self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.window_seconds <= 0:
            raise ValueError(
                f"window_seconds must be positive, got {self.window_seconds}"
            )

    @property
    def window_ms(self) -> int:
        """Window length in milliseconds (the unit of stored scores).

        Returns:
            int: window_seconds * 1000.
        """
        return self.window_seconds * 1000


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitResult:
    """Decision of a sliding-window check.

    Attributes:
        success: Whether the request is admitted.
        limit: Configured limit for the window.
        remaining: Admissions left in the current window.
        reset: Epoch milliseconds when capacity is next restored.
        retry_after: Seconds until retry is worthwhile (denials only).
    """

    success: bool
    """Whether the request is admitted."""

    limit: int
    """Configured limit. Used for X-RateLimit-Limit header."""

    remaining: int
    """Admissions left in the current window.

    Used for X-RateLimit-Remaining header. Zero on denial.
    """

    reset: int
    """Epoch milliseconds when capacity is next restored.

    On success: now + window. On denial: oldest entry + window.
    """

    retry_after: int | None = None
    """Seconds until retry is worthwhile, never less than 1.

    Only set when success=False. Used for Retry-After header.
    """
