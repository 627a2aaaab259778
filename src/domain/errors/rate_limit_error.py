"""Rate limit error types.

Used when rate limiter operations fail (Redis errors, Lua script failures).

Usage:
    from src.domain.errors import RateLimitError
    from src.core.enums import ErrorCode
    from src.core.result import Failure

    return Failure(error=RateLimitError(
        code=ErrorCode.RATE_LIMIT_RESET_FAILED,
        message="Failed to reset window for 'ip:203.0.113.7'",
    ))
"""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitError(DomainError):
    """Rate limiter system failure.

    A denied request is NOT an error: it is a successful check whose
    result has success=False. This error class is for actual store
    failures.

    The limiter fails open, so check operations turn this error into an
    allowing result. Only admin operations (reset) hand it to callers.

    Attributes:
        code: ErrorCode enum (RATE_LIMIT_CHECK_FAILED, RATE_LIMIT_RESET_FAILED).
        message: Human-readable message.
        details: Additional context (identifier, key).
    """

    pass
