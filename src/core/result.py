"""Result types for railway-oriented programming.

Operations that can fail return a Result instead of raising. Callers branch
on the variant with structural pattern matching, which keeps fail-open and
fail-silent policies visible at the call site.

Usage:
    result = await rate_limiter.check_limit("ip:203.0.113.7", 10, 60)
    match result:
        case Success(value=decision) if not decision.success:
            return deny(decision.retry_after)
        case Success():
            return admit()
        case Failure(error=err):
            logger.warning("Rate limit check failed", error=str(err))
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


type Result[T, E] = Success[T] | Failure[E]
