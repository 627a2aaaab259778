"""Store failure errors.

RedisCacheAdapter catches redis-py exceptions at the boundary and returns a
CacheError inside Failure (RedisStorage reports RateLimitError instead). Database
failures are not wrapped here: repositories let SQLAlchemy exceptions
propagate and UsageTracker maps them to UsageTrackingError.
"""

from dataclasses import dataclass
from typing import Any

from src.core.errors import DomainError
from src.infrastructure.enums import InfrastructureErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class InfrastructureError(DomainError):
    """DomainError plus the store operation that failed.

    Attributes:
        infrastructure_code: Which store operation failed.
        details: Key, operation and original error text.
    """

    infrastructure_code: InfrastructureErrorCode | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CacheError(InfrastructureError):
    """Redis failure seen by RedisCacheAdapter."""
