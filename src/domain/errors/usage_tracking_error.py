"""Usage tracking error types.

Returned by usage and abuse queries when the relational store fails.
Recording failures never reach callers (tracking fails silent); they are
logged where they happen.
"""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class UsageTrackingError(DomainError):
    """Usage or abuse store failure.

    Attributes:
        code: ErrorCode enum (ABUSE_QUERY_FAILED, USAGE_QUERY_FAILED, ...).
        message: Human-readable message.
        details: Additional context (ip_address, endpoint).
    """

    pass
