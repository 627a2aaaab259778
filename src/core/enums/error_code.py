"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.

Categories:
- Rate limit errors (RATE_LIMIT_*)
- Abuse tracking errors (ABUSE_*)
- Usage tracking errors (USAGE_*)
- Cache errors (CACHE_*)
- Admission denials (IP_BLOCKED, *_EXCEEDED)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable).

    Error codes follow ENTITY_ACTION_REASON naming convention.
    """

    # Rate limit errors
    RATE_LIMIT_CHECK_FAILED = "rate_limit_check_failed"
    RATE_LIMIT_RESET_FAILED = "rate_limit_reset_failed"

    # Abuse tracking errors
    ABUSE_RECORD_FAILED = "abuse_record_failed"
    ABUSE_QUERY_FAILED = "abuse_query_failed"

    # Usage tracking errors
    USAGE_RECORD_FAILED = "usage_record_failed"
    USAGE_QUERY_FAILED = "usage_query_failed"

    # Cache errors
    CACHE_OPERATION_FAILED = "cache_operation_failed"

    # Admission denials (not system failures)
    IP_BLOCKED = "ip_blocked"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    DAILY_QUOTA_EXCEEDED = "daily_quota_exceeded"
