"""Redis operation codes carried by CacheError.

They sit next to the domain ErrorCode so a log line says both what the
caller was doing (e.g. RATE_LIMIT_CHECK_FAILED) and which Redis call broke.
"""

from enum import Enum


class InfrastructureErrorCode(Enum):
    """Failed Redis operation."""

    CACHE_CONNECTION_ERROR = "cache_connection_error"
    CACHE_GET_ERROR = "cache_get_error"
    CACHE_SET_ERROR = "cache_set_error"
    CACHE_DELETE_ERROR = "cache_delete_error"
