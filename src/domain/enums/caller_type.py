"""Caller type enumeration.

Each caller type owns a distinct identifier namespace in the rate limiter so
API-key traffic never shares a window with session or anonymous traffic.

Usage:
    from src.domain.enums import CallerType

    identity.caller_type  # CallerType.API_KEY
"""

from enum import Enum


class CallerType(str, Enum):
    """How the caller authenticated.

    Precedence when several credentials are present:
        API_KEY > SESSION > ANONYMOUS

    Identifier Formats:
        ANONYMOUS: ip:{ip_address}
        SESSION: user:{user_id}
        API_KEY: key:{api_key_id}
    """

    ANONYMOUS = "ip"
    """No credentials; windows are keyed by client IP."""

    SESSION = "user"
    """Authenticated browser session; windows are keyed by user ID."""

    API_KEY = "key"
    """Programmatic access; windows are keyed by API key ID."""
