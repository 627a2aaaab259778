"""Caller identity value object.

Everything the admission policy needs to know about who is calling. The
HTTP layer builds it from the connection and from whatever authentication
the surrounding application performed.

Usage:
    identity = CallerIdentity(ip_address="203.0.113.7")
    identity.identifier()            # "ip:203.0.113.7"
    identity.identifier("bulk")      # "bulk:ip:203.0.113.7"
"""

from dataclasses import dataclass

from src.domain.enums import CallerType, Tier


@dataclass(frozen=True, slots=True, kw_only=True)
class CallerIdentity:
    """Identity of the caller for one request.

    Attributes:
        ip_address: Client IP address (always present, may be "unknown").
        user_id: Authenticated user (session or API key owner).
        tier: Stored subscription tier of the user, if known.
        api_key_id: ID of the API key used, if any. Never the key itself.
        api_key_rate_limit: Per-minute limit configured on that key.
    """

    ip_address: str
    user_id: str | None = None
    tier: str | None = None
    api_key_id: str | None = None
    api_key_rate_limit: int | None = None

    @property
    def caller_type(self) -> CallerType:
        """Resolve caller type (API key > session > anonymous)."""
        if self.api_key_id is not None:
            return CallerType.API_KEY
        if self.user_id is not None:
            return CallerType.SESSION
        return CallerType.ANONYMOUS

    @property
    def resolved_tier(self) -> Tier:
        """Tier used for quotas; anonymous callers are always ANONYMOUS."""
        if self.caller_type is CallerType.ANONYMOUS:
            return Tier.ANONYMOUS
        return Tier.from_value(self.tier)

    def identifier(self, bucket: str | None = None) -> str:
        """Build the rate limiter identifier for this caller.

        Args:
            bucket: Optional bucket name that scopes the window
                (e.g. "bulk" for batch endpoints).

        Returns:
            str: "{type}:{id}" or "{bucket}:{type}:{id}".
        """
        match self.caller_type:
            case CallerType.API_KEY:
                base = f"key:{self.api_key_id}"
            case CallerType.SESSION:
                base = f"user:{self.user_id}"
            case CallerType.ANONYMOUS:
                base = f"ip:{self.ip_address}"
        return f"{bucket}:{base}" if bucket else base
