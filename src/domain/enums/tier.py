"""Subscription tier enumeration.

Tiers are flat bundles of admission parameters (burst limit, daily quota,
result size). The values for each tier live in
src/infrastructure/rate_limit/config.py; this module only names them.

Usage:
    from src.domain.enums import Tier

    tier = Tier.from_value(user.subscription_tier)
"""

from enum import Enum


class Tier(str, Enum):
    """Subscription tiers, ordered from most to least restricted.

    String Enum:
        Inherits from str so the stored subscription value can be compared
        and serialized directly.
    """

    ANONYMOUS = "anonymous"
    """Caller without a session or API key. Keyed by IP address."""

    FREE = "free"
    """Authenticated caller without a paid plan.

    Also the fallback for authenticated callers whose stored tier is
    missing or unknown.
    """

    PRO = "pro"
    """Paid plan with higher quotas."""

    ENTERPRISE = "enterprise"
    """Paid plan without a daily quota."""

    @classmethod
    def from_value(cls, value: str | None) -> "Tier":
        """Resolve a stored subscription value to an authenticated tier.

        Args:
            value: Stored tier name (case-insensitive), or None.

        Returns:
            Tier: Matching tier, FREE when missing, unknown or anonymous.
        """
        if value is None:
            return cls.FREE
        try:
            tier = cls(value.strip().lower())
        except ValueError:
            return cls.FREE
        return cls.FREE if tier is cls.ANONYMOUS else tier
