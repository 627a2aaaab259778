"""Tier policy configuration (single source of truth).

Every admission parameter a tier grants lives here. Change a tier's limits
in TIER_POLICIES; the admission policy reads nothing else.

Usage:
    from src.infrastructure.rate_limit.config import TIER_POLICIES

    policy = TIER_POLICIES[Tier.PRO]
    policy.burst.limit       # 100
    policy.daily_quota       # 50

Reference:
    - src/application/services/admission_policy.py (consumer)
"""

from src.domain.enums import Tier
from src.domain.value_objects.rate_limit_rule import RateLimitRule
from src.domain.value_objects.tier_policy import TierPolicy

BURST_WINDOW_SECONDS = 60

# Burst window for API-key callers; the limit is the key's own rate_limit.
API_KEY_WINDOW_SECONDS = 60
DEFAULT_API_KEY_RATE_LIMIT = 100

TIER_POLICIES: dict[Tier, TierPolicy] = {
    Tier.ANONYMOUS: TierPolicy(
        burst=RateLimitRule(limit=10, window_seconds=BURST_WINDOW_SECONDS),
        daily_quota=2,
        max_results=5,
    ),
    Tier.FREE: TierPolicy(
        burst=RateLimitRule(limit=30, window_seconds=BURST_WINDOW_SECONDS),
        daily_quota=5,
        max_results=5,
    ),
    Tier.PRO: TierPolicy(
        burst=RateLimitRule(limit=100, window_seconds=BURST_WINDOW_SECONDS),
        daily_quota=50,
        max_results=100,
    ),
    Tier.ENTERPRISE: TierPolicy(
        burst=RateLimitRule(limit=300, window_seconds=BURST_WINDOW_SECONDS),
        daily_quota=None,
        max_results=500,
    ),
}
