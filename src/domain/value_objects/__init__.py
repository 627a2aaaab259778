"""Domain value objects with validation.

Immutable value objects that enforce business constraints.
"""

from src.domain.value_objects.auto_block_thresholds import AutoBlockThresholds
from src.domain.value_objects.caller_identity import CallerIdentity
from src.domain.value_objects.rate_limit_rule import RateLimitResult, RateLimitRule
from src.domain.value_objects.tier_policy import TierPolicy
from src.domain.value_objects.usage_analytics import (
    DailyUsage,
    UsageAnalytics,
    UsageSummary,
)
from src.domain.value_objects.usage_record import UsageRecord

__all__ = [
    "AutoBlockThresholds",
    "CallerIdentity",
    "DailyUsage",
    "RateLimitResult",
    "RateLimitRule",
    "TierPolicy",
    "UsageAnalytics",
    "UsageRecord",
    "UsageSummary",
]
