"""Admission policy (tier resolution).

Turns a caller identity into concrete admission parameters: which rate
limiter identifier and burst rule apply, the daily quota, and the result
size limit.

Usage:
    policy = AdmissionPolicy(policies=TIER_POLICIES)
    plan = policy.resolve(CallerIdentity(ip_address="203.0.113.7"))
    plan.identifier     # "ip:203.0.113.7"
    plan.burst.limit    # 10
"""

from collections.abc import Mapping
from dataclasses import dataclass

from src.domain.enums import CallerType, Tier
from src.domain.value_objects.caller_identity import CallerIdentity
from src.domain.value_objects.rate_limit_rule import RateLimitRule
from src.domain.value_objects.tier_policy import TierPolicy


@dataclass(frozen=True, slots=True, kw_only=True)
class AdmissionPlan:
    """Resolved admission parameters for one request.

    Attributes:
        caller_type: API key, session or anonymous.
        tier: Tier supplying quota and result size.
        identifier: Rate limiter identifier (namespaced per caller type).
        burst: Burst rule passed to the rate limiter.
        daily_quota: Daily successful-request cap, None when unlimited.
        max_results: Largest result or batch size allowed.
    """

    caller_type: CallerType
    tier: Tier
    identifier: str
    burst: RateLimitRule
    daily_quota: int | None
    max_results: int


class AdmissionPolicy:
    """Resolve caller identities to admission plans.

    Args:
        policies: Tier table (must cover every Tier).
        api_key_window_seconds: Window for API-key burst limits.
        default_api_key_rate_limit: Burst limit for keys without their own.

    Raises:
        ValueError: If the tier table misses a tier.
    """

    def __init__(
        self,
        *,
        policies: Mapping[Tier, TierPolicy],
        api_key_window_seconds: int = 60,
        default_api_key_rate_limit: int = 100,
    ) -> None:
        missing = [tier.value for tier in Tier if tier not in policies]
        if missing:
            raise ValueError(f"tier policies missing for: {', '.join(missing)}")
        self._policies = dict(policies)
        self._api_key_window_seconds = api_key_window_seconds
        self._default_api_key_rate_limit = default_api_key_rate_limit

    def policy_for(self, tier: Tier) -> TierPolicy:
        """Return the policy of a tier."""
        return self._policies[tier]

    def resolve(
        self,
        identity: CallerIdentity,
        *,
        bucket: str | None = None,
        burst: RateLimitRule | None = None,
    ) -> AdmissionPlan:
        """Resolve the admission plan for a caller.

        API-key callers use the key's own per-minute limit as the burst
        rule; quota and result size come from the owning user's tier.

        Args:
            identity: Caller identity.
            bucket: Optional bucket scoping the rate limiter window.
            burst: Explicit burst rule for the bucket, overriding the tier's.

        Returns:
            AdmissionPlan: Parameters for this request.
        """
        tier = identity.resolved_tier
        policy = self._policies[tier]

        if burst is None:
            if identity.caller_type is CallerType.API_KEY:
                burst = RateLimitRule(
                    limit=identity.api_key_rate_limit
                    or self._default_api_key_rate_limit,
                    window_seconds=self._api_key_window_seconds,
                )
            else:
                burst = policy.burst

        return AdmissionPlan(
            caller_type=identity.caller_type,
            tier=tier,
            identifier=identity.identifier(bucket),
            burst=burst,
            daily_quota=policy.daily_quota,
            max_results=policy.max_results,
        )
