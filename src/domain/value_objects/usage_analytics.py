"""Read models for usage reporting."""

from dataclasses import dataclass
from datetime import datetime

from src.domain.enums import Tier


@dataclass(frozen=True, slots=True, kw_only=True)
class UsageSummary:
    """Request counts recorded since a point in time.

    Attributes:
        total_requests: All recorded requests.
        rate_limited_requests: Requests refused by a burst limit.
        invalid_input_requests: Requests refused by input validation.
        blocked_requests: Requests refused because the IP was blocked.
        unique_ips: Distinct client IPs.
    """

    total_requests: int
    rate_limited_requests: int
    invalid_input_requests: int
    blocked_requests: int
    unique_ips: int


@dataclass(frozen=True, slots=True, kw_only=True)
class UsageAnalytics:
    """Usage summary plus current block state, for admin dashboards.

    Attributes:
        summary: Request counts since `since`.
        currently_blocked_ips: IPs with is_blocked set right now.
        since: Start of the reporting period.
    """

    summary: UsageSummary
    currently_blocked_ips: int
    since: datetime

    def to_dict(self) -> dict[str, int | str]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_requests": self.summary.total_requests,
            "rate_limited_requests": self.summary.rate_limited_requests,
            "invalid_input_requests": self.summary.invalid_input_requests,
            "blocked_requests": self.summary.blocked_requests,
            "unique_ips": self.summary.unique_ips,
            "currently_blocked_ips": self.currently_blocked_ips,
            "since": self.since.isoformat(),
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class DailyUsage:
    """Daily quota status of one caller on one endpoint.

    Attributes:
        tier: Tier the quota comes from.
        used: Successful requests since local midnight.
        limit: Daily quota, None when unlimited.
        remaining: Requests left today, None when unlimited.
    """

    tier: Tier
    used: int
    limit: int | None
    remaining: int | None
