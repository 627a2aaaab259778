"""Admission-control request/response schemas.

Pydantic models for the usage, admin and health endpoints.

Endpoints:
    GET    /usage/{endpoint}                 - Daily quota status
    GET    /admin/abuse/{ip_address}         - Abuse record of an IP
    POST   /admin/abuse/{ip_address}/unblock - Lift a block
    POST   /admin/abuse/cleanup              - Sweep expired blocks
    GET    /admin/usage/analytics            - Usage analytics
    GET    /health                           - Redis and database reachability
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities.ip_abuse_record import IPAbuseRecord
from src.domain.value_objects.usage_analytics import DailyUsage, UsageAnalytics


# =============================================================================
# Usage
# =============================================================================


class DailyUsageResponse(BaseModel):
    """Daily quota status of the caller on one endpoint.

    GET /usage/{endpoint}
    Returns: 200 OK
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(..., description="Logical endpoint name")
    tier: str = Field(..., description="Tier the quota comes from")
    used: int = Field(..., description="Successful requests since local midnight")
    limit: int | None = Field(None, description="Daily quota (null when unlimited)")
    remaining: int | None = Field(
        None, description="Requests left today (null when unlimited)"
    )

    @classmethod
    def from_domain(cls, endpoint: str, usage: DailyUsage) -> "DailyUsageResponse":
        """Build from the DailyUsage value object."""
        return cls(
            endpoint=endpoint,
            tier=usage.tier.value,
            used=usage.used,
            limit=usage.limit,
            remaining=usage.remaining,
        )


class UsageAnalyticsResponse(BaseModel):
    """Usage counts for a period.

    GET /admin/usage/analytics
    Returns: 200 OK
    """

    model_config = ConfigDict(frozen=True)

    total_requests: int
    rate_limited_requests: int
    invalid_input_requests: int
    blocked_requests: int
    unique_ips: int
    currently_blocked_ips: int
    since: datetime

    @classmethod
    def from_domain(cls, analytics: UsageAnalytics) -> "UsageAnalyticsResponse":
        """Build from the UsageAnalytics value object."""
        summary = analytics.summary
        return cls(
            total_requests=summary.total_requests,
            rate_limited_requests=summary.rate_limited_requests,
            invalid_input_requests=summary.invalid_input_requests,
            blocked_requests=summary.blocked_requests,
            unique_ips=summary.unique_ips,
            currently_blocked_ips=analytics.currently_blocked_ips,
            since=analytics.since,
        )


# =============================================================================
# Abuse records
# =============================================================================


class IPAbuseResponse(BaseModel):
    """Abuse record of one IP.

    GET /admin/abuse/{ip_address}
    Returns: 200 OK, 404 when the IP was never seen
    """

    model_config = ConfigDict(frozen=True)

    ip_address: str
    total_requests: int
    rate_limit_violations: int
    invalid_input_attempts: int
    suspicious_patterns: int
    is_blocked: bool
    blocked_at: datetime | None = None
    blocked_until: datetime | None = None
    block_reason: str | None = None
    auto_block_count: int
    first_seen: datetime
    last_seen: datetime
    last_violation: datetime | None = None

    @classmethod
    def from_domain(cls, record: IPAbuseRecord) -> "IPAbuseResponse":
        """Build from the IPAbuseRecord entity (user agent omitted)."""
        return cls(
            ip_address=record.ip_address,
            total_requests=record.total_requests,
            rate_limit_violations=record.rate_limit_violations,
            invalid_input_attempts=record.invalid_input_attempts,
            suspicious_patterns=record.suspicious_patterns,
            is_blocked=record.is_blocked,
            blocked_at=record.blocked_at,
            blocked_until=record.blocked_until,
            block_reason=record.block_reason,
            auto_block_count=record.auto_block_count,
            first_seen=record.first_seen,
            last_seen=record.last_seen,
            last_violation=record.last_violation,
        )


class UnblockResponse(BaseModel):
    """Result of a manual unblock.

    POST /admin/abuse/{ip_address}/unblock
    Returns: 200 OK
    """

    ip_address: str
    unblocked: bool = Field(..., description="Whether a record was updated")


class CleanupResponse(BaseModel):
    """Result of an expired-block sweep.

    POST /admin/abuse/cleanup
    Returns: 200 OK
    """

    unblocked_count: int


# =============================================================================
# Health
# =============================================================================


class HealthResponse(BaseModel):
    """Reachability of the backing stores.

    GET /health
    Returns: 200 OK when both stores answer, 503 otherwise
    """

    status: str = Field(..., description="healthy or degraded")
    redis: bool
    database: bool
