"""Admission service.

Runs the admission control flow for one request, before any business logic:

    1. Active IP block (auto-block record or explicit limiter block)
    2. Short-window burst limit (sliding window)
    3. Daily quota (successful requests since local midnight)

All three must pass. Denials are business outcomes carried in the returned
AdmissionDecision; infrastructure failures inside any step fail open.

Usage:
    decision = await admission.admit(identity, "analyze")
    if not decision.allowed:
        raise_429(decision.error, decision.retry_after)

    # Batch endpoint: charge one burst slot per extra item
    decision = await admission.admit(
        identity, "bulk", bucket="bulk", burst=RateLimitRule(limit=20, window_seconds=120)
    )
    await admission.consume_extra(decision, slots=len(domains) - 1)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.errors import AdmissionError
from src.domain.value_objects.rate_limit_rule import RateLimitResult
from src.domain.value_objects.usage_analytics import DailyUsage

if TYPE_CHECKING:
    from src.application.services.admission_policy import (
        AdmissionPlan,
        AdmissionPolicy,
    )
    from src.application.services.usage_tracker import UsageTracker
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.rate_limit_protocol import RateLimitProtocol
    from src.domain.value_objects.caller_identity import CallerIdentity
    from src.domain.value_objects.rate_limit_rule import RateLimitRule


@dataclass(frozen=True, slots=True, kw_only=True)
class AdmissionDecision:
    """Outcome of an admission check.

    Attributes:
        allowed: Whether the request may proceed.
        plan: Resolved tier parameters.
        rate_limit: Burst check result (None when denied before the check).
        quota_used: Successful requests today (None when not checked).
        quota_remaining: Requests left today (None when unlimited or unchecked).
        error: Denial reason when allowed is False.
    """

    allowed: bool
    plan: AdmissionPlan
    rate_limit: RateLimitResult | None = None
    quota_used: int | None = None
    quota_remaining: int | None = None
    error: AdmissionError | None = None

    @property
    def retry_after(self) -> int | None:
        """Seconds until a retry is worthwhile (denials only)."""
        return self.error.retry_after if self.error is not None else None


class AdmissionService:
    """Admission control for incoming requests.

    Args:
        policy: Tier resolution.
        rate_limiter: Sliding-window limiter (RateLimitProtocol).
        usage_tracker: Abuse records and daily usage counts.
        logger: Structured logger.
    """

    def __init__(
        self,
        *,
        policy: AdmissionPolicy,
        rate_limiter: RateLimitProtocol,
        usage_tracker: UsageTracker,
        logger: LoggerProtocol,
    ) -> None:
        self._policy = policy
        self._rate_limiter = rate_limiter
        self._usage_tracker = usage_tracker
        self._logger = logger

    async def admit(
        self,
        identity: CallerIdentity,
        endpoint: str,
        *,
        bucket: str | None = None,
        burst: RateLimitRule | None = None,
        now: datetime | None = None,
    ) -> AdmissionDecision:
        """Decide whether a request may proceed.

        Args:
            identity: Caller identity.
            endpoint: Endpoint name used for daily usage counting.
            bucket: Optional bucket scoping the burst window.
            burst: Optional burst rule for the bucket (overrides the tier's).
            now: Override current time (for testing).

        Returns:
            AdmissionDecision: Allowed, or denied with an AdmissionError.
        """
        now = now or datetime.now(UTC)
        plan = self._policy.resolve(identity, bucket=bucket, burst=burst)

        blocked = await self._check_ip_block(identity.ip_address, now)
        if blocked is not None:
            self._logger.info(
                "Admission denied",
                reason=blocked.code.value,
                ip_address=identity.ip_address,
                endpoint=endpoint,
            )
            return AdmissionDecision(allowed=False, plan=plan, error=blocked)

        rate_limit = await self._check_burst(plan, now)
        if not rate_limit.success:
            self._logger.info(
                "Admission denied",
                reason=ErrorCode.RATE_LIMIT_EXCEEDED.value,
                identifier=plan.identifier,
                endpoint=endpoint,
            )
            return AdmissionDecision(
                allowed=False,
                plan=plan,
                rate_limit=rate_limit,
                error=AdmissionError(
                    code=ErrorCode.RATE_LIMIT_EXCEEDED,
                    message="Rate limit exceeded. Please try again later.",
                    details={"limit": str(rate_limit.limit)},
                    retry_after=rate_limit.retry_after,
                ),
            )

        if plan.daily_quota is None:
            return AdmissionDecision(allowed=True, plan=plan, rate_limit=rate_limit)

        used = await self._usage_tracker.get_daily_usage_count(
            endpoint,
            user_id=identity.user_id,
            ip_address=identity.ip_address,
            now=now,
        )
        if used >= plan.daily_quota:
            self._logger.info(
                "Admission denied",
                reason=ErrorCode.DAILY_QUOTA_EXCEEDED.value,
                identifier=plan.identifier,
                endpoint=endpoint,
                used=used,
                daily_quota=plan.daily_quota,
            )
            return AdmissionDecision(
                allowed=False,
                plan=plan,
                rate_limit=rate_limit,
                quota_used=used,
                quota_remaining=0,
                error=AdmissionError(
                    code=ErrorCode.DAILY_QUOTA_EXCEEDED,
                    message=(
                        f"Daily limit of {plan.daily_quota} requests reached "
                        f"for the {plan.tier.value} tier."
                    ),
                    details={
                        "tier": plan.tier.value,
                        "daily_quota": str(plan.daily_quota),
                    },
                    retry_after=_seconds_until_local_midnight(now),
                ),
            )

        return AdmissionDecision(
            allowed=True,
            plan=plan,
            rate_limit=rate_limit,
            quota_used=used,
            quota_remaining=plan.daily_quota - used,
        )

    async def consume_extra(
        self,
        decision: AdmissionDecision,
        slots: int,
        *,
        now: datetime | None = None,
    ) -> int:
        """Charge extra burst slots for a batch request.

        The admit() call already consumed one slot; batch endpoints call
        this with the number of additional items. Stops at the first
        denied slot.

        Args:
            decision: Allowed decision returned by admit().
            slots: Additional slots to consume.
            now: Override current time (for testing).

        Returns:
            int: Number of extra slots actually consumed.
        """
        if not decision.allowed or slots <= 0:
            return 0

        now = now or datetime.now(UTC)
        consumed = 0
        for _ in range(slots):
            result = await self._check_burst(decision.plan, now)
            if not result.success:
                break
            consumed += 1
        return consumed

    async def daily_usage(
        self,
        identity: CallerIdentity,
        endpoint: str,
        *,
        now: datetime | None = None,
    ) -> DailyUsage:
        """Report daily quota status for a caller (no slot is consumed).

        Returns:
            DailyUsage: Tier, used, limit and remaining (None when unlimited).
        """
        plan = self._policy.resolve(identity)
        used = await self._usage_tracker.get_daily_usage_count(
            endpoint,
            user_id=identity.user_id,
            ip_address=identity.ip_address,
            now=now,
        )
        if plan.daily_quota is None:
            return DailyUsage(tier=plan.tier, used=used, limit=None, remaining=None)
        return DailyUsage(
            tier=plan.tier,
            used=used,
            limit=plan.daily_quota,
            remaining=max(0, plan.daily_quota - used),
        )

    async def _check_ip_block(
        self, ip_address: str, now: datetime
    ) -> AdmissionError | None:
        """Return an IP_BLOCKED denial if the IP has an active block."""
        match await self._usage_tracker.get_ip_stats(ip_address):
            case Success(value=record) if (
                record is not None
                and record.blocked_until is not None
                and record.is_actively_blocked(now)
            ):
                return AdmissionError(
                    code=ErrorCode.IP_BLOCKED,
                    message=(
                        "Your IP has been temporarily blocked due to suspicious "
                        "activity. Please try again later."
                    ),
                    details={"blocked_until": record.blocked_until.isoformat()},
                    retry_after=max(
                        1, math.ceil((record.blocked_until - now).total_seconds())
                    ),
                )

        match await self._rate_limiter.is_blocked(ip_address):
            case Success(value=True):
                return AdmissionError(
                    code=ErrorCode.IP_BLOCKED,
                    message="Your IP has been temporarily blocked. Please try again later.",
                )
        return None

    async def _check_burst(
        self, plan: AdmissionPlan, now: datetime
    ) -> RateLimitResult:
        """Run the burst check, unwrapping the limiter's Result."""
        result = await self._rate_limiter.check_limit(
            plan.identifier,
            plan.burst.limit,
            plan.burst.window_seconds,
            now_ms=int(now.timestamp() * 1000),
        )
        match result:
            case Success(value=decision):
                return decision
            case Failure(error=err):
                # Fail open with full capacity.
                self._logger.warning(
                    "Rate limiter returned failure - allowing request",
                    identifier=plan.identifier,
                    error=str(err),
                )
                return RateLimitResult(
                    success=True,
                    limit=plan.burst.limit,
                    remaining=plan.burst.limit,
                    reset=int(now.timestamp() * 1000) + plan.burst.window_ms,
                )


def _seconds_until_local_midnight(now: datetime) -> int:
    local_now = now.astimezone()
    next_midnight = (local_now + timedelta(days=1)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return max(1, math.ceil((next_midnight - local_now).total_seconds()))
