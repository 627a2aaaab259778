"""Unit tests for AdmissionService.

Tests cover:
- Check order: IP block, burst limit, daily quota
- Denial errors, retry_after and quota fields
- Fail-open when the limiter returns Failure
- Extra slot consumption for batch requests
- Daily usage reporting
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from freezegun import freeze_time

from src.application.services.admission_policy import AdmissionPolicy
from src.application.services.admission_service import AdmissionService
from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.entities.ip_abuse_record import IPAbuseRecord
from src.domain.enums import Tier
from src.domain.errors import RateLimitError
from src.domain.value_objects.caller_identity import CallerIdentity
from src.domain.value_objects.rate_limit_rule import RateLimitResult, RateLimitRule
from src.infrastructure.rate_limit.config import TIER_POLICIES

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
NOW_MS = int(NOW.timestamp() * 1000)
IP = "203.0.113.7"
ANONYMOUS = CallerIdentity(ip_address=IP)


def allowed(limit: int = 10, remaining: int = 9) -> Success:
    return Success(
        value=RateLimitResult(
            success=True, limit=limit, remaining=remaining, reset=NOW_MS + 60_000
        )
    )


def denied(limit: int = 10, retry_after: int = 42) -> Success:
    return Success(
        value=RateLimitResult(
            success=False,
            limit=limit,
            remaining=0,
            reset=NOW_MS + retry_after * 1000,
            retry_after=retry_after,
        )
    )


def blocked_record(until: datetime) -> IPAbuseRecord:
    return IPAbuseRecord(
        ip_address=IP,
        total_requests=40,
        rate_limit_violations=20,
        invalid_input_attempts=0,
        suspicious_patterns=0,
        is_blocked=True,
        blocked_at=NOW - timedelta(minutes=10),
        blocked_until=until,
        block_reason="Auto-blocked: 20 rate limit violations",
        auto_block_count=1,
        user_agent=None,
        first_seen=NOW - timedelta(days=1),
        last_seen=NOW,
        last_violation=NOW,
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_rate_limiter():
    """Create mock rate limiter (RateLimitProtocol)."""
    limiter = AsyncMock()
    limiter.check_limit = AsyncMock(return_value=allowed())
    limiter.is_blocked = AsyncMock(return_value=Success(value=False))
    return limiter


@pytest.fixture
def mock_usage_tracker():
    """Create mock usage tracker."""
    tracker = AsyncMock()
    tracker.get_ip_stats = AsyncMock(return_value=Success(value=None))
    tracker.get_daily_usage_count = AsyncMock(return_value=0)
    return tracker


@pytest.fixture
def service(mock_rate_limiter, mock_usage_tracker, mock_logger):
    """Create AdmissionService over the production tier table."""
    return AdmissionService(
        policy=AdmissionPolicy(policies=TIER_POLICIES),
        rate_limiter=mock_rate_limiter,
        usage_tracker=mock_usage_tracker,
        logger=mock_logger,
    )


# ============================================================================
# admit
# ============================================================================


@pytest.mark.unit
class TestAdmitAllowed:
    """Test allowed decisions."""

    async def test_allowed_with_quota(self, service, mock_usage_tracker):
        """Test quota fields on an allowed anonymous request."""
        mock_usage_tracker.get_daily_usage_count.return_value = 1

        decision = await service.admit(ANONYMOUS, "analyze", now=NOW)

        assert decision.allowed is True
        assert decision.error is None
        assert decision.retry_after is None
        assert decision.quota_used == 1
        assert decision.quota_remaining == 1
        assert decision.rate_limit.remaining == 9

    async def test_burst_check_parameters(self, service, mock_rate_limiter):
        """Test the plan's identifier and rule reach the limiter."""
        await service.admit(ANONYMOUS, "analyze", now=NOW)

        mock_rate_limiter.check_limit.assert_awaited_once_with(
            "ip:203.0.113.7", 10, 60, now_ms=NOW_MS
        )

    async def test_defaults_to_current_time(self, service, mock_rate_limiter):
        """Test the wall clock is used when no time is passed."""
        with freeze_time(NOW, real_asyncio=True):
            await service.admit(ANONYMOUS, "analyze")

        mock_rate_limiter.check_limit.assert_awaited_once_with(
            "ip:203.0.113.7", 10, 60, now_ms=NOW_MS
        )

    async def test_unlimited_tier_skips_quota(self, service, mock_usage_tracker):
        """Test enterprise callers never count daily usage."""
        identity = CallerIdentity(ip_address=IP, user_id="u1", tier="enterprise")

        decision = await service.admit(identity, "analyze", now=NOW)

        assert decision.allowed is True
        assert decision.quota_used is None
        assert decision.quota_remaining is None
        mock_usage_tracker.get_daily_usage_count.assert_not_called()

    async def test_quota_counted_by_user(self, service, mock_usage_tracker):
        """Test authenticated callers pass user_id to the count."""
        identity = CallerIdentity(ip_address=IP, user_id="u1", tier="pro")

        await service.admit(identity, "analyze", now=NOW)

        mock_usage_tracker.get_daily_usage_count.assert_awaited_once_with(
            "analyze", user_id="u1", ip_address=IP, now=NOW
        )

    async def test_bucket_override(self, service, mock_rate_limiter):
        """Test bucket and burst override reach the limiter."""
        await service.admit(
            ANONYMOUS,
            "bulk-analyze",
            bucket="bulk",
            burst=RateLimitRule(limit=20, window_seconds=120),
            now=NOW,
        )

        mock_rate_limiter.check_limit.assert_awaited_once_with(
            "bulk:ip:203.0.113.7", 20, 120, now_ms=NOW_MS
        )

    async def test_limiter_failure_fails_open(
        self, service, mock_rate_limiter, mock_logger
    ):
        """Test a limiter Failure allows the request with full capacity."""
        mock_rate_limiter.check_limit.return_value = Failure(
            error=RateLimitError(
                code=ErrorCode.RATE_LIMIT_CHECK_FAILED, message="down"
            )
        )

        decision = await service.admit(ANONYMOUS, "analyze", now=NOW)

        assert decision.allowed is True
        assert decision.rate_limit.remaining == 10
        mock_logger.warning.assert_called_once()

    async def test_abuse_lookup_failure_fails_open(
        self, service, mock_usage_tracker
    ):
        """Test abuse store errors do not block."""
        mock_usage_tracker.get_ip_stats.return_value = Failure(error=object())

        decision = await service.admit(ANONYMOUS, "analyze", now=NOW)

        assert decision.allowed is True


@pytest.mark.unit
class TestAdmitDenied:
    """Test denial paths in check order."""

    async def test_active_auto_block(
        self, service, mock_usage_tracker, mock_rate_limiter, mock_logger
    ):
        """Test an active block denies before the burst check."""
        until = NOW + timedelta(minutes=30, seconds=0.5)
        mock_usage_tracker.get_ip_stats.return_value = Success(
            value=blocked_record(until)
        )

        decision = await service.admit(ANONYMOUS, "analyze", now=NOW)

        assert decision.allowed is False
        assert decision.error.code == ErrorCode.IP_BLOCKED
        assert decision.retry_after == 1801
        assert decision.error.details == {"blocked_until": until.isoformat()}
        mock_rate_limiter.check_limit.assert_not_called()
        assert mock_logger.info.call_args.args[0] == "Admission denied"

    async def test_expired_block_allows(self, service, mock_usage_tracker):
        """Test an expired, unswept block does not deny."""
        mock_usage_tracker.get_ip_stats.return_value = Success(
            value=blocked_record(NOW - timedelta(seconds=1))
        )

        decision = await service.admit(ANONYMOUS, "analyze", now=NOW)

        assert decision.allowed is True

    async def test_explicit_limiter_block(self, service, mock_rate_limiter):
        """Test an explicit block_ip() flag denies without retry_after."""
        mock_rate_limiter.is_blocked.return_value = Success(value=True)

        decision = await service.admit(ANONYMOUS, "analyze", now=NOW)

        assert decision.error.code == ErrorCode.IP_BLOCKED
        assert decision.retry_after is None
        mock_rate_limiter.check_limit.assert_not_called()

    async def test_burst_exceeded(self, service, mock_rate_limiter, mock_usage_tracker):
        """Test burst denial carries the limiter's retry_after."""
        mock_rate_limiter.check_limit.return_value = denied(retry_after=42)

        decision = await service.admit(ANONYMOUS, "analyze", now=NOW)

        assert decision.allowed is False
        assert decision.error.code == ErrorCode.RATE_LIMIT_EXCEEDED
        assert decision.retry_after == 42
        assert decision.error.details == {"limit": "10"}
        assert decision.rate_limit.success is False
        mock_usage_tracker.get_daily_usage_count.assert_not_called()

    async def test_daily_quota_exceeded(self, service, mock_usage_tracker):
        """Test the third anonymous request of the day is denied."""
        mock_usage_tracker.get_daily_usage_count.return_value = 2

        decision = await service.admit(ANONYMOUS, "analyze", now=NOW)

        assert decision.allowed is False
        assert decision.error.code == ErrorCode.DAILY_QUOTA_EXCEEDED
        assert decision.quota_used == 2
        assert decision.quota_remaining == 0
        assert decision.error.details == {"tier": "anonymous", "daily_quota": "2"}
        assert 1 <= decision.retry_after <= 86400


# ============================================================================
# consume_extra / daily_usage
# ============================================================================


@pytest.mark.unit
class TestConsumeExtra:
    """Test batch slot consumption."""

    async def test_consumes_all_slots(self, service, mock_rate_limiter):
        """Test every extra slot is charged when capacity allows."""
        decision = await service.admit(ANONYMOUS, "bulk", now=NOW)

        consumed = await service.consume_extra(decision, 3, now=NOW)

        assert consumed == 3
        assert mock_rate_limiter.check_limit.await_count == 4

    async def test_stops_at_first_denial(self, service, mock_rate_limiter):
        """Test consumption stops once the window is full."""
        decision = await service.admit(ANONYMOUS, "bulk", now=NOW)
        mock_rate_limiter.check_limit.side_effect = [allowed(), denied(), allowed()]

        consumed = await service.consume_extra(decision, 3, now=NOW)

        assert consumed == 1

    async def test_denied_decision_consumes_nothing(self, service, mock_rate_limiter):
        """Test denied decisions never charge extra slots."""
        mock_rate_limiter.check_limit.return_value = denied()
        decision = await service.admit(ANONYMOUS, "bulk", now=NOW)

        assert await service.consume_extra(decision, 5, now=NOW) == 0
        assert mock_rate_limiter.check_limit.await_count == 1

    async def test_non_positive_slots(self, service):
        """Test zero slots is a no-op."""
        decision = await service.admit(ANONYMOUS, "bulk", now=NOW)

        assert await service.consume_extra(decision, 0, now=NOW) == 0


@pytest.mark.unit
class TestDailyUsage:
    """Test daily usage reporting."""

    async def test_limited_tier(self, service, mock_usage_tracker):
        """Test used, limit and remaining for a quota tier."""
        mock_usage_tracker.get_daily_usage_count.return_value = 3
        identity = CallerIdentity(ip_address=IP, user_id="u1")

        usage = await service.daily_usage(identity, "analyze", now=NOW)

        assert usage.tier is Tier.FREE
        assert (usage.used, usage.limit, usage.remaining) == (3, 5, 2)

    async def test_remaining_never_negative(self, service, mock_usage_tracker):
        """Test over-quota usage reports zero remaining."""
        mock_usage_tracker.get_daily_usage_count.return_value = 9

        usage = await service.daily_usage(ANONYMOUS, "analyze", now=NOW)

        assert usage.remaining == 0

    async def test_unlimited_tier(self, service, mock_usage_tracker):
        """Test unlimited tiers report no limit and no remaining."""
        mock_usage_tracker.get_daily_usage_count.return_value = 120
        identity = CallerIdentity(ip_address=IP, user_id="u1", tier="enterprise")

        usage = await service.daily_usage(identity, "analyze", now=NOW)

        assert (usage.used, usage.limit, usage.remaining) == (120, None, None)
