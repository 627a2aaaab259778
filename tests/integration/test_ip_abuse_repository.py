"""Integration tests for IPAbuseRepository on SQLite.

Tests cover:
- First-seen insert and duplicate insert race
- Atomic counter increments
- Conditional block application (only one racing block wins)
- Manual and expiry-based unblocking (auto_block_count kept)
- Timezone-aware round trip
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.infrastructure.persistence.repositories import IPAbuseRepository

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
IP = "203.0.113.7"


@pytest.fixture
def repository(database):
    """Create repository over the SQLite database."""
    return IPAbuseRepository(database)


async def insert(repository, ip_address=IP, **overrides):
    values = {
        "ip_address": ip_address,
        "rate_limited": False,
        "invalid_input": False,
        "user_agent": "curl/8.0",
        "now": NOW,
    }
    values.update(overrides)
    return await repository.insert_first_seen(**values)


@pytest.mark.integration
class TestInsertFirstSeen:
    """Test record creation."""

    async def test_creates_record(self, repository):
        """Test a new IP starts with one request and no block."""
        assert await insert(repository) is True

        record = await repository.find_by_ip(IP)

        assert record.total_requests == 1
        assert record.rate_limit_violations == 0
        assert record.is_blocked is False
        assert record.auto_block_count == 0
        assert record.user_agent == "curl/8.0"
        assert record.first_seen == NOW
        assert record.first_seen.tzinfo is not None
        assert record.last_violation is None

    async def test_violating_first_request(self, repository):
        """Test a first request can already count as a violation."""
        await insert(repository, rate_limited=True)

        record = await repository.find_by_ip(IP)

        assert record.rate_limit_violations == 1
        assert record.last_violation == NOW

    async def test_duplicate_insert_returns_false(self, repository):
        """Test a second insert for the same IP loses the race."""
        await insert(repository)

        assert await insert(repository) is False
        record = await repository.find_by_ip(IP)
        assert record.total_requests == 1

    async def test_unknown_ip(self, repository):
        """Test unseen IPs have no record."""
        assert await repository.find_by_ip("198.51.100.1") is None


@pytest.mark.integration
class TestIncrementCounters:
    """Test counter updates."""

    async def test_increments(self, repository):
        """Test totals and violation counters grow."""
        await insert(repository)
        later = NOW + timedelta(minutes=1)

        await repository.increment_counters(
            ip_address=IP, rate_limited=True, invalid_input=False, now=later
        )
        await repository.increment_counters(
            ip_address=IP, rate_limited=False, invalid_input=True, now=later
        )

        record = await repository.find_by_ip(IP)
        assert record.total_requests == 3
        assert record.rate_limit_violations == 1
        assert record.invalid_input_attempts == 1
        assert record.last_seen == later
        assert record.last_violation == later

    async def test_clean_request_keeps_last_violation(self, repository):
        """Test a clean request does not touch last_violation."""
        await insert(repository, rate_limited=True)

        await repository.increment_counters(
            ip_address=IP,
            rate_limited=False,
            invalid_input=False,
            now=NOW + timedelta(minutes=5),
        )

        record = await repository.find_by_ip(IP)
        assert record.last_violation == NOW


@pytest.mark.integration
class TestBlocks:
    """Test block lifecycle."""

    async def test_apply_block(self, repository):
        """Test a block sets state and bumps auto_block_count."""
        await insert(repository)
        until = NOW + timedelta(hours=1)

        applied = await repository.apply_block(
            ip_address=IP, reason="Auto-blocked: test", blocked_at=NOW, blocked_until=until
        )

        record = await repository.find_by_ip(IP)
        assert applied is True
        assert record.is_blocked is True
        assert record.blocked_at == NOW
        assert record.blocked_until == until
        assert record.block_reason == "Auto-blocked: test"
        assert record.auto_block_count == 1
        assert await repository.count_blocked() == 1

    async def test_second_block_not_applied(self, repository):
        """Test an already-blocked IP is not blocked twice."""
        await insert(repository)
        kwargs = {
            "ip_address": IP,
            "reason": "r",
            "blocked_at": NOW,
            "blocked_until": NOW + timedelta(hours=1),
        }

        assert await repository.apply_block(**kwargs) is True
        assert await repository.apply_block(**kwargs) is False
        record = await repository.find_by_ip(IP)
        assert record.auto_block_count == 1

    async def test_clear_block_keeps_history(self, repository):
        """Test manual unblock keeps auto_block_count."""
        await insert(repository)
        await repository.apply_block(
            ip_address=IP, reason="r", blocked_at=NOW, blocked_until=NOW + timedelta(hours=1)
        )

        assert await repository.clear_block(IP) is True

        record = await repository.find_by_ip(IP)
        assert record.is_blocked is False
        assert record.blocked_at is None
        assert record.blocked_until is None
        assert record.auto_block_count == 1

    async def test_clear_block_unknown_ip(self, repository):
        """Test unblocking an unknown IP updates nothing."""
        assert await repository.clear_block("198.51.100.1") is False

    async def test_clear_expired_blocks(self, repository):
        """Test only blocks ending at or before `now` are lifted."""
        await insert(repository, ip_address="10.0.0.1")
        await insert(repository, ip_address="10.0.0.2")
        await repository.apply_block(
            ip_address="10.0.0.1",
            reason="r",
            blocked_at=NOW,
            blocked_until=NOW + timedelta(hours=1),
        )
        await repository.apply_block(
            ip_address="10.0.0.2",
            reason="r",
            blocked_at=NOW,
            blocked_until=NOW + timedelta(hours=4),
        )

        cleared = await repository.clear_expired_blocks(NOW + timedelta(hours=1))

        assert cleared == 1
        assert (await repository.find_by_ip("10.0.0.1")).is_blocked is False
        assert (await repository.find_by_ip("10.0.0.2")).is_blocked is True
        assert await repository.count_blocked() == 1
