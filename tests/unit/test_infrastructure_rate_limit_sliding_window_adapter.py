"""Unit tests for SlidingWindowAdapter.

Tests adapter behavior to verify:
- Conversion of window state into RateLimitResult (remaining, reset, retry_after)
- Key construction for windows and explicit blocks
- Fail-open behavior for every check
- reset() propagates failures
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.errors import RateLimitError
from src.infrastructure.rate_limit.redis_storage import RedisStorage, WindowState
from src.infrastructure.rate_limit.sliding_window_adapter import SlidingWindowAdapter

BASE_MS = 1_760_000_000_000


def storage_error() -> Failure:
    return Failure(
        error=RateLimitError(
            code=ErrorCode.RATE_LIMIT_CHECK_FAILED,
            message="Redis unavailable",
        )
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_storage():
    """Create mock storage."""
    storage = AsyncMock()
    storage.evaluate_window = AsyncMock(
        return_value=Success(value=WindowState(allowed=True, count=0, oldest_ms=BASE_MS))
    )
    storage.count_window = AsyncMock(return_value=Success(value=0))
    storage.set_flag = AsyncMock(return_value=Success(value=None))
    storage.get_flag = AsyncMock(return_value=Success(value=False))
    storage.delete = AsyncMock(return_value=Success(value=None))
    return storage


@pytest.fixture
def adapter(mock_storage, mock_logger):
    """Create adapter with mocked storage."""
    return SlidingWindowAdapter(storage=mock_storage, logger=mock_logger)


@pytest.fixture
def redis_adapter(fake_redis):
    """Create adapter backed by fakeredis (real Lua script)."""
    return SlidingWindowAdapter(
        storage=RedisStorage(redis_client=fake_redis), logger=MagicMock()
    )


# ============================================================================
# check_limit
# ============================================================================


@pytest.mark.unit
class TestCheckLimit:
    """Test check_limit decisions."""

    async def test_allowed_result(self, adapter, mock_storage):
        """Test allowed decision: remaining = limit - count - 1."""
        mock_storage.evaluate_window.return_value = Success(
            value=WindowState(allowed=True, count=3, oldest_ms=BASE_MS)
        )

        result = await adapter.check_limit("ip:203.0.113.7", 10, 60, now_ms=BASE_MS)

        assert isinstance(result, Success)
        decision = result.value
        assert decision.success is True
        assert decision.limit == 10
        assert decision.remaining == 6
        assert decision.reset == BASE_MS + 60_000
        assert decision.retry_after is None

    async def test_denied_result(self, adapter, mock_storage):
        """Test denied decision: reset from oldest entry, retry_after rounded up."""
        mock_storage.evaluate_window.return_value = Success(
            value=WindowState(allowed=False, count=10, oldest_ms=BASE_MS)
        )

        result = await adapter.check_limit(
            "ip:203.0.113.7", 10, 60, now_ms=BASE_MS + 2_500
        )

        decision = result.value
        assert decision.success is False
        assert decision.remaining == 0
        assert decision.reset == BASE_MS + 60_000
        assert decision.retry_after == 58

    async def test_retry_after_at_least_one(self, adapter, mock_storage):
        """Test retry_after never drops below one second."""
        mock_storage.evaluate_window.return_value = Success(
            value=WindowState(allowed=False, count=10, oldest_ms=BASE_MS)
        )

        result = await adapter.check_limit(
            "ip:203.0.113.7", 10, 60, now_ms=BASE_MS + 60_000
        )

        assert result.value.retry_after == 1

    async def test_window_key(self, adapter, mock_storage):
        """Test identifier is namespaced under ratelimit:."""
        await adapter.check_limit("bulk:key:42", 20, 120, now_ms=BASE_MS)

        kwargs = mock_storage.evaluate_window.await_args.kwargs
        assert kwargs["key"] == "ratelimit:bulk:key:42"
        assert kwargs["rule"].limit == 20
        assert kwargs["rule"].window_seconds == 120
        assert kwargs["now_ms"] == BASE_MS

    async def test_fail_open_on_storage_error(self, adapter, mock_storage, mock_logger):
        """Test storage failure allows the request with full capacity."""
        mock_storage.evaluate_window.return_value = storage_error()

        result = await adapter.check_limit("ip:203.0.113.7", 10, 60, now_ms=BASE_MS)

        assert isinstance(result, Success)
        assert result.value.success is True
        assert result.value.remaining == 10
        mock_logger.warning.assert_called_once()
        assert (
            mock_logger.warning.call_args.args[0]
            == "Rate limit storage error - allowing request"
        )

    async def test_invalid_parameters_raise(self, adapter):
        """Test non-positive limit is a programming error."""
        with pytest.raises(ValueError):
            await adapter.check_limit("ip:203.0.113.7", 0, 60)


# ============================================================================
# Full window lifecycle against fakeredis
# ============================================================================


@pytest.mark.unit
class TestSlidingWindowLifecycle:
    """Test a full window lifecycle with the real Lua script."""

    async def test_three_per_minute(self, redis_adapter):
        """Test limit 3 per 60s: three admitted, fourth denied, capacity restored."""
        remaining = []
        for offset in (0, 1000, 2000):
            result = await redis_adapter.check_limit(
                "ip:203.0.113.7", 3, 60, now_ms=BASE_MS + offset
            )
            assert result.value.success is True
            remaining.append(result.value.remaining)
        assert remaining == [2, 1, 0]

        denied = await redis_adapter.check_limit(
            "ip:203.0.113.7", 3, 60, now_ms=BASE_MS + 3000
        )
        assert denied.value.success is False
        assert denied.value.reset == BASE_MS + 60_000
        assert denied.value.retry_after == 57

        restored = await redis_adapter.check_limit(
            "ip:203.0.113.7", 3, 60, now_ms=BASE_MS + 62_000
        )
        assert restored.value.success is True
        assert restored.value.remaining == 2

    async def test_get_limit_does_not_consume(self, redis_adapter):
        """Test get_limit reports capacity without recording."""
        await redis_adapter.check_limit("ip:203.0.113.7", 3, 60, now_ms=BASE_MS)

        first = await redis_adapter.get_limit(
            "ip:203.0.113.7", 3, 60, now_ms=BASE_MS + 10
        )
        second = await redis_adapter.get_limit(
            "ip:203.0.113.7", 3, 60, now_ms=BASE_MS + 20
        )

        assert first.value.remaining == 2
        assert second.value.remaining == 2

    async def test_reset_clears_window(self, redis_adapter):
        """Test reset restores full capacity."""
        for _ in range(3):
            await redis_adapter.check_limit("ip:203.0.113.7", 3, 60, now_ms=BASE_MS)

        await redis_adapter.reset("ip:203.0.113.7")
        result = await redis_adapter.check_limit(
            "ip:203.0.113.7", 3, 60, now_ms=BASE_MS
        )

        assert result.value.success is True
        assert result.value.remaining == 2

    async def test_block_ip_round_trip(self, redis_adapter):
        """Test explicit blocks are visible to is_blocked."""
        await redis_adapter.block_ip("203.0.113.7", 60)

        assert await redis_adapter.is_blocked("203.0.113.7") == Success(value=True)
        assert await redis_adapter.is_blocked("198.51.100.1") == Success(value=False)

    async def test_concurrent_checks_never_exceed_limit(
        self, redis_adapter, fake_redis
    ):
        """Test simultaneous checks in one millisecond admit exactly `limit`."""
        results = await asyncio.gather(
            *(
                redis_adapter.check_limit("ip:198.51.100.9", 3, 60, now_ms=BASE_MS)
                for _ in range(10)
            )
        )

        admitted = [r.value for r in results if r.value.success]
        assert len(admitted) == 3
        assert sorted(d.remaining for d in admitted) == [0, 1, 2]
        assert await fake_redis.zcard("ratelimit:ip:198.51.100.9") == 3


# ============================================================================
# get_limit / blocks / reset with mocked storage
# ============================================================================


@pytest.mark.unit
class TestGetLimit:
    """Test get_limit reporting."""

    async def test_reports_remaining(self, adapter, mock_storage):
        """Test remaining = limit - count."""
        mock_storage.count_window.return_value = Success(value=4)

        result = await adapter.get_limit("user:u1", 10, 60, now_ms=BASE_MS)

        assert result.value.success is True
        assert result.value.remaining == 6

    async def test_exhausted_window(self, adapter, mock_storage):
        """Test a full window reports success=False and remaining 0."""
        mock_storage.count_window.return_value = Success(value=12)

        result = await adapter.get_limit("user:u1", 10, 60, now_ms=BASE_MS)

        assert result.value.success is False
        assert result.value.remaining == 0

    async def test_fail_open(self, adapter, mock_storage):
        """Test storage failure reports full capacity."""
        mock_storage.count_window.return_value = storage_error()

        result = await adapter.get_limit("user:u1", 10, 60, now_ms=BASE_MS)

        assert result.value.remaining == 10


@pytest.mark.unit
class TestBlocks:
    """Test explicit IP blocks."""

    async def test_block_ip_uses_block_key(self, adapter, mock_storage, mock_logger):
        """Test block_ip writes blocked:ip:{ip} with the duration as TTL."""
        result = await adapter.block_ip("203.0.113.7", 900)

        assert result == Success(value=None)
        mock_storage.set_flag.assert_awaited_once_with(
            key="blocked:ip:203.0.113.7", ttl_seconds=900
        )
        mock_logger.info.assert_called_once()

    async def test_block_ip_noop_on_error(self, adapter, mock_storage, mock_logger):
        """Test block_ip swallows storage errors with a warning."""
        mock_storage.set_flag.return_value = storage_error()

        result = await adapter.block_ip("203.0.113.7")

        assert result == Success(value=None)
        mock_logger.warning.assert_called_once()

    async def test_is_blocked_fail_open(self, adapter, mock_storage):
        """Test is_blocked returns False when storage fails."""
        mock_storage.get_flag.return_value = storage_error()

        assert await adapter.is_blocked("203.0.113.7") == Success(value=False)


@pytest.mark.unit
class TestReset:
    """Test reset (does not fail open)."""

    async def test_reset_success(self, adapter, mock_storage, mock_logger):
        """Test reset deletes the window key."""
        result = await adapter.reset("ip:203.0.113.7")

        assert result == Success(value=None)
        mock_storage.delete.assert_awaited_once_with(key="ratelimit:ip:203.0.113.7")
        mock_logger.info.assert_called_once()

    async def test_reset_failure_propagates(self, adapter, mock_storage, mock_logger):
        """Test reset returns the storage Failure and logs an error."""
        failure = Failure(
            error=RateLimitError(
                code=ErrorCode.RATE_LIMIT_RESET_FAILED,
                message="Redis unavailable",
            )
        )
        mock_storage.delete.return_value = failure

        result = await adapter.reset("ip:203.0.113.7")

        assert result is failure
        mock_logger.error.assert_called_once()
