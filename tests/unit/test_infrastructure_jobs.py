"""Unit tests for background jobs.

Tests cover:
- UsageDispatcher: hand-off, overflow drops oldest, drain on stop,
  handler errors are logged and the worker keeps going
- BlockCleanupJob: run_once result mapping and periodic loop
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.errors import UsageTrackingError
from src.domain.value_objects.usage_record import UsageRecord
from src.infrastructure.jobs import BlockCleanupJob, UsageDispatcher


def make_usage(ip_address: str) -> UsageRecord:
    return UsageRecord(
        ip_address=ip_address,
        endpoint="analyze",
        method="GET",
        status_code=200,
        response_time_ms=5,
    )


# ============================================================================
# UsageDispatcher
# ============================================================================


@pytest.mark.unit
class TestUsageDispatcher:
    """Test bounded dispatcher."""

    def test_invalid_size_rejected(self, mock_logger):
        """Test max_size must be positive."""
        with pytest.raises(ValueError):
            UsageDispatcher(max_size=0, logger=mock_logger)

    def test_overflow_drops_oldest(self, mock_logger):
        """Test a full queue drops the oldest record and keeps the newest."""
        dispatcher = UsageDispatcher(max_size=2, logger=mock_logger)

        for ip in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
            dispatcher.submit(make_usage(ip))

        assert dispatcher.pending == 2
        assert dispatcher.dropped == 1
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["dropped_ip_address"] == "10.0.0.1"

    async def test_processes_in_order_and_drains(self, mock_logger):
        """Test stop() waits for every pending record."""
        seen: list[str] = []

        async def handler(record):
            await asyncio.sleep(0)
            seen.append(record.ip_address)

        dispatcher = UsageDispatcher(max_size=10, logger=mock_logger)
        for ip in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
            dispatcher.submit(make_usage(ip))

        dispatcher.start(handler=handler)
        assert dispatcher.is_running
        await dispatcher.stop()

        assert seen == ["10.0.0.1", "10.0.0.2", "10.0.0.3"]
        assert dispatcher.pending == 0
        assert not dispatcher.is_running

    async def test_handler_error_does_not_stop_worker(self, mock_logger):
        """Test a failing record is logged and the next one still runs."""
        handler = AsyncMock(side_effect=[RuntimeError("db down"), None])
        dispatcher = UsageDispatcher(max_size=10, logger=mock_logger)
        dispatcher.start(handler=handler)

        dispatcher.submit(make_usage("10.0.0.1"))
        dispatcher.submit(make_usage("10.0.0.2"))
        await dispatcher.stop()

        assert handler.await_count == 2
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.args[0] == "Usage record processing failed"

    async def test_stop_without_drain(self, mock_logger):
        """Test drain=False cancels immediately, leaving records pending."""
        started = asyncio.Event()

        async def slow_handler(record):
            started.set()
            await asyncio.sleep(10)

        dispatcher = UsageDispatcher(max_size=10, logger=mock_logger)
        dispatcher.start(handler=slow_handler)
        dispatcher.submit(make_usage("10.0.0.1"))
        dispatcher.submit(make_usage("10.0.0.2"))
        await started.wait()

        await dispatcher.stop(drain=False)

        assert dispatcher.pending == 1

    async def test_start_is_idempotent(self, mock_logger):
        """Test a second start() keeps the existing worker."""
        dispatcher = UsageDispatcher(logger=mock_logger)
        dispatcher.start(handler=AsyncMock())
        dispatcher.start(handler=AsyncMock())

        await dispatcher.stop()

        started_logs = [
            call
            for call in mock_logger.info.call_args_list
            if call.args[0] == "Usage dispatcher started"
        ]
        assert len(started_logs) == 1

    async def test_stop_before_start(self, mock_logger):
        """Test stop() on an idle dispatcher is a no-op."""
        dispatcher = UsageDispatcher(logger=mock_logger)

        await dispatcher.stop()

        mock_logger.info.assert_not_called()


# ============================================================================
# BlockCleanupJob
# ============================================================================


@pytest.fixture
def mock_usage_tracker():
    """Create mock usage tracker."""
    tracker = AsyncMock()
    tracker.cleanup_expired_blocks = AsyncMock(return_value=Success(value=2))
    return tracker


@pytest.mark.unit
class TestBlockCleanupJob:
    """Test periodic block cleanup."""

    def test_invalid_interval_rejected(self, mock_usage_tracker, mock_logger):
        """Test interval must be positive."""
        with pytest.raises(ValueError):
            BlockCleanupJob(
                usage_tracker=mock_usage_tracker, interval_seconds=0, logger=mock_logger
            )

    async def test_run_once_returns_count(self, mock_usage_tracker, mock_logger):
        """Test a successful sweep returns the unblocked count."""
        job = BlockCleanupJob(usage_tracker=mock_usage_tracker, logger=mock_logger)

        assert await job.run_once() == 2

    async def test_run_once_failure_returns_zero(
        self, mock_usage_tracker, mock_logger
    ):
        """Test a Failure result reports zero."""
        mock_usage_tracker.cleanup_expired_blocks.return_value = Failure(
            error=UsageTrackingError(
                code=ErrorCode.ABUSE_RECORD_FAILED, message="db down"
            )
        )
        job = BlockCleanupJob(usage_tracker=mock_usage_tracker, logger=mock_logger)

        assert await job.run_once() == 0

    async def test_run_once_exception_logged(self, mock_usage_tracker, mock_logger):
        """Test unexpected exceptions are logged, not raised."""
        mock_usage_tracker.cleanup_expired_blocks.side_effect = RuntimeError("boom")
        job = BlockCleanupJob(usage_tracker=mock_usage_tracker, logger=mock_logger)

        assert await job.run_once() == 0
        mock_logger.error.assert_called_once()

    async def test_loop_sweeps_periodically(self, mock_usage_tracker, mock_logger):
        """Test the started loop sweeps until stopped."""
        job = BlockCleanupJob(
            usage_tracker=mock_usage_tracker,
            interval_seconds=0.01,
            logger=mock_logger,
        )

        job.start()
        await asyncio.sleep(0.1)
        await job.stop()

        assert mock_usage_tracker.cleanup_expired_blocks.await_count >= 2
        assert not job.is_running
