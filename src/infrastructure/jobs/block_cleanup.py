"""Periodic sweep lifting expired auto-blocks.

Calls UsageTracker.cleanup_expired_blocks() every interval. Errors are
logged and the loop continues; the job only stops with the service.

Usage:
    job = BlockCleanupJob(usage_tracker=tracker, interval_seconds=300, logger=logger)
    job.start()
    ...
    await job.stop()
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from src.core.result import Failure

if TYPE_CHECKING:
    from src.application.services.usage_tracker import UsageTracker
    from src.domain.protocols.logger_protocol import LoggerProtocol


class BlockCleanupJob:
    """Background loop around cleanup_expired_blocks().

    Args:
        usage_tracker: Service owning the abuse records.
        interval_seconds: Delay between sweeps.
        logger: Structured logger.
    """

    def __init__(
        self,
        *,
        usage_tracker: UsageTracker,
        interval_seconds: float = 300,
        logger: LoggerProtocol,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(
                f"interval_seconds must be positive, got {interval_seconds}"
            )
        self._usage_tracker = usage_tracker
        self._interval = interval_seconds
        self._logger = logger
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """Whether the sweep loop is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop (must run inside an event loop)."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="block-cleanup")
        self._logger.info("Block cleanup job started", interval_seconds=self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to exit."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._logger.info("Block cleanup job stopped")

    async def run_once(self) -> int:
        """Run one sweep.

        Returns:
            int: IPs unblocked (0 when the sweep failed).
        """
        try:
            result = await self._usage_tracker.cleanup_expired_blocks()
        except Exception as e:
            self._logger.error("Block cleanup sweep failed", error=e)
            return 0
        if isinstance(result, Failure):
            return 0
        return result.value

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()
