"""Bounded background dispatcher for usage records.

Decouples usage tracking from the request path: submit() enqueues and
returns immediately, a single worker task awaits the handler for each
record.

Overflow Policy:
    When the queue is full the OLDEST pending record is dropped (with a
    warning) to make room. submit() never waits for queue space.

Usage:
    dispatcher = UsageDispatcher(max_size=1000, logger=logger)
    dispatcher.start(handler=tracker.process)
    dispatcher.submit(record)
    ...
    await dispatcher.stop()  # drains pending records
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.value_objects.usage_record import UsageRecord

type RecordHandler = Callable[[UsageRecord], Awaitable[None]]


class UsageDispatcher:
    """Bounded queue plus one worker task.

    Args:
        max_size: Maximum pending records.
        logger: Structured logger.

    Raises:
        ValueError: If max_size <= 0.
    """

    def __init__(self, *, max_size: int = 1000, logger: LoggerProtocol) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._queue: asyncio.Queue[UsageRecord] = asyncio.Queue(maxsize=max_size)
        self._logger = logger
        self._handler: RecordHandler | None = None
        self._worker: asyncio.Task[None] | None = None
        self._dropped = 0

    @property
    def pending(self) -> int:
        """Records waiting to be processed."""
        return self._queue.qsize()

    @property
    def dropped(self) -> int:
        """Records dropped because of overflow since creation."""
        return self._dropped

    @property
    def is_running(self) -> bool:
        """Whether the worker task is alive."""
        return self._worker is not None and not self._worker.done()

    def start(self, *, handler: RecordHandler) -> None:
        """Start the worker task (must run inside an event loop).

        Args:
            handler: Coroutine function called once per record.
        """
        if self.is_running:
            return
        self._handler = handler
        self._worker = asyncio.create_task(self._run(), name="usage-dispatcher")
        self._logger.info("Usage dispatcher started", max_size=self._queue.maxsize)

    def submit(self, record: UsageRecord) -> None:
        """Enqueue a record without waiting, dropping the oldest on overflow."""
        try:
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            dropped = self._queue.get_nowait()
            self._queue.task_done()
            self._dropped += 1
            self._logger.warning(
                "Usage tracking queue full - dropped oldest record",
                dropped_ip_address=dropped.ip_address,
                dropped_endpoint=dropped.endpoint,
                dropped_total=self._dropped,
            )
            self._queue.put_nowait(record)

    async def stop(self, *, drain: bool = True) -> None:
        """Stop the worker.

        Args:
            drain: Process every pending record before stopping.
        """
        if self._worker is None:
            return
        if drain and not self._worker.done():
            await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        self._logger.info(
            "Usage dispatcher stopped",
            pending=self._queue.qsize(),
            dropped_total=self._dropped,
        )

    async def _run(self) -> None:
        while True:
            record = await self._queue.get()
            try:
                if self._handler is not None:
                    await self._handler(record)
            except Exception as e:
                self._logger.error(
                    "Usage record processing failed",
                    error=e,
                    ip_address=record.ip_address,
                    endpoint=record.endpoint,
                )
            finally:
                self._queue.task_done()
