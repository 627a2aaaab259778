"""Structured logging port.

Every component of the admission layer receives a LoggerProtocol by
injection; ConsoleAdapter (structlog) is the production implementation and
tests pass a MagicMock.

Level conventions used across the layer:
    - DEBUG: per-decision diagnostics (cache hit/miss, window decisions)
    - INFO: operator-visible events (manual unblock, cleanup sweep)
    - WARNING: fail-open paths, auto-blocks, dropped usage records
    - ERROR: swallowed persistence failures

API keys are logged by api_key_id only, never by value.

Usage:
    logger.warning("IP auto-blocked", ip_address=ip, reason=reason)
    job_logger = logger.bind(job="block_cleanup")
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Message plus key-value context; no f-string interpolation."""

    def debug(self, message: str, /, **context: Any) -> None: ...

    def info(self, message: str, /, **context: Any) -> None: ...

    def warning(self, message: str, /, **context: Any) -> None: ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error; `error` is flattened into error_type/error_message."""
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical failure; same `error` handling as error()."""
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return a new logger carrying `context` on every event.

        The receiver is left unchanged.
        """
        ...

    def with_context(self, **context: Any) -> LoggerProtocol:
        """Alias for bind()."""
        ...
