"""Unit tests for ConsoleAdapter (structured console logging).

Tests cover:
- LoggerProtocol methods forward message and context to structlog
- error()/critical() flatten an exception into error_type/error_message
- Context binding returns a new adapter
- Renderer selection (JSON vs console) and level filtering

Architecture:
- Unit tests with mocked structlog
- NO real logging output
"""

from unittest.mock import MagicMock, patch

import pytest

from src.infrastructure.logging.console_adapter import ConsoleAdapter

STRUCTLOG = "src.infrastructure.logging.console_adapter.structlog"


@pytest.mark.unit
class TestConsoleAdapterLogging:
    """Test ConsoleAdapter logging methods."""

    @pytest.mark.parametrize("level", ["debug", "info", "warning"])
    def test_logs_message_with_context(self, level):
        """Test debug/info/warning forward message and context unchanged."""
        with patch(STRUCTLOG) as mock_structlog:
            mock_logger = MagicMock()
            mock_structlog.get_logger.return_value = mock_logger

            adapter = ConsoleAdapter()
            getattr(adapter, level)("Window evaluated", identifier="ip:203.0.113.7")

            getattr(mock_logger, level).assert_called_once_with(
                "Window evaluated",
                identifier="ip:203.0.113.7",
            )

    def test_error_without_exception(self):
        """Test error() without an exception passes context through."""
        with patch(STRUCTLOG) as mock_structlog:
            mock_logger = MagicMock()
            mock_structlog.get_logger.return_value = mock_logger

            adapter = ConsoleAdapter()
            adapter.error("Cleanup failed", unblocked_count=0)

            mock_logger.error.assert_called_once_with(
                "Cleanup failed", unblocked_count=0
            )

    def test_error_flattens_exception(self):
        """Test error() records exception type and message as fields."""
        with patch(STRUCTLOG) as mock_structlog:
            mock_logger = MagicMock()
            mock_structlog.get_logger.return_value = mock_logger

            adapter = ConsoleAdapter()
            adapter.error(
                "Failed to record usage event",
                error=ConnectionError("db down"),
                ip_address="203.0.113.7",
            )

            mock_logger.error.assert_called_once_with(
                "Failed to record usage event",
                ip_address="203.0.113.7",
                error_type="ConnectionError",
                error_message="db down",
            )

    def test_critical_flattens_exception(self):
        """Test critical() records exception type and message as fields."""
        with patch(STRUCTLOG) as mock_structlog:
            mock_logger = MagicMock()
            mock_structlog.get_logger.return_value = mock_logger

            adapter = ConsoleAdapter()
            adapter.critical("Startup failed", error=RuntimeError("no redis"))

            mock_logger.critical.assert_called_once_with(
                "Startup failed",
                error_type="RuntimeError",
                error_message="no redis",
            )

    def test_logs_with_no_context(self):
        """Test logging with no additional context."""
        with patch(STRUCTLOG) as mock_structlog:
            mock_logger = MagicMock()
            mock_structlog.get_logger.return_value = mock_logger

            adapter = ConsoleAdapter()
            adapter.info("Application started")

            mock_logger.info.assert_called_once_with("Application started")


@pytest.mark.unit
class TestConsoleAdapterContextBinding:
    """Test ConsoleAdapter context binding methods."""

    def test_bind_returns_new_adapter_with_bound_context(self):
        """Test bind() returns new adapter wrapping the bound logger."""
        with patch(STRUCTLOG) as mock_structlog:
            mock_logger = MagicMock()
            mock_bound_logger = MagicMock()
            mock_structlog.get_logger.return_value = mock_logger
            mock_logger.bind.return_value = mock_bound_logger

            adapter = ConsoleAdapter()
            bound_adapter = adapter.bind(endpoint="analyze")

            mock_logger.bind.assert_called_once_with(endpoint="analyze")
            assert bound_adapter is not adapter
            assert bound_adapter._logger == mock_bound_logger

    def test_with_context_is_alias_for_bind(self):
        """Test with_context() binds like bind()."""
        with patch(STRUCTLOG) as mock_structlog:
            mock_logger = MagicMock()
            mock_bound_logger = MagicMock()
            mock_structlog.get_logger.return_value = mock_logger
            mock_logger.bind.return_value = mock_bound_logger

            adapter = ConsoleAdapter()
            context_adapter = adapter.with_context(ip_address="203.0.113.7")
            context_adapter.warning("IP auto-blocked")

            mock_logger.bind.assert_called_once_with(ip_address="203.0.113.7")
            mock_bound_logger.warning.assert_called_once_with("IP auto-blocked")


@pytest.mark.unit
class TestConsoleAdapterConfiguration:
    """Test structlog configuration performed by the constructor."""

    def test_json_renderer_when_use_json(self):
        """Test use_json=True appends the JSON renderer."""
        with patch(STRUCTLOG) as mock_structlog:
            ConsoleAdapter(use_json=True)

            processors = mock_structlog.configure.call_args.kwargs["processors"]
            assert processors[-1] is mock_structlog.processors.JSONRenderer.return_value

    def test_console_renderer_by_default(self):
        """Test default configuration appends the console renderer."""
        with patch(STRUCTLOG) as mock_structlog:
            ConsoleAdapter()

            processors = mock_structlog.configure.call_args.kwargs["processors"]
            assert processors[-1] is mock_structlog.dev.ConsoleRenderer.return_value
            mock_structlog.dev.ConsoleRenderer.assert_called_once_with(colors=True)

    def test_level_filtering(self):
        """Test level name is mapped to the filtering bound logger."""
        with patch(STRUCTLOG) as mock_structlog:
            ConsoleAdapter(level="warning")

            mock_structlog.make_filtering_bound_logger.assert_called_once_with(30)

    def test_unknown_level_falls_back_to_info(self):
        """Test an unknown level name filters at INFO."""
        with patch(STRUCTLOG) as mock_structlog:
            ConsoleAdapter(level="chatty")

            mock_structlog.make_filtering_bound_logger.assert_called_once_with(20)
