"""Unit tests for the application entry point.

Tests cover:
- create_app() mounts the service routers
- run() serves the app factory with uvicorn using Settings
"""

from unittest.mock import MagicMock, patch

import pytest

from src.core.config import Settings
from src.main import create_app, run


@pytest.fixture
def settings():
    """Development settings with a custom bind address."""
    return Settings(
        database_url="sqlite+aiosqlite:///./unused.db",
        redis_url="redis://localhost:6379/15",
        environment="development",
        log_level="warning",
        host="127.0.0.1",
        port=9001,
    )


@pytest.mark.unit
class TestCreateApp:
    """Test application construction."""

    def test_routes_mounted(self, settings):
        """Test system, usage and admin routes are registered."""
        app = create_app(settings, container=MagicMock())

        paths = {route.path for route in app.routes}
        assert {"/", "/health", "/usage/{endpoint}", "/admin/abuse/{ip_address}"} <= paths
        assert app.title == settings.app_name


@pytest.mark.unit
class TestRun:
    """Test the uvicorn launcher."""

    def test_serves_app_factory(self, settings):
        """Test run() hands the factory and bind address to uvicorn."""
        with (
            patch("src.main.get_settings", return_value=settings),
            patch("src.main.uvicorn") as mock_uvicorn,
        ):
            run()

        mock_uvicorn.run.assert_called_once_with(
            "src.main:create_app",
            factory=True,
            host="127.0.0.1",
            port=9001,
            reload=True,
            log_level="warning",
            access_log=False,
        )
