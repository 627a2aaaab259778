"""Pytest configuration for async testing.

This configuration ensures:
1. Required settings exist before any application module is imported
2. Async tests are auto-marked for pytest-asyncio
3. Shared fixtures (fakeredis client, mock logger, SQLite database) are isolated
   per test
"""

import asyncio
import os

# Settings are required fields; set test defaults before src imports.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test-admission.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from unittest.mock import MagicMock  # noqa: E402

import fakeredis.aioredis  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from src.infrastructure.persistence.database import Database  # noqa: E402


@pytest_asyncio.fixture
async def fake_redis():
    """Create fakeredis client (executes real Lua scripts).

    decode_responses=False matches the production connection pool.
    """
    client = fakeredis.aioredis.FakeRedis(decode_responses=False)
    yield client
    await client.aclose()


@pytest.fixture
def mock_logger():
    """Create mock logger."""
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.critical = MagicMock()
    return logger


@pytest_asyncio.fixture
async def database(tmp_path):
    """Create a SQLite-backed Database with all tables."""
    db = Database(database_url=f"sqlite+aiosqlite:///{tmp_path / 'admission.db'}")
    await db.create_all()
    yield db
    await db.close()


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with a real database or Redis"
    )
    config.addinivalue_line("markers", "api: API tests through the FastAPI test client")
    config.addinivalue_line("markers", "asyncio: Async test that requires event loop")


# Test execution configuration
def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions.

    This ensures all async tests are properly marked even if
    the developer forgets to add @pytest.mark.asyncio.
    """
    for item in items:
        if asyncio.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)
