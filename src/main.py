"""
Main FastAPI application entry point.

create_app() builds the application; the lifespan owns the admission
container: it is created and started on startup, drained and closed on
shutdown. Host applications mount their own routes and protect them with
require_admission().
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from src.core.config import Settings, get_settings
from src.core.container import AdmissionContainer
from src.presentation.routers import admin_router, system_router, usage_router


def create_app(
    settings: Settings | None = None,
    *,
    container: AdmissionContainer | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use (default: get_settings()).
        container: Pre-built container (tests); created from settings when
            omitted.

    Returns:
        FastAPI: Configured application.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan: own the admission container.

        Args:
            app: FastAPI application instance.

        Yields:
            None during application lifetime.
        """
        app.state.container = container or AdmissionContainer.create(settings)
        await app.state.container.start()
        app.state.container.logger.info(
            "Application started",
            app_name=settings.app_name,
            environment=settings.environment.value,
        )

        yield

        await app.state.container.aclose()

    app = FastAPI(
        title=settings.app_name,
        description="Abuse-resistant admission control: rate limiting, "
        "usage tracking with automatic IP blocking, and lookup caching",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.include_router(system_router)
    app.include_router(usage_router)
    app.include_router(admin_router)

    return app


def run() -> None:
    """Serve the application with uvicorn (`gatekeeper` console script).

    The app is built by the factory inside the server process, so the
    container's lifespan runs on uvicorn's event loop.
    """
    settings = get_settings()
    uvicorn.run(
        "src.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    run()
