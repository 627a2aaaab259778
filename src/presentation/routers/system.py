"""System router for non-versioned application endpoints.

Root and health endpoints used by load balancers and monitoring. Health
reports the reachability of Redis and of the database.
"""

from fastapi import APIRouter, Depends, Response, status

from src.core.config import get_settings
from src.core.container import AdmissionContainer
from src.presentation.routers.api.middleware.admission_dependencies import (
    get_container,
)
from src.schemas.admission_schemas import HealthResponse

system_router = APIRouter(tags=["System"])


@system_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - basic status check.

    Returns:
        dict[str, str]: Service name, status and version.
    """
    settings = get_settings()
    return {
        "message": settings.app_name,
        "status": "operational",
        "version": settings.app_version,
    }


@system_router.get("/health", response_model=HealthResponse)
async def health(
    response: Response,
    container: AdmissionContainer = Depends(get_container),
) -> HealthResponse:
    """Health check for monitoring and load balancers.

    Returns 503 when either store is unreachable. The admission layer
    fails open in that state, so the service keeps answering.
    """
    stats = await container.cache.get_stats()
    database_ok = await container.database.check_connection()
    redis_ok = bool(stats.get("available"))

    if redis_ok and database_ok:
        return HealthResponse(status="healthy", redis=True, database=True)

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="degraded", redis=redis_ok, database=database_ok)
