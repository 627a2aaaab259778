"""Usage router.

Read-only daily quota status for the calling identity. Checking the status
does not consume a burst slot or count towards the quota.

Endpoints:
    GET /usage/{endpoint} - Daily quota status
"""

from fastapi import APIRouter, Depends

from src.application.services.admission_service import AdmissionService
from src.domain.value_objects.caller_identity import CallerIdentity
from src.presentation.routers.api.middleware.admission_dependencies import (
    get_admission_service,
    get_caller_identity,
)
from src.schemas.admission_schemas import DailyUsageResponse

usage_router = APIRouter(prefix="/usage", tags=["Usage"])


@usage_router.get("/{endpoint}", response_model=DailyUsageResponse)
async def get_daily_usage(
    endpoint: str,
    identity: CallerIdentity = Depends(get_caller_identity),
    admission: AdmissionService = Depends(get_admission_service),
) -> DailyUsageResponse:
    """Daily quota status of the caller on one endpoint.

    GET /usage/{endpoint} → 200 OK
    """
    usage = await admission.daily_usage(identity, endpoint)
    return DailyUsageResponse.from_domain(endpoint, usage)
