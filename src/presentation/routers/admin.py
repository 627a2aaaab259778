"""Admin router for abuse records and usage analytics.

Mounted by the host behind its own admin authentication; this module only
exposes the operations.

Endpoints:
    GET  /admin/abuse/{ip_address}          - Abuse record of an IP
    POST /admin/abuse/{ip_address}/unblock  - Lift a block (keeps auto_block_count)
    POST /admin/abuse/cleanup               - Sweep expired blocks now
    GET  /admin/usage/analytics             - Usage counts (default: last 24h)
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.application.services.usage_tracker import UsageTracker
from src.core.result import Failure, Success
from src.presentation.routers.api.middleware.admission_dependencies import (
    get_usage_tracker,
)
from src.schemas.admission_schemas import (
    CleanupResponse,
    IPAbuseResponse,
    UnblockResponse,
    UsageAnalyticsResponse,
)

admin_router = APIRouter(prefix="/admin", tags=["Admin"])


def _unavailable(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)


# =============================================================================
# Abuse records
# =============================================================================


@admin_router.post("/abuse/cleanup", response_model=CleanupResponse)
async def cleanup_expired_blocks(
    tracker: UsageTracker = Depends(get_usage_tracker),
) -> CleanupResponse:
    """Lift every block whose blocked_until has passed.

    POST /admin/abuse/cleanup → 200 OK
    """
    match await tracker.cleanup_expired_blocks():
        case Success(value=count):
            return CleanupResponse(unblocked_count=count)
        case Failure(error=err):
            raise _unavailable(err.message)


@admin_router.get("/abuse/{ip_address}", response_model=IPAbuseResponse)
async def get_ip_abuse_record(
    ip_address: str,
    tracker: UsageTracker = Depends(get_usage_tracker),
) -> IPAbuseResponse:
    """Abuse record of one IP.

    GET /admin/abuse/{ip_address} → 200 OK, 404 when never seen
    """
    match await tracker.get_ip_stats(ip_address):
        case Success(value=None):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No abuse record for {ip_address}",
            )
        case Success(value=record):
            return IPAbuseResponse.from_domain(record)
        case Failure(error=err):
            raise _unavailable(err.message)


@admin_router.post("/abuse/{ip_address}/unblock", response_model=UnblockResponse)
async def unblock_ip(
    ip_address: str,
    tracker: UsageTracker = Depends(get_usage_tracker),
) -> UnblockResponse:
    """Manually lift a block.

    POST /admin/abuse/{ip_address}/unblock → 200 OK
    """
    match await tracker.unblock_ip(ip_address):
        case Success(value=updated):
            return UnblockResponse(ip_address=ip_address, unblocked=updated)
        case Failure(error=err):
            raise _unavailable(err.message)


# =============================================================================
# Usage analytics
# =============================================================================


@admin_router.get("/usage/analytics", response_model=UsageAnalyticsResponse)
async def get_usage_analytics(
    since: datetime | None = Query(
        None, description="Start of the period (default: 24 hours ago)"
    ),
    tracker: UsageTracker = Depends(get_usage_tracker),
) -> UsageAnalyticsResponse:
    """Usage counts for a period.

    GET /admin/usage/analytics → 200 OK
    """
    match await tracker.get_usage_analytics(since):
        case Success(value=analytics):
            return UsageAnalyticsResponse.from_domain(analytics)
        case Failure(error=err):
            raise _unavailable(err.message)
