"""Request/response schemas for API endpoints.

Pydantic models for HTTP serialization. Schemas are kept separate from
domain entities (HTTP-layer concerns only).

Usage:
    from src.schemas import DailyUsageResponse, IPAbuseResponse
"""

from src.schemas.admission_schemas import (
    CleanupResponse,
    DailyUsageResponse,
    HealthResponse,
    IPAbuseResponse,
    UnblockResponse,
    UsageAnalyticsResponse,
)

__all__ = [
    "CleanupResponse",
    "DailyUsageResponse",
    "HealthResponse",
    "IPAbuseResponse",
    "UnblockResponse",
    "UsageAnalyticsResponse",
]
