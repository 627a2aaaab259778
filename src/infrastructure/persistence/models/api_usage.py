"""API usage database model (append-only).

One row per observed request. Rows are never updated or deleted.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseModel


class ApiUsageModel(BaseModel):
    """Append-only usage event.

    Indexes:
        - idx_api_usage_endpoint_user: (endpoint, user_id, requested_at)
          daily quota for authenticated callers
        - idx_api_usage_endpoint_ip: (endpoint, ip_address, requested_at)
          daily quota for anonymous callers
        - requested_at: analytics time ranges
    """

    __tablename__ = "api_usage"

    ip_address: Mapped[str] = mapped_column(String(45), nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    endpoint: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    referer: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status_code: Mapped[int] = mapped_column(Integer, nullable=False)
    response_time_ms: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Handler latency in milliseconds"
    )
    rate_limit_remaining: Mapped[int | None] = mapped_column(Integer, nullable=True)

    was_blocked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    was_rate_limited: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    was_invalid_input: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    __table_args__ = (
        Index("idx_api_usage_endpoint_user", "endpoint", "user_id", "requested_at"),
        Index("idx_api_usage_endpoint_ip", "endpoint", "ip_address", "requested_at"),
    )
