"""IP abuse database model.

One mutable row per client IP holding abuse counters and block state.

Note:
    Domain entity lives in src/domain/entities/ip_abuse_record.py.
    Mapping happens in IPAbuseRepository.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel


class IPAbuseModel(BaseMutableModel):
    """Per-IP abuse counters and block state.

    Fields:
        ip_address: Client IP (unique)
        total_requests / rate_limit_violations / invalid_input_attempts /
            suspicious_patterns: Monotonic counters
        is_blocked, blocked_at, blocked_until, block_reason: Block state
        auto_block_count: Automatic blocks applied so far (never reset)
        user_agent: User-Agent of the first request
        first_seen, last_seen, last_violation: Activity timestamps

    Indexes:
        - ip_address: unique
        - is_blocked: cleanup sweep and blocked-IP counts
    """

    __tablename__ = "ip_abuse"

    ip_address: Mapped[str] = mapped_column(
        String(45),  # IPv6 max length
        nullable=False,
        unique=True,
        index=True,
        comment="Client IP address",
    )

    total_requests: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    rate_limit_violations: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    invalid_input_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    suspicious_patterns: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    is_blocked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
        index=True,
    )
    blocked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    blocked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Block end; NULL iff not blocked",
    )
    block_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    auto_block_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Automatic blocks applied (drives exponential backoff)",
    )

    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)

    first_seen: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_seen: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_violation: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<IPAbuse("
            f"ip_address={self.ip_address!r}, "
            f"is_blocked={self.is_blocked}, "
            f"auto_block_count={self.auto_block_count}"
            f")>"
        )
