"""UsageEventRepository - SQLAlchemy implementation.

Append-only storage for usage events and domain searches, plus the
aggregate queries behind daily quotas and analytics.
"""

from datetime import datetime

from sqlalchemy import distinct, func, select

from src.domain.value_objects.usage_analytics import UsageSummary
from src.domain.value_objects.usage_record import UsageRecord
from src.infrastructure.persistence.base import as_utc
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.models.api_usage import ApiUsageModel
from src.infrastructure.persistence.models.domain_search import DomainSearchModel


class UsageEventRepository:
    """SQLAlchemy implementation of UsageEventRepository protocol.

    Attributes:
        _database: Database providing sessions.
    """

    def __init__(self, database: Database) -> None:
        """Initialize repository.

        Args:
            database: Database providing transactional sessions.
        """
        self._database = database

    async def add_event(self, record: UsageRecord) -> None:
        """Append one usage event."""
        async with self._database.get_session() as session:
            session.add(
                ApiUsageModel(
                    ip_address=record.ip_address,
                    user_id=record.user_id,
                    endpoint=record.endpoint,
                    domain=record.domain,
                    method=record.method,
                    user_agent=record.user_agent,
                    referer=record.referer,
                    status_code=record.status_code,
                    response_time_ms=record.response_time_ms,
                    rate_limit_remaining=record.rate_limit_remaining,
                    was_blocked=record.was_blocked,
                    was_rate_limited=record.was_rate_limited,
                    was_invalid_input=record.was_invalid_input,
                )
            )

    async def add_domain_search(
        self,
        *,
        domain: str,
        ip_address: str,
        user_id: str | None,
    ) -> None:
        """Append one domain search entry."""
        async with self._database.get_session() as session:
            session.add(
                DomainSearchModel(
                    domain=domain,
                    ip_address=ip_address,
                    user_id=user_id,
                )
            )

    async def count_successful_since(
        self,
        *,
        endpoint: str,
        since: datetime,
        user_id: str | None = None,
        ip_address: str | None = None,
    ) -> int:
        """Count status-200 events on an endpoint since `since`.

        Scoped by user_id when given, otherwise by ip_address.
        """
        stmt = (
            select(func.count())
            .select_from(ApiUsageModel)
            .where(
                ApiUsageModel.endpoint == endpoint,
                ApiUsageModel.status_code == 200,
                ApiUsageModel.requested_at >= as_utc(since),
            )
        )
        if user_id is not None:
            stmt = stmt.where(ApiUsageModel.user_id == user_id)
        else:
            stmt = stmt.where(ApiUsageModel.ip_address == (ip_address or ""))

        async with self._database.get_session() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def summarize_since(self, since: datetime) -> UsageSummary:
        """Aggregate request counts since `since` in one query."""
        stmt = select(
            func.count(),
            func.count().filter(ApiUsageModel.was_rate_limited.is_(True)),
            func.count().filter(ApiUsageModel.was_invalid_input.is_(True)),
            func.count().filter(ApiUsageModel.was_blocked.is_(True)),
            func.count(distinct(ApiUsageModel.ip_address)),
        ).where(ApiUsageModel.requested_at >= as_utc(since))

        async with self._database.get_session() as session:
            result = await session.execute(stmt)
            total, rate_limited, invalid_input, blocked, unique_ips = result.one()

        return UsageSummary(
            total_requests=int(total or 0),
            rate_limited_requests=int(rate_limited or 0),
            invalid_input_requests=int(invalid_input or 0),
            blocked_requests=int(blocked or 0),
            unique_ips=int(unique_ips or 0),
        )
