"""IPAbuseRepository - SQLAlchemy implementation.

Adapter for hexagonal architecture. Maps between the IPAbuseRecord domain
entity and the IPAbuseModel database model.

Every mutation is a single UPDATE with the arithmetic done in SQL
(col = col + 1), so concurrent request handlers never lose increments and
two racing auto-blocks cannot both apply.
"""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from src.domain.entities.ip_abuse_record import IPAbuseRecord
from src.infrastructure.persistence.base import as_utc
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.models.ip_abuse import IPAbuseModel


class IPAbuseRepository:
    """SQLAlchemy implementation of IPAbuseRepository protocol.

    Each call runs in its own short transaction: the repository is shared
    by the background tracking worker and request handlers.

    Attributes:
        _database: Database providing sessions.

    Example:
        >>> repo = IPAbuseRepository(database)
        >>> record = await repo.find_by_ip("203.0.113.7")
    """

    def __init__(self, database: Database) -> None:
        """Initialize repository.

        Args:
            database: Database providing transactional sessions.
        """
        self._database = database

    async def find_by_ip(self, ip_address: str) -> IPAbuseRecord | None:
        """Find abuse record by IP.

        Args:
            ip_address: Client IP.

        Returns:
            IPAbuseRecord if found, None otherwise.
        """
        async with self._database.get_session() as session:
            stmt = select(IPAbuseModel).where(IPAbuseModel.ip_address == ip_address)
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()

        if model is None:
            return None
        return self._to_domain(model)

    async def insert_first_seen(
        self,
        *,
        ip_address: str,
        rate_limited: bool,
        invalid_input: bool,
        user_agent: str | None,
        now: datetime,
    ) -> bool:
        """Create the record for an IP's first request.

        Returns:
            bool: True if created, False if the IP already had a record
                (a concurrent first request won the insert).
        """
        model = IPAbuseModel(
            ip_address=ip_address,
            total_requests=1,
            rate_limit_violations=1 if rate_limited else 0,
            invalid_input_attempts=1 if invalid_input else 0,
            suspicious_patterns=0,
            is_blocked=False,
            auto_block_count=0,
            user_agent=user_agent,
            first_seen=as_utc(now),
            last_seen=as_utc(now),
            last_violation=as_utc(now) if rate_limited or invalid_input else None,
        )
        async with self._database.get_session() as session:
            session.add(model)
            try:
                await session.flush()
            except IntegrityError:
                await session.rollback()
                return False
        return True

    async def increment_counters(
        self,
        *,
        ip_address: str,
        rate_limited: bool,
        invalid_input: bool,
        now: datetime,
    ) -> None:
        """Atomically increment counters for an existing record."""
        values: dict = {
            "total_requests": IPAbuseModel.total_requests + 1,
            "last_seen": as_utc(now),
        }
        if rate_limited:
            values["rate_limit_violations"] = IPAbuseModel.rate_limit_violations + 1
            values["last_violation"] = as_utc(now)
        if invalid_input:
            values["invalid_input_attempts"] = IPAbuseModel.invalid_input_attempts + 1
            values["last_violation"] = as_utc(now)

        async with self._database.get_session() as session:
            await session.execute(
                update(IPAbuseModel)
                .where(IPAbuseModel.ip_address == ip_address)
                .values(**values)
            )

    async def apply_block(
        self,
        *,
        ip_address: str,
        reason: str,
        blocked_at: datetime,
        blocked_until: datetime,
    ) -> bool:
        """Block the IP unless already blocked; bump auto_block_count.

        Returns:
            bool: True if this call applied the block.
        """
        async with self._database.get_session() as session:
            result = await session.execute(
                update(IPAbuseModel)
                .where(
                    IPAbuseModel.ip_address == ip_address,
                    IPAbuseModel.is_blocked.is_(False),
                )
                .values(
                    is_blocked=True,
                    blocked_at=as_utc(blocked_at),
                    blocked_until=as_utc(blocked_until),
                    block_reason=reason,
                    auto_block_count=IPAbuseModel.auto_block_count + 1,
                )
            )
            return result.rowcount > 0

    async def clear_block(self, ip_address: str) -> bool:
        """Lift a block, keeping auto_block_count.

        Returns:
            bool: True if a record was updated.
        """
        async with self._database.get_session() as session:
            result = await session.execute(
                update(IPAbuseModel)
                .where(IPAbuseModel.ip_address == ip_address)
                .values(is_blocked=False, blocked_at=None, blocked_until=None)
            )
            return result.rowcount > 0

    async def clear_expired_blocks(self, now: datetime) -> int:
        """Lift every block whose blocked_until <= now.

        Returns:
            int: Number of records unblocked.
        """
        async with self._database.get_session() as session:
            result = await session.execute(
                update(IPAbuseModel)
                .where(
                    IPAbuseModel.is_blocked.is_(True),
                    IPAbuseModel.blocked_until <= as_utc(now),
                )
                .values(is_blocked=False, blocked_at=None, blocked_until=None)
            )
            return int(result.rowcount)

    async def count_blocked(self) -> int:
        """Count records with is_blocked set."""
        async with self._database.get_session() as session:
            result = await session.execute(
                select(func.count())
                .select_from(IPAbuseModel)
                .where(IPAbuseModel.is_blocked.is_(True))
            )
            return int(result.scalar_one())

    def _to_domain(self, model: IPAbuseModel) -> IPAbuseRecord:
        """Convert database model to domain entity.

        Args:
            model: SQLAlchemy IPAbuseModel instance.

        Returns:
            Domain IPAbuseRecord entity.
        """
        return IPAbuseRecord(
            ip_address=model.ip_address,
            total_requests=model.total_requests,
            rate_limit_violations=model.rate_limit_violations,
            invalid_input_attempts=model.invalid_input_attempts,
            suspicious_patterns=model.suspicious_patterns,
            is_blocked=model.is_blocked,
            blocked_at=as_utc(model.blocked_at),
            blocked_until=as_utc(model.blocked_until),
            block_reason=model.block_reason,
            auto_block_count=model.auto_block_count,
            user_agent=model.user_agent,
            first_seen=as_utc(model.first_seen),  # type: ignore[arg-type]
            last_seen=as_utc(model.last_seen),  # type: ignore[arg-type]
            last_violation=as_utc(model.last_violation),
        )
