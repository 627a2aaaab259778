"""Usage tracking and automatic IP blocking.

Records every observed request, keeps per-IP abuse counters, and blocks
IPs whose counters cross the configured thresholds, doubling the block
duration for every repeat offense.

Architecture:
    - Application service (uses repository protocols)
    - track_request() never blocks: records go to a background dispatcher
      that calls process()
    - Fails silent: store errors while recording are logged and dropped,
      never surfaced to the request path

Usage:
    tracker.track_request(UsageRecord(ip_address=ip, endpoint="analyze", ...))

    count = await tracker.get_daily_usage_count("analyze", ip_address=ip)
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.errors import UsageTrackingError
from src.domain.value_objects.usage_analytics import UsageAnalytics

if TYPE_CHECKING:
    from src.domain.entities.ip_abuse_record import IPAbuseRecord
    from src.domain.protocols.ip_abuse_repository import IPAbuseRepository
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.usage_event_repository import UsageEventRepository
    from src.domain.value_objects.auto_block_thresholds import AutoBlockThresholds
    from src.domain.value_objects.usage_record import UsageRecord


class UsageSink(Protocol):
    """Accepts usage records for background processing without blocking."""

    def submit(self, record: UsageRecord) -> None:
        """Queue a record for processing."""
        ...


def start_of_local_day(now: datetime | None = None) -> datetime:
    """Return local midnight (timezone-aware) of the day containing `now`."""
    local_now = (now or datetime.now(UTC)).astimezone()
    return local_now.replace(hour=0, minute=0, second=0, microsecond=0)


class UsageTracker:
    """Usage log, abuse counters and auto-block policy.

    Args:
        abuse_repository: Per-IP abuse record storage.
        usage_repository: Append-only usage event storage.
        thresholds: Auto-block thresholds.
        sink: Background dispatcher receiving track_request() records.
        logger: Structured logger.
    """

    def __init__(
        self,
        *,
        abuse_repository: IPAbuseRepository,
        usage_repository: UsageEventRepository,
        thresholds: AutoBlockThresholds,
        sink: UsageSink,
        logger: LoggerProtocol,
    ) -> None:
        self._abuse = abuse_repository
        self._usage = usage_repository
        self._thresholds = thresholds
        self._sink = sink
        self._logger = logger

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------
    def track_request(self, record: UsageRecord) -> None:
        """Hand a record to the background dispatcher and return immediately.

        Never raises and never awaits persistence.

        Args:
            record: Observed request.
        """
        self._sink.submit(record)

    async def process(self, record: UsageRecord, *, now: datetime | None = None) -> None:
        """Persist one record (called by the background dispatcher).

        Each step is isolated: a failed usage event insert does not stop the
        abuse counter update, and vice versa.

        Args:
            record: Observed request.
            now: Override current time (for testing).
        """
        now = now or datetime.now(UTC)

        try:
            await self._usage.add_event(record)
        except Exception as e:
            self._logger.error(
                "Failed to record usage event",
                error=e,
                error_code=ErrorCode.USAGE_RECORD_FAILED.value,
                ip_address=record.ip_address,
                endpoint=record.endpoint,
            )

        try:
            await self._update_ip_stats(record, now)
        except Exception as e:
            self._logger.error(
                "Failed to update IP abuse stats",
                error=e,
                error_code=ErrorCode.ABUSE_RECORD_FAILED.value,
                ip_address=record.ip_address,
            )

        if record.is_domain_search and record.domain is not None:
            try:
                await self._usage.add_domain_search(
                    domain=record.domain,
                    ip_address=record.ip_address,
                    user_id=record.user_id,
                )
            except Exception as e:
                self._logger.error(
                    "Failed to record domain search",
                    error=e,
                    error_code=ErrorCode.USAGE_RECORD_FAILED.value,
                    domain=record.domain,
                )

    async def check_auto_block(
        self, ip_address: str, *, now: datetime | None = None
    ) -> bool:
        """Re-read the abuse record and block the IP if thresholds fired.

        Block duration is base * 2^auto_block_count (1h, 2h, 4h, ...).
        Racing callers are resolved by the conditional update: only one
        of them applies the block.

        Args:
            ip_address: Client IP.
            now: Override current time (for testing).

        Returns:
            bool: True if this call applied a block.
        """
        record = await self._abuse.find_by_ip(ip_address)
        if record is None or not record.should_auto_block(self._thresholds):
            return False

        now = now or datetime.now(UTC)
        blocked_until = now + record.block_duration(self._thresholds.base_block_seconds)
        reason = record.auto_block_reason(self._thresholds)

        applied = await self._abuse.apply_block(
            ip_address=ip_address,
            reason=reason,
            blocked_at=now,
            blocked_until=blocked_until,
        )
        if applied:
            self._logger.warning(
                "IP auto-blocked",
                ip_address=ip_address,
                blocked_until=blocked_until.isoformat(),
                reason=reason,
                auto_block_count=record.auto_block_count + 1,
            )
        return applied

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    async def get_daily_usage_count(
        self,
        endpoint: str,
        *,
        user_id: str | None = None,
        ip_address: str | None = None,
        now: datetime | None = None,
    ) -> int:
        """Count successful requests on an endpoint since local midnight.

        Scoped by user_id when authenticated, else by IP.

        Fail-Open:
            Returns 0 on store errors (quotas never deny because of an
            outage).
        """
        try:
            return await self._usage.count_successful_since(
                endpoint=endpoint,
                since=start_of_local_day(now),
                user_id=user_id,
                ip_address=ip_address,
            )
        except Exception as e:
            self._logger.error(
                "Failed to get daily usage count",
                error=e,
                endpoint=endpoint,
            )
            return 0

    async def get_ip_stats(
        self, ip_address: str
    ) -> Result[IPAbuseRecord | None, UsageTrackingError]:
        """Get the abuse record of an IP.

        Returns:
            Result with the record (None if never seen) or UsageTrackingError.
        """
        try:
            return Success(value=await self._abuse.find_by_ip(ip_address))
        except Exception as e:
            self._logger.error("Failed to get IP stats", error=e, ip_address=ip_address)
            return Failure(
                error=UsageTrackingError(
                    code=ErrorCode.ABUSE_QUERY_FAILED,
                    message=f"Failed to load abuse record for {ip_address}",
                    details={"ip_address": ip_address},
                )
            )

    async def is_ip_blocked(
        self, ip_address: str, *, now: datetime | None = None
    ) -> bool:
        """Check for an active auto-block (fails open to False)."""
        match await self.get_ip_stats(ip_address):
            case Success(value=record) if record is not None:
                return record.is_actively_blocked(now or datetime.now(UTC))
            case _:
                return False

    async def get_usage_analytics(
        self,
        since: datetime | None = None,
    ) -> Result[UsageAnalytics, UsageTrackingError]:
        """Usage counts for a period (default: last 24 hours).

        Returns:
            Result with UsageAnalytics or UsageTrackingError.
        """
        since = since or datetime.now(UTC) - timedelta(hours=24)
        try:
            summary = await self._usage.summarize_since(since)
            blocked = await self._abuse.count_blocked()
        except Exception as e:
            self._logger.error("Failed to get usage analytics", error=e)
            return Failure(
                error=UsageTrackingError(
                    code=ErrorCode.USAGE_QUERY_FAILED,
                    message="Failed to load usage analytics",
                )
            )
        return Success(
            value=UsageAnalytics(
                summary=summary,
                currently_blocked_ips=blocked,
                since=since,
            )
        )

    # -------------------------------------------------------------------------
    # Block management
    # -------------------------------------------------------------------------
    async def unblock_ip(self, ip_address: str) -> Result[bool, UsageTrackingError]:
        """Manually lift a block. auto_block_count is kept.

        Returns:
            Result with True if a record was updated, or UsageTrackingError.
        """
        try:
            updated = await self._abuse.clear_block(ip_address)
        except Exception as e:
            self._logger.error("Failed to unblock IP", error=e, ip_address=ip_address)
            return Failure(
                error=UsageTrackingError(
                    code=ErrorCode.ABUSE_RECORD_FAILED,
                    message=f"Failed to unblock {ip_address}",
                    details={"ip_address": ip_address},
                )
            )
        self._logger.info("IP manually unblocked", ip_address=ip_address, updated=updated)
        return Success(value=updated)

    async def cleanup_expired_blocks(
        self, *, now: datetime | None = None
    ) -> Result[int, UsageTrackingError]:
        """Lift every block whose blocked_until has passed.

        Returns:
            Result with number of IPs unblocked, or UsageTrackingError.
        """
        try:
            count = await self._abuse.clear_expired_blocks(now or datetime.now(UTC))
        except Exception as e:
            self._logger.error("Failed to clean up expired blocks", error=e)
            return Failure(
                error=UsageTrackingError(
                    code=ErrorCode.ABUSE_RECORD_FAILED,
                    message="Failed to clean up expired blocks",
                )
            )
        self._logger.info("Expired blocks cleaned up", unblocked_count=count)
        return Success(value=count)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    async def _update_ip_stats(self, record: UsageRecord, now: datetime) -> None:
        existing = await self._abuse.find_by_ip(record.ip_address)
        if existing is None:
            created = await self._abuse.insert_first_seen(
                ip_address=record.ip_address,
                rate_limited=record.was_rate_limited,
                invalid_input=record.was_invalid_input,
                user_agent=record.user_agent,
                now=now,
            )
            if created:
                return

        await self._abuse.increment_counters(
            ip_address=record.ip_address,
            rate_limited=record.was_rate_limited,
            invalid_input=record.was_invalid_input,
            now=now,
        )
        await self.check_auto_block(record.ip_address, now=now)
