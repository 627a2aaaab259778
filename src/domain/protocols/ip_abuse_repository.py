"""IPAbuseRepository protocol for abuse record persistence.

Port for the per-IP abuse counters. Every mutation is a single conditional
statement in the store so concurrent request handlers never lose updates.

Reference:
    - src/infrastructure/persistence/repositories/ip_abuse_repository.py
"""

from datetime import datetime
from typing import Protocol

from src.domain.entities.ip_abuse_record import IPAbuseRecord


class IPAbuseRepository(Protocol):
    """Abuse record repository protocol (port).

    Implementations raise their store's exceptions; the usage tracker
    decides what to swallow.
    """

    async def find_by_ip(self, ip_address: str) -> IPAbuseRecord | None:
        """Find abuse record by IP.

        Args:
            ip_address: Client IP.

        Returns:
            IPAbuseRecord if found, None otherwise.
        """
        ...

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

        Counters are seeded from the flags: total_requests=1 and each
        violation counter 1 or 0.

        Args:
            ip_address: Client IP.
            rate_limited: Request was refused by a burst limit.
            invalid_input: Request was refused by input validation.
            user_agent: Client User-Agent.
            now: Request time (first_seen, last_seen, last_violation).

        Returns:
            bool: True if created, False if a concurrent request created
                the record first.
        """
        ...

    async def increment_counters(
        self,
        *,
        ip_address: str,
        rate_limited: bool,
        invalid_input: bool,
        now: datetime,
    ) -> None:
        """Atomically increment counters (col = col + 1 in the store).

        Args:
            ip_address: Client IP.
            rate_limited: Also increment rate_limit_violations.
            invalid_input: Also increment invalid_input_attempts.
            now: Request time (last_seen, last_violation if flagged).
        """
        ...

    async def apply_block(
        self,
        *,
        ip_address: str,
        reason: str,
        blocked_at: datetime,
        blocked_until: datetime,
    ) -> bool:
        """Block the IP unless already blocked; bump auto_block_count.

        Args:
            ip_address: Client IP.
            reason: Human-readable block reason.
            blocked_at: Block start.
            blocked_until: Block end.

        Returns:
            bool: True if this call applied the block.
        """
        ...

    async def clear_block(self, ip_address: str) -> bool:
        """Lift a block, keeping auto_block_count.

        Args:
            ip_address: Client IP.

        Returns:
            bool: True if a record was updated.
        """
        ...

    async def clear_expired_blocks(self, now: datetime) -> int:
        """Lift every block whose blocked_until <= now.

        Args:
            now: Reference time.

        Returns:
            int: Number of records unblocked.
        """
        ...

    async def count_blocked(self) -> int:
        """Count records with is_blocked set.

        Returns:
            int: Currently blocked IPs.
        """
        ...
