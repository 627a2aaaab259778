"""UsageEventRepository protocol for append-only usage events.

Reference:
    - src/infrastructure/persistence/repositories/usage_event_repository.py
"""

from datetime import datetime
from typing import Protocol

from src.domain.value_objects.usage_analytics import UsageSummary
from src.domain.value_objects.usage_record import UsageRecord


class UsageEventRepository(Protocol):
    """Usage event repository protocol (port).

    Events are immutable: there are no update or delete operations.
    """

    async def add_event(self, record: UsageRecord) -> None:
        """Append one usage event.

        Args:
            record: Observed request.
        """
        ...

    async def add_domain_search(
        self,
        *,
        domain: str,
        ip_address: str,
        user_id: str | None,
    ) -> None:
        """Append one domain search entry (analytics only).

        Args:
            domain: Looked-up domain.
            ip_address: Client IP.
            user_id: Authenticated user, if any.
        """
        ...

    async def count_successful_since(
        self,
        *,
        endpoint: str,
        since: datetime,
        user_id: str | None = None,
        ip_address: str | None = None,
    ) -> int:
        """Count status-200 events on an endpoint since a point in time.

        Scoped by user_id when given, otherwise by ip_address.

        Args:
            endpoint: Logical endpoint name.
            since: Inclusive lower bound on requested_at.
            user_id: Authenticated user.
            ip_address: Client IP (used when user_id is None).

        Returns:
            int: Matching events.
        """
        ...

    async def summarize_since(self, since: datetime) -> UsageSummary:
        """Aggregate request counts since a point in time.

        Args:
            since: Inclusive lower bound on requested_at.

        Returns:
            UsageSummary: Totals per flag and distinct IPs.
        """
        ...
