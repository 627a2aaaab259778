"""Repository implementations (adapters for domain repository protocols)."""

from src.infrastructure.persistence.repositories.ip_abuse_repository import (
    IPAbuseRepository,
)
from src.infrastructure.persistence.repositories.usage_event_repository import (
    UsageEventRepository,
)

__all__ = [
    "IPAbuseRepository",
    "UsageEventRepository",
]
