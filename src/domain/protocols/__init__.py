"""Domain protocols (ports) package.

Protocol definitions the domain and application layers depend on.
Infrastructure adapters implement them without inheritance.

Re-exports are ONLY for protocols defined in this package.

Usage:
    from src.domain.protocols import RateLimitProtocol, IPAbuseRepository
"""

from src.domain.protocols.cache_protocol import CacheProtocol
from src.domain.protocols.ip_abuse_repository import IPAbuseRepository
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.rate_limit_protocol import RateLimitProtocol
from src.domain.protocols.usage_event_repository import UsageEventRepository

__all__ = [
    "CacheProtocol",
    "IPAbuseRepository",
    "LoggerProtocol",
    "RateLimitProtocol",
    "UsageEventRepository",
]
