"""Database models for the persistence layer.

SQLAlchemy models that map to database tables. These are infrastructure
concerns and are never imported by the domain layer.

Models:
    - ip_abuse.py: Per-IP abuse counters and block state (mutable)
    - api_usage.py: Usage events (append-only)
    - domain_search.py: Domain lookups (append-only)
"""

from src.infrastructure.persistence.models.api_usage import ApiUsageModel
from src.infrastructure.persistence.models.domain_search import DomainSearchModel
from src.infrastructure.persistence.models.ip_abuse import IPAbuseModel

__all__ = [
    "ApiUsageModel",
    "DomainSearchModel",
    "IPAbuseModel",
]
