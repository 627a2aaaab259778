"""Domain enums for business logic.

Enums are centralized here for discoverability.

Available Enums:
    - Tier: Subscription tiers that select admission parameters
    - CallerType: Anonymous, session or API-key caller
    - CacheNamespace: Lookup cache namespaces with their TTLs
"""

from src.domain.enums.cache_namespace import CacheNamespace
from src.domain.enums.caller_type import CallerType
from src.domain.enums.tier import Tier

__all__ = [
    "CacheNamespace",
    "CallerType",
    "Tier",
]
