"""Rate limit infrastructure adapters.

Infrastructure implementations for rate limiting, following the hexagonal
architecture pattern where infrastructure implements domain ports.

Exports:
    RedisStorage: Redis-backed sliding window storage with an atomic Lua script.
    SlidingWindowAdapter: Sliding window adapter implementing RateLimitProtocol.
    TIER_POLICIES: Tier to admission parameters mapping (SSOT).
"""

from src.infrastructure.rate_limit.config import TIER_POLICIES
from src.infrastructure.rate_limit.redis_storage import RedisStorage
from src.infrastructure.rate_limit.sliding_window_adapter import (
    SlidingWindowAdapter,
)

__all__ = [
    "RedisStorage",
    "SlidingWindowAdapter",
    "TIER_POLICIES",
]
