"""Redis-backed storage for sliding-window rate limiting.

Implements the low-level window operations against Redis. The admission
check (evict, count, conditionally insert) runs as one Lua script invoked
with EVALSHA, so concurrent callers can never interleave between the count
and the insert. Key shaping is done by the higher-level adapter.

Error policy:
    Every method returns Failure(RateLimitError) on Redis errors. The
    adapter decides which operations fail open.

Note:
    This is a storage component used by SlidingWindowAdapter. It is not
    exposed to the application or presentation layers.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any
from uuid import uuid4

from redis.exceptions import NoScriptError

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.errors import RateLimitError
from src.domain.value_objects.rate_limit_rule import RateLimitRule


@dataclass(slots=True)
class _LuaRefs:
    """Holds loaded Lua script SHA references."""

    sliding_window_sha: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class WindowState:
    """Raw outcome of one sliding-window evaluation.

    Attributes:
        allowed: Whether the request was recorded.
        count: Entries inside the window before this request.
        oldest_ms: Score of the oldest entry in the window.
    """

    allowed: bool
    count: int
    oldest_ms: int


class RedisStorage:
    """Redis storage for sliding windows and explicit blocks.

    Loads the sliding window Lua script once and executes it via EVALSHA.
    If Redis lost the script (restart, SCRIPT FLUSH), it is reloaded once.

    Args:
        redis_client: An async Redis client (redis.asyncio.Redis compatible).

    Attributes:
        redis: The Redis client instance.
        _lua: Cached Lua script SHAs.
    """

    def __init__(self, *, redis_client: Any) -> None:
        self.redis = redis_client
        self._lua = _LuaRefs()
        self._script_lock = asyncio.Lock()

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    async def evaluate_window(
        self,
        *,
        key: str,
        rule: RateLimitRule,
        now_ms: int,
    ) -> Result[WindowState, RateLimitError]:
        """Atomically evict expired entries, count, and record if allowed.

        Args:
            key: Window key (e.g. "ratelimit:ip:203.0.113.7").
            rule: Limit and window length.
            now_ms: Current epoch milliseconds.

        Returns:
            Result with WindowState, or RateLimitError on Redis errors.
        """
        member = f"{now_ms}:{uuid4().hex[:12]}"
        try:
            resp = await self._eval_sliding_window(
                key,
                now_ms,
                rule.window_ms,
                rule.limit,
                member,
                rule.window_seconds,
            )
            return Success(
                value=WindowState(
                    allowed=bool(int(resp[0])),
                    count=int(resp[1]),
                    oldest_ms=int(float(resp[2])),
                )
            )
        except Exception as exc:
            return Failure(
                error=RateLimitError(
                    code=ErrorCode.RATE_LIMIT_CHECK_FAILED,
                    message=f"Failed to evaluate window '{key}': {exc}",
                    details={"key": key},
                )
            )

    async def count_window(
        self,
        *,
        key: str,
        rule: RateLimitRule,
        now_ms: int,
    ) -> Result[int, RateLimitError]:
        """Count entries inside the trailing window without mutating it.

        Args:
            key: Window key.
            rule: Window length.
            now_ms: Current epoch milliseconds.

        Returns:
            Result with entry count, or RateLimitError on Redis errors.
        """
        try:
            # Exclusive lower bound: entries scored exactly now-window are evicted.
            count = await self.redis.zcount(
                key, f"({now_ms - rule.window_ms}", now_ms
            )
            return Success(value=int(count))
        except Exception as exc:
            return Failure(
                error=RateLimitError(
                    code=ErrorCode.RATE_LIMIT_CHECK_FAILED,
                    message=f"Failed to count window '{key}': {exc}",
                    details={"key": key},
                )
            )

    async def set_flag(
        self,
        *,
        key: str,
        ttl_seconds: int,
    ) -> Result[None, RateLimitError]:
        """Set key to "1" with an expiry.

        Args:
            key: Flag key (e.g. "blocked:ip:203.0.113.7").
            ttl_seconds: Expiry in seconds.

        Returns:
            Result with None, or RateLimitError on Redis errors.
        """
        try:
            await self.redis.set(key, "1", ex=ttl_seconds)
            return Success(value=None)
        except Exception as exc:
            return Failure(
                error=RateLimitError(
                    code=ErrorCode.RATE_LIMIT_CHECK_FAILED,
                    message=f"Failed to set flag '{key}': {exc}",
                    details={"key": key},
                )
            )

    async def get_flag(self, *, key: str) -> Result[bool, RateLimitError]:
        """Check whether a flag key holds "1".

        Args:
            key: Flag key.

        Returns:
            Result with True if set, or RateLimitError on Redis errors.
        """
        try:
            value = await self.redis.get(key)
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            return Success(value=value == "1")
        except Exception as exc:
            return Failure(
                error=RateLimitError(
                    code=ErrorCode.RATE_LIMIT_CHECK_FAILED,
                    message=f"Failed to read flag '{key}': {exc}",
                    details={"key": key},
                )
            )

    async def delete(self, *, key: str) -> Result[None, RateLimitError]:
        """Delete a window or flag key.

        Returns:
            Result with None, or RateLimitError(RATE_LIMIT_RESET_FAILED).
        """
        try:
            await self.redis.delete(key)
            return Success(value=None)
        except Exception as exc:
            return Failure(
                error=RateLimitError(
                    code=ErrorCode.RATE_LIMIT_RESET_FAILED,
                    message=f"Failed to reset rate limit for '{key}': {exc}",
                    details={"key": key},
                )
            )

    # ---------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------
    async def _eval_sliding_window(self, key: str, *args: Any) -> list[Any]:
        """Run the sliding window script, reloading it once on NOSCRIPT."""
        sha = await self._ensure_sliding_window_script()
        try:
            return await self.redis.evalsha(sha, 1, key, *args)
        except NoScriptError:
            self._lua.sliding_window_sha = None
            sha = await self._ensure_sliding_window_script()
            return await self.redis.evalsha(sha, 1, key, *args)

    async def _ensure_sliding_window_script(self) -> str:
        """Load sliding window Lua script into Redis and cache the SHA.

        Returns:
            str: Script SHA.
        """
        if self._lua.sliding_window_sha:
            return self._lua.sliding_window_sha
        async with self._script_lock:
            if self._lua.sliding_window_sha:
                return self._lua.sliding_window_sha
            script = await _read_lua_script("lua_scripts/sliding_window.lua")
            sha = await self.redis.script_load(script)
            if isinstance(sha, bytes):
                sha = sha.decode("utf-8")
            self._lua.sliding_window_sha = sha
            return sha


def _read_lua_script_sync(path: Path) -> str:
    """Synchronous helper to read Lua script (called via run_in_executor)."""
    return path.read_text(encoding="utf-8")


async def _read_lua_script(rel_path: str) -> str:
    """Read Lua script file relative to this module.

    Uses run_in_executor to avoid blocking the event loop on file IO.

    Args:
        rel_path: Relative path from this module's directory.

    Returns:
        Script contents as string.
    """
    full_path = Path(__file__).parent / rel_path
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(_read_lua_script_sync, full_path))
