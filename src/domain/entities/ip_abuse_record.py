"""IPAbuseRecord domain entity for automatic IP blocking.

Pure business logic, no framework dependencies.

Auto-Block Policy:
    - Counters only grow; a block never resets them
    - auto_block_count remembers past blocks, lowering the threshold for
      repeat offenders and doubling every new block (1h, 2h, 4h, ...)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from src.domain.value_objects.auto_block_thresholds import AutoBlockThresholds


@dataclass
class IPAbuseRecord:
    """Per-IP abuse counters and block state.

    Invariant:
        blocked_at and blocked_until are both None iff is_blocked is False.

    Attributes:
        ip_address: Client IP (unique key).
        total_requests: Requests observed from this IP.
        rate_limit_violations: Requests refused by a burst limit.
        invalid_input_attempts: Requests refused by input validation.
        suspicious_patterns: Requests flagged as suspicious.
        is_blocked: Whether a block is in force.
        blocked_at: When the current block started.
        blocked_until: When the current block ends.
        block_reason: Human-readable reason of the current/last block.
        auto_block_count: Automatic blocks applied so far.
        user_agent: User-Agent seen on the first request.
        first_seen: First request from this IP.
        last_seen: Latest request from this IP.
        last_violation: Latest violating request, if any.

    Example:
        >>> record.rate_limit_violations = 20
        >>> record.should_auto_block(AutoBlockThresholds())
        True
        >>> record.block_duration(3600)
        datetime.timedelta(seconds=3600)
    """

    ip_address: str
    total_requests: int
    rate_limit_violations: int
    invalid_input_attempts: int
    suspicious_patterns: int
    is_blocked: bool
    blocked_at: datetime | None
    blocked_until: datetime | None
    block_reason: str | None
    auto_block_count: int
    user_agent: str | None
    first_seen: datetime
    last_seen: datetime
    last_violation: datetime | None

    def is_actively_blocked(self, now: datetime) -> bool:
        """Check whether the block is still in force at `now`.

        A record whose block has expired but was not swept yet is not
        actively blocked.

        Args:
            now: Reference time (timezone-aware).

        Returns:
            bool: True if blocked and blocked_until lies in the future.
        """
        return (
            self.is_blocked
            and self.blocked_until is not None
            and now < self.blocked_until
        )

    def should_auto_block(self, thresholds: AutoBlockThresholds) -> bool:
        """Decide whether the counters warrant an automatic block.

        Already-blocked records never re-block.

        Args:
            thresholds: Configured auto-block thresholds.

        Returns:
            bool: True if any threshold fired and no block is in force.
        """
        if self.is_blocked:
            return False
        return bool(self._fired_clauses(thresholds))

    def block_duration(self, base_seconds: int) -> timedelta:
        """Exponential backoff: base * 2^auto_block_count.

        Args:
            base_seconds: Duration of the very first block.

        Returns:
            timedelta: Duration of the next block.
        """
        return timedelta(seconds=base_seconds * (2**self.auto_block_count))

    def auto_block_reason(self, thresholds: AutoBlockThresholds) -> str:
        """Human-readable reason listing every clause that fired.

        Args:
            thresholds: Configured auto-block thresholds.

        Returns:
            str: e.g. "Auto-blocked: 20 rate limit violations".
        """
        reasons = self._fired_clauses(thresholds)
        if self.suspicious_patterns > 0:
            reasons.append(f"{self.suspicious_patterns} suspicious patterns")
        return "Auto-blocked: " + ", ".join(reasons)

    def _fired_clauses(self, thresholds: AutoBlockThresholds) -> list[str]:
        reasons: list[str] = []
        first_offense = self.rate_limit_violations >= thresholds.rate_limit_violations
        if first_offense:
            reasons.append(f"{self.rate_limit_violations} rate limit violations")
        if self.invalid_input_attempts >= thresholds.invalid_inputs:
            reasons.append(f"{self.invalid_input_attempts} invalid input attempts")
        repeat_offense = (
            self.auto_block_count > 0
            and self.rate_limit_violations >= thresholds.repeat_offender_violations
        )
        if repeat_offense and not first_offense:
            reasons.append(
                f"{self.rate_limit_violations} rate limit violations (repeat offender)"
            )
        return reasons
