"""Tier policy value object.

Flat bundle of the three orthogonal admission controls a tier grants.
"""

from dataclasses import dataclass

from src.domain.value_objects.rate_limit_rule import RateLimitRule


@dataclass(frozen=True, slots=True, kw_only=True)
class TierPolicy:
    """Admission parameters for one tier.

    Attributes:
        burst: Short-window limit enforced by the rate limiter.
        daily_quota: Successful requests allowed per endpoint per day.
            None means unlimited.
        max_results: Largest result or batch size the tier may request.

    Raises:
        ValueError: If daily_quota is negative or max_results <= 0.
    """

    burst: RateLimitRule
    daily_quota: int | None
    max_results: int

    def __post_init__(self) -> None:
        """Validate quota and result size.

        Raises:
            ValueError: If any numeric field is invalid.
        """
        if self.daily_quota is not None and self.daily_quota < 0:
            raise ValueError(
                f"daily_quota must not be negative, got {self.daily_quota}"
            )
        if self.max_results <= 0:
            raise ValueError(f"max_results must be positive, got {self.max_results}")

    @property
    def is_unlimited(self) -> bool:
        """Whether the tier has no daily quota."""
        return self.daily_quota is None
