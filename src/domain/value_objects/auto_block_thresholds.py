"""Auto-block thresholds value object.

Usage:
    thresholds = AutoBlockThresholds(
        rate_limit_violations=settings.auto_block_rate_limit_violations,
        invalid_inputs=settings.auto_block_invalid_inputs,
        repeat_offender_violations=settings.auto_block_repeat_offender_violations,
        base_block_seconds=settings.auto_block_base_seconds,
    )
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class AutoBlockThresholds:
    """Counter thresholds that trip an automatic IP block.

    An IP is blocked when ANY of:
        - rate_limit_violations >= rate_limit_violations
        - invalid_input_attempts >= invalid_inputs
        - it was auto-blocked before AND
          rate_limit_violations >= repeat_offender_violations

    Attributes:
        rate_limit_violations: Violations that block a first-time offender.
        invalid_inputs: Invalid input attempts that block any IP.
        repeat_offender_violations: Lower violation threshold for IPs
            with auto_block_count > 0.
        base_block_seconds: First block duration; doubles per prior block.

    Raises:
        ValueError: If any threshold is not positive.
    """

    rate_limit_violations: int = 20
    invalid_inputs: int = 10
    repeat_offender_violations: int = 10
    base_block_seconds: int = 3600

    def __post_init__(self) -> None:
        """Validate thresholds.

        Raises:
            ValueError: If any threshold is not positive.
        """
        for name in (
            "rate_limit_violations",
            "invalid_inputs",
            "repeat_offender_violations",
            "base_block_seconds",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
