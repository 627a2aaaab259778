"""Admission denial reasons.

An AdmissionError explains why a request was turned away (active IP block,
burst limit, daily quota). It is a business outcome, not a system failure:
infrastructure trouble inside the admission path fails open instead.
"""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class AdmissionError(DomainError):
    """Reason a request was denied admission.

    Attributes:
        code: IP_BLOCKED, RATE_LIMIT_EXCEEDED or DAILY_QUOTA_EXCEEDED.
        message: Human-readable message safe to show the caller.
        details: Additional context.
        retry_after: Seconds until the caller may retry, when known.
    """

    retry_after: int | None = None
