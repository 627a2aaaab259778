"""DomainError: the error value carried by Failure.

Errors are data, not exceptions. A rate limiter that cannot reach Redis
returns Failure(RateLimitError(...)) and the caller chooses to fail open;
a denied request carries an AdmissionError in its decision. Nothing here is
ever raised.

Subclasses stay frozen dataclasses:

    @dataclass(frozen=True, slots=True, kw_only=True)
    class UsageTrackingError(DomainError):
        pass
"""

from dataclasses import dataclass

from src.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Base error value.

    Attributes:
        code: Machine-readable ErrorCode.
        message: Human-readable description.
        details: Optional debugging context (key, ip_address, ...).
    """

    code: ErrorCode
    message: str
    details: dict[str, str] | None = None

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
