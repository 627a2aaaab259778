"""Domain errors package.

Usage:
    from src.domain.errors import AdmissionError, RateLimitError, UsageTrackingError
"""

from src.domain.errors.admission_error import AdmissionError
from src.domain.errors.rate_limit_error import RateLimitError
from src.domain.errors.usage_tracking_error import UsageTrackingError

__all__ = [
    "AdmissionError",
    "RateLimitError",
    "UsageTrackingError",
]
