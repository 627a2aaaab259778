"""Usage record value object.

One observed request as reported by the request handler. The tracker turns
it into a stored usage event, an abuse counter update and, for successful
domain lookups, a domain search entry.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class UsageRecord:
    """Observed request handed to the usage tracker.

    Attributes:
        ip_address: Client IP address.
        endpoint: Logical endpoint name (e.g. "network-analyze").
        method: HTTP method.
        status_code: Response status code.
        response_time_ms: Handler latency in milliseconds.
        rate_limit_remaining: Remaining burst capacity after this request.
        user_id: Authenticated user, if any.
        domain: Looked-up domain, if any.
        user_agent: Client User-Agent header, if any.
        referer: Client Referer header, if any.
        was_blocked: Request was refused because the IP is blocked.
        was_rate_limited: Request was refused by the burst limit.
        was_invalid_input: Request was refused by input validation.
    """

    ip_address: str
    endpoint: str
    method: str
    status_code: int
    response_time_ms: int
    rate_limit_remaining: int | None = None
    user_id: str | None = None
    domain: str | None = None
    user_agent: str | None = None
    referer: str | None = None
    was_blocked: bool = False
    was_rate_limited: bool = False
    was_invalid_input: bool = False

    @property
    def is_violation(self) -> bool:
        """Whether this request counts as an abuse violation."""
        return self.was_rate_limited or self.was_invalid_input

    @property
    def is_domain_search(self) -> bool:
        """Whether this request is a successful domain lookup."""
        return bool(self.domain) and self.status_code == 200
