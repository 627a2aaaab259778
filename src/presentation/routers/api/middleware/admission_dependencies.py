"""Admission dependencies for FastAPI routes.

Wraps AdmissionService for route handlers:
- Client IP extraction (X-Forwarded-For first hop, X-Real-IP, socket peer)
- Caller identity from request.state (set by the host's auth layer)
- HTTP 429 with Retry-After and X-RateLimit-* headers on denial
- Usage tracking queued on complete() and on every denial (never awaited)

The container lives on app.state (created by the lifespan in main.py);
nothing here holds module-level clients.

Usage:
    @router.post("/network/analyze")
    async def analyze(
        admission: AdmissionContext = Depends(require_admission("network-analyze")),
    ) -> dict[str, str]:
        ...
        admission.complete(status_code=200, domain=domain)
        return result

Request state read (all optional):
    request.state.user_id, request.state.tier,
    request.state.api_key_id, request.state.api_key_rate_limit
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from time import perf_counter

from fastapi import Depends, HTTPException, Request, Response, status

from src.application.services.admission_service import (
    AdmissionDecision,
    AdmissionService,
)
from src.application.services.usage_tracker import UsageTracker
from src.core.config import get_settings
from src.core.container import AdmissionContainer
from src.core.enums import ErrorCode
from src.domain.value_objects.caller_identity import CallerIdentity
from src.domain.value_objects.rate_limit_rule import RateLimitRule
from src.domain.value_objects.usage_record import UsageRecord

UNKNOWN_IP = "unknown"


def get_container(request: Request) -> AdmissionContainer:
    """Return the container created by the application lifespan."""
    return request.app.state.container


def get_admission_service(
    container: AdmissionContainer = Depends(get_container),
) -> AdmissionService:
    """Admission service dependency."""
    return container.admission


def get_usage_tracker(
    container: AdmissionContainer = Depends(get_container),
) -> UsageTracker:
    """Usage tracker dependency."""
    return container.usage_tracker


def get_client_ip(request: Request, *, trust_proxy_headers: bool = True) -> str:
    """Extract the client IP address.

    Takes the first hop of X-Forwarded-For (the client; the rest is the
    proxy chain), then X-Real-IP, then the socket peer.

    Args:
        request: HTTP request.
        trust_proxy_headers: Honour X-Forwarded-For and X-Real-IP.

    Returns:
        str: Client IP, or "unknown".
    """
    if trust_proxy_headers:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop

        real_ip = request.headers.get("X-Real-IP")
        if real_ip and real_ip.strip():
            return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_IP


def get_caller_identity(request: Request) -> CallerIdentity:
    """Build the caller identity from the request.

    Authentication itself is the host's concern: it stores user_id, tier
    and API key details on request.state before this runs.
    """
    state = request.state
    return CallerIdentity(
        ip_address=get_client_ip(
            request, trust_proxy_headers=get_settings().trusted_proxy_headers
        ),
        user_id=getattr(state, "user_id", None),
        tier=getattr(state, "tier", None),
        api_key_id=getattr(state, "api_key_id", None),
        api_key_rate_limit=getattr(state, "api_key_rate_limit", None),
    )


@dataclass(kw_only=True)
class AdmissionContext:
    """Handle given to route handlers after a request is admitted.

    Attributes:
        endpoint: Logical endpoint name.
        identity: Caller identity.
        decision: Allowed admission decision.
    """

    endpoint: str
    identity: CallerIdentity
    decision: AdmissionDecision
    _request: Request
    _tracker: UsageTracker
    _started_at: float = field(default_factory=perf_counter)
    _completed: bool = False

    @property
    def max_results(self) -> int:
        """Largest result or batch size the caller's tier allows."""
        return self.decision.plan.max_results

    def complete(
        self,
        *,
        status_code: int = status.HTTP_200_OK,
        domain: str | None = None,
        was_invalid_input: bool = False,
    ) -> None:
        """Hand the request's usage record to the tracker.

        Tracking is queued, not awaited, so it is safe to call right before
        raising an HTTPException for a rejected request.

        Call once, when the handler knows the outcome. Later calls are
        ignored.

        Args:
            status_code: Response status code.
            domain: Looked-up domain, if any.
            was_invalid_input: Request failed input validation.
        """
        if self._completed:
            return
        self._completed = True
        rate_limit = self.decision.rate_limit
        record = _build_record(
            request=self._request,
            endpoint=self.endpoint,
            identity=self.identity,
            status_code=status_code,
            response_time_ms=int((perf_counter() - self._started_at) * 1000),
            rate_limit_remaining=rate_limit.remaining if rate_limit else None,
            domain=domain,
            was_invalid_input=was_invalid_input,
        )
        self._tracker.track_request(record)


def require_admission(
    endpoint: str,
    *,
    bucket: str | None = None,
    burst: RateLimitRule | None = None,
) -> Callable[..., Awaitable[AdmissionContext]]:
    """Create a dependency that admits the request or raises HTTP 429.

    Args:
        endpoint: Logical endpoint name (daily quotas count per endpoint).
        bucket: Optional bucket scoping the burst window.
        burst: Optional burst rule for the bucket.

    Returns:
        Dependency returning an AdmissionContext.

    Raises:
        HTTPException: 429 with Retry-After and X-RateLimit-* headers.
    """

    async def dependency(
        request: Request,
        response: Response,
        container: AdmissionContainer = Depends(get_container),
    ) -> AdmissionContext:
        started_at = perf_counter()
        identity = get_caller_identity(request)
        decision = await container.admission.admit(
            identity, endpoint, bucket=bucket, burst=burst
        )

        if not decision.allowed:
            container.usage_tracker.track_request(
                _build_record(
                    request=request,
                    endpoint=endpoint,
                    identity=identity,
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    response_time_ms=int((perf_counter() - started_at) * 1000),
                    rate_limit_remaining=0,
                    was_blocked=_is_code(decision, ErrorCode.IP_BLOCKED),
                    was_rate_limited=_is_code(
                        decision,
                        ErrorCode.RATE_LIMIT_EXCEEDED,
                        ErrorCode.DAILY_QUOTA_EXCEEDED,
                    ),
                )
            )
            raise _too_many_requests(decision)

        if decision.rate_limit is not None:
            response.headers.update(_rate_limit_headers(decision))

        return AdmissionContext(
            endpoint=endpoint,
            identity=identity,
            decision=decision,
            _request=request,
            _tracker=container.usage_tracker,
            _started_at=started_at,
        )

    return dependency


def _is_code(decision: AdmissionDecision, *codes: ErrorCode) -> bool:
    return decision.error is not None and decision.error.code in codes


def _rate_limit_headers(decision: AdmissionDecision) -> dict[str, str]:
    rate_limit = decision.rate_limit
    if rate_limit is None:
        return {}
    return {
        "X-RateLimit-Limit": str(rate_limit.limit),
        "X-RateLimit-Remaining": str(rate_limit.remaining),
        "X-RateLimit-Reset": str(rate_limit.reset),
    }


def _too_many_requests(decision: AdmissionDecision) -> HTTPException:
    error = decision.error
    retry_after = decision.retry_after or 60
    headers = {"Retry-After": str(retry_after)}
    headers.update(_rate_limit_headers(decision))
    if decision.rate_limit is not None:
        headers["X-RateLimit-Remaining"] = "0"
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail={
            "code": error.code.value if error else "rate_limit_exceeded",
            "message": error.message if error else "Too many requests",
            "retry_after": retry_after,
        },
        headers=headers,
    )


def _build_record(
    *,
    request: Request,
    endpoint: str,
    identity: CallerIdentity,
    status_code: int,
    response_time_ms: int,
    rate_limit_remaining: int | None,
    domain: str | None = None,
    was_blocked: bool = False,
    was_rate_limited: bool = False,
    was_invalid_input: bool = False,
) -> UsageRecord:
    return UsageRecord(
        ip_address=identity.ip_address,
        endpoint=endpoint,
        method=request.method,
        status_code=status_code,
        response_time_ms=response_time_ms,
        rate_limit_remaining=rate_limit_remaining,
        user_id=identity.user_id,
        domain=domain,
        user_agent=request.headers.get("User-Agent"),
        referer=request.headers.get("Referer"),
        was_blocked=was_blocked,
        was_rate_limited=was_rate_limited,
        was_invalid_input=was_invalid_input,
    )
