"""Per-address request limits for the unauthenticated auth endpoints.

slowapi with in-memory fixed windows keyed by client address. Routes take
their limit strings from settings, e.g.::

    @limiter.limit(settings.rate_limit_resend)
    async def resend_verification(request: Request, ...): ...

A limited call is rejected before the route body runs.
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from restaunax.core.config import settings

_DEFAULT_RETRY_AFTER_SECONDS = 60

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)


def _retry_after_seconds(exc: RateLimitExceeded) -> int:
    """Length of the violated window, used as the Retry-After hint."""
    wrapped = getattr(exc, "limit", None)
    item = getattr(wrapped, "limit", None)
    if item is None:
        return _DEFAULT_RETRY_AFTER_SECONDS
    return int(item.get_expiry())


def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> Response:
    """Answer a limited call with 429 RATE_LIMITED and Retry-After.

    Args:
        _request: The rejected request.
        exc: The RateLimitExceeded raised by slowapi.

    Returns:
        JSONResponse in the error envelope.
    """
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMITED",
                "message": f"Rate limit exceeded: {exc.detail}",
                "details": None,
            }
        },
        headers={"Retry-After": str(_retry_after_seconds(exc))},
    )
