"""Per-client rate limiting for the PII-bearing and write-heavy endpoints."""

from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import Response

from app.core.config import settings
from app.core.logging import get_logger

log = get_logger("rate_limit")

# Every limited route shares this scope, so a client has one budget no matter
# which path (or which user id in the path) it hits.
CLIENT_SCOPE = "client"

# In-process storage; windows expire on their own
limiter = Limiter(key_func=get_remote_address, storage_uri="memory://", strategy="fixed-window")


def client_rate_limit() -> str:
    """Current limit in `limits` notation, read per request so config changes apply."""
    return f"{settings.RATE_LIMIT_REQUESTS} per {settings.RATE_LIMIT_WINDOW_SECONDS} second"


def limit_per_client():
    """Route decorator charging the request against the caller's shared budget."""
    return limiter.shared_limit(client_rate_limit, scope=CLIENT_SCOPE)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    log.warning(f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}: {exc.detail}")
    return _rate_limit_exceeded_handler(request, exc)
