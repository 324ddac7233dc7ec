"""API dependencies"""

from typing import Optional

from fastapi import HTTPException, Request, status

from app.core.db import get_db
from app.core.logging import get_logger
from app.core.rate_limit import limit_per_client
from app.core.security import detect_bot

__all__ = ["get_db", "limit_per_client", "client_ip", "reject_automated_clients"]

log = get_logger("deps")


def client_ip(request: Request) -> Optional[str]:
    """Caller address for audit records, honouring X-Forwarded-For behind a proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def reject_automated_clients(request: Request) -> None:
    """Refuse crawlers and headless browsers on endpoints that hand out personal data.

    Request volume is policed by the rate limiter, so only the user agent and
    the requested path feed the score here.
    """
    assessment = detect_bot(
        request_frequency=0.0,
        request_pattern=[request.url.path],
        user_agent=request.headers.get("user-agent", ""),
    )
    if assessment.is_bot:
        log.warning(f"Refused automated client {client_ip(request)} on {request.url.path}: {assessment.reason}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Automated clients are not allowed")
