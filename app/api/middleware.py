"""HTTP middleware."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.core.security import generate_secure_token, get_security_headers

REQUEST_ID_HEADER = "X-Request-ID"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the standard security headers and a request id to every response.

    A caller-supplied X-Request-ID is echoed back; otherwise a fresh token is issued.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_secure_token(16)
        request.state.request_id = request_id
        response = await call_next(request)
        for header, value in get_security_headers().items():
            response.headers.setdefault(header, value)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
