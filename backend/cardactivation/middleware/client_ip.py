"""
Card Activation Backend — Client IP Middleware
================================================

What:  Derives a best-effort originating address for each request and stores
       it on `request.state.client_ip`.
How:   First entry of X-Forwarded-For (trimmed), else the socket peer host,
       else "". The value is client-controlled when no trusted proxy strips
       the header, so it is used for audit logging only, never for access
       decisions.
Who:   Read by the access log middleware and `dependencies.get_client_ip`.
"""

from typing import Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

FORWARDED_FOR_HEADER = "x-forwarded-for"


def extract_client_ip(headers: Mapping[str, str], peer_host: Optional[str] = None) -> str:
    forwarded = headers.get(FORWARDED_FOR_HEADER, "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return (peer_host or "").strip()


def client_ip_from_request(request: Request) -> str:
    peer_host = request.client.host if request.client else None
    return extract_client_ip(request.headers, peer_host)


class ClientIPMiddleware(BaseHTTPMiddleware):
    """Annotates every request with `request.state.client_ip`."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.client_ip = client_ip_from_request(request)
        return await call_next(request)
