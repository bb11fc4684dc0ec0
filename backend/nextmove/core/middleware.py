"""Middleware: request IDs and one structured access-log line per request."""

import hashlib
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("nextmove.access")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID, reusing a well-formed one from the proxy."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _incoming_request_id(request) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Access log: request_id, hashed user, method, path, status, latency."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        elapsed_ms = (time.monotonic() - start) * 1000

        user_id = getattr(request.state, "user_id", None)
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "request_id=%s user=%s ip=%s method=%s path=%s status=%d elapsed_ms=%.1f",
            getattr(request.state, "request_id", "-"),
            _hash_user_id(user_id) if user_id else "-",
            request.client.host if request.client else "-",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _incoming_request_id(request: Request) -> str | None:
    value = request.headers.get(REQUEST_ID_HEADER)
    if not value:
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None


def _hash_user_id(uid: str) -> str:
    """First 12 hex chars of the SHA-256 of the user ID."""
    return hashlib.sha256(str(uid).encode()).hexdigest()[:12]
