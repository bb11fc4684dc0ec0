"""In-memory rate limiting middleware.

Limits (production only):
  /auth/*          -> 10 requests/minute per IP
  /callbacks       -> 5 requests/hour per session
  /admin/*         -> 300 requests/minute per session

Single-process store; a multi-instance deployment needs a shared backend.
"""

import time
from collections import defaultdict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from nextmove.config import settings
from nextmove.core.auth import request_token
from nextmove.core.errors import error_body

# (prefix, max_requests, window_seconds)
_IP_RULES: list[tuple[str, int, int]] = [
    ("/auth/", 10, 60),
]

_SESSION_RULES: list[tuple[str, int, int]] = [
    ("/callbacks", 5, 3600),
    ("/admin/", 300, 60),
]


class _SlidingWindow:
    """Per-key hit timestamps inside a sliding window."""

    def __init__(self) -> None:
        self._hits: dict[str, list[float]] = defaultdict(list)

    def is_allowed(self, key: str, max_requests: int, window: int) -> bool:
        now = time.monotonic()
        cutoff = now - window
        self._hits[key] = hits = [t for t in self._hits[key] if t > cutoff]
        if len(hits) >= max_requests:
            return False
        hits.append(now)
        return True

    def reset(self) -> None:
        self._hits.clear()


_ip_window = _SlidingWindow()
_session_window = _SlidingWindow()


def reset_limits() -> None:
    """Forget all recorded hits."""
    _ip_window.reset()
    _session_window.reset()


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.is_production:
            return await call_next(request)

        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        for prefix, max_req, window in _IP_RULES:
            if path.startswith(prefix):
                if not _ip_window.is_allowed(f"ip:{client_ip}:{prefix}", max_req, window):
                    return _rate_limit_response(request, window)

        # Keyed by session token since the user is not resolved yet
        token = request_token(request)
        if token:
            for prefix, max_req, window in _SESSION_RULES:
                if path.startswith(prefix):
                    if not _session_window.is_allowed(f"session:{token}:{prefix}", max_req, window):
                        return _rate_limit_response(request, window)

        return await call_next(request)


def _rate_limit_response(request: Request, retry_after: int) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content=error_body(request, 429, "Rate limit exceeded. Please try again later."),
        headers={"Retry-After": str(retry_after)},
    )
