"""
SheetRelay Backend — Rate Limiting Middleware
===============================================

What:  Optional per-IP sliding window rate limiter.
Why:   Every request spends Google Sheets API quota, which is shared by all
       clients of the service account. Deployments exposed to untrusted
       clients can turn this on so one runaway client gets 429s from us
       rather than exhausting the quota.
How:   Per-IP list of request timestamps; entries older than the window are
       dropped on each request, and the request is rejected once the
       remaining count reaches the limit.

Scope:
    Disabled unless RATE_LIMIT_ENABLED=true; when disabled every request
    passes straight through. In-memory, single process. Multiple uvicorn
    workers each keep their own counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from sheetrelay.config import settings
from sheetrelay.exceptions import RateLimitExceededError
from sheetrelay.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from settings):
        rate_limit_enabled:  Master switch (default: False)
        rate_limit_requests: Max requests per window (default: 300)
        rate_limit_window:   Window duration in seconds (default: 60)

    Runs inside RequestIDMiddleware, so 429 bodies carry the request ID.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Sweep idle IPs every this many recorded requests
    CLEANUP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not settings.rate_limit_enabled or request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                settings.rate_limit_window,
            )
            # Raised exceptions bypass the app's exception handlers at this
            # layer, so the error body is built here.
            error = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": error.message,
                    "code": "rate_limit_exceeded",
                    "details": error.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs with no requests inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
