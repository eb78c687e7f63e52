"""
Showcase Backend — Rate Limiting Middleware
=============================================

What:  Per-IP sliding window rate limiter.
Why:   POST /login verifies a password hash on every call; an unthrottled
       client could use it to guess passwords or burn CPU.
How:   Keeps the request timestamps of each client IP in memory. A request
       is refused with 429 once the IP already has `rate_limit_requests`
       timestamps inside the last `rate_limit_window` seconds.

State is per process. Several uvicorn workers each keep their own window.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from showcase.config import settings
from showcase.exceptions import RateLimitExceededError
from showcase.middleware.logging import client_host

logger = logging.getLogger(__name__)

_CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from settings):
        rate_limit_requests: max requests per window per IP
        rate_limit_window:   window length in seconds

    The rejection is built here rather than raised: exceptions from
    BaseHTTPMiddleware never reach the app's exception handlers.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = client_host(request)
        now = time.time()
        window = settings.rate_limit_window
        window_start = now - window

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= settings.rate_limit_requests:
            retry_after = int(recent[0] + window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(recent),
                window,
            )
            return self._reject(RateLimitExceededError(retry_after=retry_after))

        recent.append(now)

        self._seen += 1
        if self._seen % _CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    @staticmethod
    def _reject(exc: RateLimitExceededError) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": exc.message,
                "details": {"retry_after": exc.retry_after},
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
