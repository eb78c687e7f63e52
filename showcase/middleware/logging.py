"""
Showcase Backend — Request Logging Middleware
===============================================

What:  One access-log line per HTTP request with status and duration.
When:  Runs after RequestIDMiddleware, so every line carries the request id.

Log line:
    POST /items 201 12.4ms [1f2e3d4c] from 10.0.0.7

Level follows the status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
Bodies, uploaded bytes and the Authorization header are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from showcase.middleware.request_id import request_id_var

logger = logging.getLogger("showcase.access")


def client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and duration for each request.

    /health is skipped; probes hit it every few seconds.
    """

    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        status = response.status_code
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_host(request),
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
