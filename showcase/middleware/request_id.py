"""
Showcase Backend — Request ID Middleware
==========================================

What:  Tags each request with a short correlation id and echoes it back in
       the X-Request-ID response header.
How:   A client-supplied X-Request-ID is reused; otherwise an 8-character
       UUID prefix is generated. The id lives in a ContextVar so loggers and
       exception handlers can read it without access to the request.

Error responses carry the same id in their `request_id` field, so a client
can quote it when reporting a failure.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns the request id, stores it on request.state and the ContextVar."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
