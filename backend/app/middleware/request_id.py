"""
Notekeeper Backend: Request ID Middleware
==========================================

What:  Assigns a correlation ID to each incoming request and echoes it back.
How:   Uses the client's X-Request-ID header when present, otherwise a short
       UUID; stores it in a ContextVar (read by loggers and exception
       handlers) and on request.state, and sets it on the response.
When:  Outermost custom middleware, so every later log line can use it.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that tags every request/response pair with an ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
