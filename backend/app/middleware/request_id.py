"""
WellNest Backend — Request ID Middleware
=========================================

What:  Assigns a correlation ID to each request and echoes it in X-Request-ID.
How:   Uses the client's X-Request-ID when present (so the frontend can tie a
       UI action to a log line), otherwise generates a short UUID. The ID is
       stored in a ContextVar for loggers and exception handlers, and in
       request.state for route handlers.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "").strip()
        # Overlong client ids are replaced so they can't flood the logs
        if supplied and len(supplied) <= MAX_CLIENT_ID_LENGTH:
            rid = supplied
        else:
            rid = str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
