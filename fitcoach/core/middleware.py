"""Custom FastAPI middleware."""
from __future__ import annotations

from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from fitcoach.core.context import caller_id_ctx_var, request_id_ctx_var

CALLER_HEADER = "X-User-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request id and forwarded caller id to the request context.

    The request id is echoed back in the ``X-Request-Id`` response header so
    clients can correlate a failed generation with server-side logs.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        caller_id = (request.headers.get(CALLER_HEADER) or "").strip() or None
        request.state.request_id = request_id
        request_token = request_id_ctx_var.set(request_id)
        caller_token = caller_id_ctx_var.set(caller_id)

        try:
            response = await call_next(request)
        finally:
            caller_id_ctx_var.reset(caller_token)
            request_id_ctx_var.reset(request_token)

        response.headers["X-Request-Id"] = request_id
        return response
