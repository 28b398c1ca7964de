from __future__ import annotations

import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from dotoday.core.errors import internal_error_response


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Injects request.state.request_id and binds it to the structlog context.

    X-Request-Id is taken from the client when present, otherwise generated,
    and echoed back on every response.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = req_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=req_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response: Response = await call_next(request)
        except Exception as exc:
            response = internal_error_response(request, exc)
        response.headers["X-Request-Id"] = req_id
        return response
