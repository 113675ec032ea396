"""
ext_authz_server.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Bind the check's request id (Envoy forwards the original `x-request-id`) into structlog.
- For check calls, log the forwarded path being authorized rather than the mount path.
- Echo generated request ids on ops endpoints only.
"""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ext_authz_server.authz.context import forwarded_path


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, authz_prefix: str) -> None:
        super().__init__(app)
        self._authz_prefix = authz_prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        raw_path = request.scope.get("raw_path") or request.url.path.encode("utf-8")
        checked = forwarded_path(raw_path, prefix=self._authz_prefix)
        forwarded_id = request.headers.get("x-request-id")
        request_id = forwarded_id or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        if checked:
            structlog.contextvars.bind_contextvars(
                request_id=request_id,
                checked_path=checked,
                method=request.method,
                host=request.headers.get("host"),
            )
        else:
            structlog.contextvars.bind_contextvars(
                request_id=request_id,
                path=request.url.path,
                method=request.method,
            )
        try:
            response: Response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        # Headers on a check response can reach the upstream request; the proxy owns the id.
        if not checked:
            response.headers["x-request-id"] = request_id
        return response


# --- Module Notes -----------------------------------------------------------
# The query string is left out of `checked_path`; identity values are masked by the
# `observability.logging` processor chain unless explicitly enabled.
