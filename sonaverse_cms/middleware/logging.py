"""Per-request access log.

One line per request on the "sonaverse-cms.access" logger. Server errors
are logged at WARNING; health probes at DEBUG.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

log = logging.getLogger("sonaverse-cms.access")

_QUIET_PATHS = frozenset({"/health", "/version"})


def _level(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.WARNING
    if path in _QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status, duration and the acting admin."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        path = request.url.path
        user = getattr(request.state, "user", None)
        log.log(
            _level(path, response.status_code),
            "%s %s -> %s",
            request.method,
            path,
            response.status_code,
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else None,
                "user_id": getattr(user, "id", None),
            },
        )
        return response
