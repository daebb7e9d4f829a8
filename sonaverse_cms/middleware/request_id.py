"""Request ID propagation.

A caller-supplied X-Request-Id is kept when it is short and made of safe
characters; anything else is replaced with a fresh UUID so log lines and
error bodies never echo arbitrary header content.
"""

from __future__ import annotations

import re
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-Id"

_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_request_id(value: Optional[str]) -> str:
    if value and _SAFE_ID.match(value):
        return value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Expose the request ID on request.state and the response headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
