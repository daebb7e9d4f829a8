"""Last-resort error shield.

Turns any exception that escapes the application into the standard JSON
500 body. Details stay in the server log.
"""

from __future__ import annotations

import logging
from typing import Any

from sonaverse_cms.errors import MSG_SERVER_ERROR, error_response

log = logging.getLogger("sonaverse-cms.error-shield")


def _request_id(scope: dict[str, Any]) -> str | None:
    state = scope.get("state")
    if isinstance(state, dict):
        rid = state.get("request_id")
        if isinstance(rid, str) and rid:
            return rid
    for raw_k, raw_v in scope.get("headers") or []:
        if raw_k.lower() == b"x-request-id":
            return raw_v.decode("latin-1").strip() or None
    return None


# Never emit a second response after http.response.start has been sent.
class ErrorShieldMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def tracked_send(message):
            nonlocal response_started
            if message.get("type") == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, tracked_send)
            return
        except Exception:
            request_id = _request_id(scope)
            log.exception(
                "unhandled error",
                extra={
                    "path": str(scope.get("path") or ""),
                    "method": str(scope.get("method") or ""),
                    "request_id": request_id,
                },
            )
            if response_started:
                raise

        headers = {"X-Request-Id": request_id} if request_id else None
        response = error_response(500, MSG_SERVER_ERROR, headers)
        await response(scope, receive, send)
