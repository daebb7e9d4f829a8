"""API error taxonomy and JSON error rendering.

Every error response has the shape {"success": false, "error": <message>}.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = logging.getLogger("sonaverse-cms.errors")

# User-facing messages
MSG_INVALID_REQUEST = "잘못된 요청 형식입니다."
MSG_CREDENTIALS_REQUIRED = "이메일과 비밀번호를 입력해주세요."
MSG_INVALID_EMAIL = "올바른 이메일 형식을 입력해주세요."
MSG_PASSWORD_TOO_SHORT = "비밀번호는 최소 8자 이상이어야 합니다."
MSG_INVALID_CREDENTIALS = "이메일 또는 비밀번호가 올바르지 않습니다."
MSG_LOGGED_OUT = "로그아웃되었습니다."
MSG_UNAUTHENTICATED = "인증되지 않은 사용자입니다."
MSG_AUTH_REQUIRED = "인증이 필요합니다."
MSG_FORBIDDEN = "권한이 없습니다."
MSG_PROTECTED_ACCOUNT = "최고 관리자 계정은 삭제할 수 없습니다."
MSG_PROTECTED_ACCOUNT_CHANGE = "최고 관리자 계정의 권한이나 상태는 변경할 수 없습니다."
MSG_DUPLICATE_SLUG = "이미 존재하는 슬러그입니다."
MSG_DUPLICATE_EMAIL = "이미 존재하는 이메일입니다."
MSG_DUPLICATE_USERNAME = "이미 존재하는 사용자 이름입니다."
MSG_USER_NOT_FOUND = "사용자를 찾을 수 없습니다."
MSG_INQUIRY_NOT_FOUND = "문의를 찾을 수 없습니다."
MSG_NOT_FOUND = "요청한 항목을 찾을 수 없습니다."
MSG_SERVER_ERROR = "서버 오류가 발생했습니다."


class ApiError(HTTPException):
    """Base class for errors rendered as {"success": false, "error": ...}."""

    default_status = 500
    default_message = MSG_SERVER_ERROR

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status_code or self.default_status,
            detail=message or self.default_message,
            headers=headers,
        )

    @property
    def message(self) -> str:
        return str(self.detail)


class BadRequest(ApiError):
    default_status = 400
    default_message = MSG_INVALID_REQUEST


class Unauthorized(ApiError):
    default_status = 401
    default_message = MSG_AUTH_REQUIRED


class Forbidden(ApiError):
    default_status = 403
    default_message = MSG_FORBIDDEN


class NotFound(ApiError):
    default_status = 404
    default_message = MSG_NOT_FOUND


def error_body(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


def error_response(
    status_code: int,
    message: str,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=error_body(message), headers=headers
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else MSG_INVALID_REQUEST
    if exc.status_code >= 500:
        log.error(
            "server error",
            extra={"path": request.url.path, "status_code": exc.status_code},
        )
    return error_response(exc.status_code, message, getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    log.debug(
        "request validation failed",
        extra={"path": request.url.path, "errors": len(exc.errors())},
    )
    return error_response(400, MSG_INVALID_REQUEST)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


async def read_json_object(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object.

    Raises:
        BadRequest: If the body is not valid JSON or not an object
    """
    try:
        data = await request.json()
    except ValueError:
        raise BadRequest(MSG_INVALID_REQUEST)
    if not isinstance(data, dict):
        raise BadRequest(MSG_INVALID_REQUEST)
    return data
