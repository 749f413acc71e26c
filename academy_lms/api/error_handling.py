# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers rendering every failure into the error envelope.

    {"success": false, "error": "<message>", "code": "<error code>"}

Domain errors carry their own status and code. HTTPException and request
validation failures are mapped by status. Anything else is logged with its
traceback and reported as a generic 500 without leaking details.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from academy_lms.core.errors import LMSError
from academy_lms.infrastructure.database.connection import DatabaseError
from academy_lms.models.common import ErrorResponse

logger = logging.getLogger(__name__)

_STATUS_TO_CODE = {
    400: "validation_error",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "validation_error",
    429: "rate_limited",
    500: "server_error",
}


def _error_code_for_status(status_code: int) -> str:
    if status_code >= 500:
        return "server_error"
    return _STATUS_TO_CODE.get(status_code, "bad_request")


def error_response(
    status_code: int,
    message: str,
    code: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a JSON error envelope response."""
    body = ErrorResponse(error=message, code=code or _error_code_for_status(status_code))
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        text = err.get("msg", "Invalid value")
        messages.append(f"{location}: {text}" if location else text)
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-rendering exception handlers on app."""

    @app.exception_handler(LMSError)
    async def handle_lms_error(request: Request, exc: LMSError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(
            "%s %s -> %d %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.error_code,
            exc.message,
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return error_response(exc.status_code, exc.message, exc.error_code, headers)

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code >= 500:
            logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, message)
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _format_validation_errors(exc)
        logger.info("%s %s -> 400: %s", request.method, request.url.path, message)
        return error_response(400, message, "validation_error")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError) -> JSONResponse:
        logger.error("Database error on %s %s: %s", request.method, request.url.path, str(exc))
        return error_response(500, "Database operation failed", "server_error")

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return error_response(500, "Internal Server Error", "server_error")
