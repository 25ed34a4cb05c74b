"""
Global error handling.

`ErrorHandlerMiddleware` is pure ASGI (not BaseHTTPMiddleware) so it does
not break async generator dependencies like get_db_session().
`register_exception_handlers` maps application errors onto the
`{success: false, message}` envelope.
"""
import json
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.errors import AppError, SyncError
from app.core.logging import get_logger

logger = get_logger(__name__)


def error_body(message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "message": message, **extra}


class ErrorHandlerMiddleware:
    """
    Pure ASGI error handler that catches unhandled exceptions
    and returns JSON 500 responses in the standard envelope.

    Does NOT catch HTTPException; those are handled by FastAPI's
    exception handlers and must pass through unchanged.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            if isinstance(e, HTTPException):
                raise

            if response_started:
                # Headers already sent, can't change the response
                logger.exception(
                    "Unhandled exception after response started",
                    error=str(e),
                    path=scope.get("path", "unknown"),
                )
                raise

            logger.exception(
                "Unhandled exception",
                error=str(e),
                path=scope.get("path", "unknown"),
            )

            body = json.dumps(
                error_body("Internal server error", type=type(e).__name__)
            ).encode("utf-8")

            await send({
                "type": "http.response.start",
                "status": 500,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            })
            await send({
                "type": "http.response.body",
                "body": body,
            })


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Typed application errors keep their status code."""
    extra: dict[str, Any] = {}
    if isinstance(exc, SyncError):
        result = exc.result
        extra["data"] = jsonable_encoder(result.to_dict() if hasattr(result, "to_dict") else result)

    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        error_type=type(exc).__name__,
        message=exc.message,
        status=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, **extra))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_body("Invalid request", errors=jsonable_encoder(exc.errors())),
    )


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
