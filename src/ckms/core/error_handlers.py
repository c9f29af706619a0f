"""Uniform error bodies.

Every HTTP and validation error leaves the API as
``{"success": false, "statusCode": ..., "message": ..., "timestamp": ...}`` so
the dashboard can handle failures in one place.
"""
import datetime
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def error_body(status_code: int, message) -> dict:
    if isinstance(message, (list, tuple)):
        message = ", ".join(str(m) for m in message)
    return {
        "success": False,
        "statusCode": status_code,
        "message": message or "An error occurred",
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("query", "body"))
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    logger.info(f"Rejected request to {request.url.path}: {messages}")
    return JSONResponse(status_code=422, content=error_body(422, messages))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
