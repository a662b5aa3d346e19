"""
Application errors and the FastAPI handlers that render them.

Every handler answers with the same envelope the routes use:
{"status": false, "message": ..., "data": null}
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors raised by the service layer."""

    def __init__(self, message: str, status_code: int = 400, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.field = field


class BadRequestError(AppError):
    """Invalid input or a counter that cannot be used."""

    def __init__(self, message: str = "Bad request", field: Optional[str] = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, field=field)


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict"):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


def error_envelope(message: str, field: Optional[str] = None) -> dict:
    body = {"status": False, "message": message, "data": None}
    if field:
        body["field"] = field
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_envelope(exc.message, exc.field))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    field = None
    message = "Invalid request"
    if errors:
        first = errors[0]
        # loc looks like ("body", "counter_id") or ("query", "q")
        loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else None
        message = f"Invalid {field}" if field else first.get("msg", message)
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_envelope(message, field))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("Internal server error"),
    )


EXCEPTION_HANDLERS = {
    AppError: app_error_handler,
    RequestValidationError: validation_error_handler,
    Exception: unhandled_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
