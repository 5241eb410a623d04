"""API error handling and response helpers."""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from buildops.services.errors import ContinuityError, InternalError, ValidationFailedError

logger = logging.getLogger(__name__)


def error_response(error: ContinuityError, details: list[Any] | None = None) -> Dict[str, Any]:
    """Create a standardized error response."""
    body: Dict[str, Any] = {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }
    if details:
        body["error"]["details"] = details
    return body


async def continuity_error_handler(request: Request, exc: ContinuityError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning(
            "%s %s rejected with %s: %s", request.method, request.url.path, exc.code, exc.message
        )
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "message": err.get("msg", "")} for err in exc.errors()
    ]
    error = ValidationFailedError("Request validation failed")
    logger.warning("%s %s invalid payload: %s", request.method, request.url.path, details)
    return JSONResponse(status_code=error.http_status, content=error_response(error, details))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    error = InternalError("Internal server error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_response(error)
    )


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": {"code", "message"}}``."""
    app.add_exception_handler(ContinuityError, continuity_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
