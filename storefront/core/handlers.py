"""
Application-level exception handlers.
Every failure that escapes a route is rendered as an error envelope.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.exceptions import ApiError, ErrorCode
from storefront.core.responses import ResponseEnvelope

logger = structlog.get_logger(__name__)


def field_errors(errors) -> dict:
    """Group pydantic error entries by top-level field name."""
    grouped: dict = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "header")]
        name = loc[0] if loc else "__root__"
        grouped.setdefault(name, []).append(error.get("msg", "Invalid value"))
    return grouped


async def api_error_handler(request: Request, exc: ApiError):
    return ResponseEnvelope(request).from_error(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return ResponseEnvelope(request).error(
        ErrorCode.MISSING_OR_INVALID_FIELDS,
        additional={"errors": field_errors(exc.errors())},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    envelope = ResponseEnvelope(request)
    if exc.status_code == 404:
        return envelope.error(ErrorCode.RESOURCE_NOT_FOUND)
    if exc.status_code == 429:
        return envelope.error(ErrorCode.TOO_MANY_REQUESTS)
    if exc.status_code == 405:
        return envelope.error(ErrorCode.RESOURCE_NOT_FOUND, exc.detail)
    return envelope.error(ErrorCode.INTERNAL_SERVER_ERROR, exc.detail)


async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions globally."""
    logger.exception("Unhandled error", path=request.url.path)
    return ResponseEnvelope(request).error(ErrorCode.INTERNAL_SERVER_ERROR, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
