"""Standardized error handling for the API.

This module provides:
1. Custom exception classes for domain-specific errors
2. Exception handlers for FastAPI
3. The standard error response model

Every failure leaves the API as ``{"error": "<message>", "code": "<type>"}``.

Usage:
    from anytime.errors import NotFoundError

    # In controllers:
    if not event:
        raise NotFoundError(detail="Event not found", event_id=event_id)

    # Register handlers in main.py:
    from anytime.errors import register_exception_handlers
    register_exception_handlers(app)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields"
INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    code: str | None = None
    context: dict[str, Any] | None = None


class APIError(Exception):
    """Base class for API errors."""

    status_code: int = 500
    code: str = "internal_error"
    detail: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, detail: str | None = None, **context: Any) -> None:
        self.detail = detail or self.__class__.detail
        self.context = context if context else None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(error=self.detail, code=self.code, context=self.context)


class BadRequestError(APIError):
    """Bad request error (400)."""

    status_code = 400
    code = "bad_request"
    detail = "Invalid request"


class UnauthorizedError(APIError):
    """Unauthorized error (401)."""

    status_code = 401
    code = "unauthorized"
    detail = "Unauthorized"


class ForbiddenError(APIError):
    """Forbidden error (403)."""

    status_code = 403
    code = "forbidden"
    detail = "Access denied"


class NotFoundError(APIError):
    """Resource not found error (404)."""

    status_code = 404
    code = "not_found"
    detail = "Resource not found"


class ConflictError(APIError):
    """State conflict error (409)."""

    status_code = 409
    code = "conflict"
    detail = "Request conflicts with the current state"


class ExternalServiceError(APIError):
    """External service error (502)."""

    status_code = 502
    code = "external_service_error"
    detail = "External service request failed"


class ServiceUnavailableError(APIError):
    """Service unavailable error (503)."""

    status_code = 503
    code = "service_unavailable"
    detail = "Service temporarily unavailable"


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors."""
    logger.warning(
        "API error: %s (status=%d, path=%s)",
        exc.detail,
        exc.status_code,
        request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPExceptions with standard format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            code=_status_to_error_type(exc.status_code),
        ).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn request validation failures into a 400 with a readable message."""
    message = _validation_message(exc.errors())
    logger.info("Rejected request body (path=%s): %s", request.url.path, message)
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error=message, code="bad_request").model_dump(exclude_none=True),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.exception("Unhandled exception: %s (path=%s)", exc, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=INTERNAL_ERROR_MESSAGE, code="internal_error").model_dump(
            exclude_none=True
        ),
    )


def _validation_message(errors: list[dict[str, Any]]) -> str:
    """Pick the message a client should see for a failed body validation.

    Messages raised by our own validators win; absent fields collapse to
    the generic "Missing required fields".
    """
    for err in errors:
        if err.get("type") == "value_error":
            msg = str(err.get("msg", ""))
            return msg.removeprefix("Value error, ")
    if any(err.get("type") == "missing" for err in errors):
        return MISSING_FIELDS_MESSAGE
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ())[1:])
    if field:
        return f"Invalid {field}: {first.get('msg')}"
    return str(first.get("msg") or "Invalid request")


def _status_to_error_type(status_code: int) -> str:
    """Map HTTP status code to error type string."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        422: "validation_error",
        429: "rate_limited",
        500: "internal_error",
        502: "bad_gateway",
        503: "service_unavailable",
        504: "gateway_timeout",
    }
    return mapping.get(status_code, "error")


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
