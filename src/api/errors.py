"""
Exception handlers - Map domain errors to JSON error responses.

Every error body has the shape ``{"ok": false, "error": "<message>"}``.
Status codes are chosen by exception category, never by subclass, so a
new domain error only needs the right base class.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from src.domain.exceptions import (
    AccountError,
    AuthError,
    ConflictError,
    DeliveryFailed,
    NotFoundError,
    OtpError,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error."
INVALID_REQUEST_MESSAGE = "Invalid request."
RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."

# Checked in order; first matching base class wins
_STATUS_BY_CATEGORY: list[tuple[type[AccountError], int]] = [
    (ValidationFailed, status.HTTP_400_BAD_REQUEST),
    (OtpError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (DeliveryFailed, status.HTTP_502_BAD_GATEWAY),
]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def status_for(exc: AccountError) -> int:
    for category, status_code in _STATUS_BY_CATEGORY:
        if isinstance(exc, category):
            return status_code
    return status.HTTP_400_BAD_REQUEST


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    return error_response(status_for(exc), exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Unparseable body or wrong-typed field; details are logged, not returned."""
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, INVALID_REQUEST_MESSAGE)


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Sync like slowapi's own handler; SlowAPIMiddleware calls it without awaiting."""
    logger.warning("Rate limit exceeded on %s: %s", request.url.path, exc.detail)
    return error_response(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMIT_MESSAGE)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback, return a generic 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain, validation, rate-limit and catch-all handlers on an app."""
    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
