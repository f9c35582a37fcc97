"""API error taxonomy and the uniform ``{success: false, ...}`` error envelope.

Every failure leaving the API is rendered by the handlers registered in
``register_exception_handlers``:

* ``ApiError`` subclasses carry their own status code and message.
* Request validation failures become 400 with a list of per-field messages.
* Duplicate-key ``IntegrityError`` becomes a ``Conflict``; the storage
  engine's text is logged, never returned.
* Anything else is logged and returned as a generic 500.
"""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server Error"

    def __init__(self, message: str | None = None, errors: list[str] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation Error"

    @classmethod
    def from_errors(cls, errors: Iterable[Mapping[str, Any]]) -> "ValidationFailed":
        return cls(errors=format_validation_errors(errors))


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Conflict(ApiError):
    # Duplicate keys and repeated state transitions are reported as bad requests
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server Error"


# ── Formatting ───────────────────────────────────────────────

# Location prefixes FastAPI adds that mean nothing to API clients
_LOC_PREFIXES = {"body", "query", "path", "header"}


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> list[str]:
    """Turn pydantic error dicts into human-readable ``field: message`` lines."""
    messages = []
    for err in errors:
        loc: Sequence[Any] = err.get("loc", ())
        if loc and loc[0] in _LOC_PREFIXES:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc)
        msg = str(err.get("msg", "Invalid value"))
        # Custom validators surface as "Value error, <text>"
        msg = msg.removeprefix("Value error, ")
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


def error_body(message: str, errors: list[str] | None = None) -> dict:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


_DUPLICATE_KEY_PATTERNS = (
    re.compile(r"Key \((?P<field>[\w\s,]+)\)="),  # PostgreSQL
    re.compile(r"UNIQUE constraint failed: \w+\.(?P<field>\w+)"),  # SQLite
)


def duplicate_key_field(exc: IntegrityError) -> str | None:
    text = str(exc.orig) if exc.orig is not None else str(exc)
    for pattern in _DUPLICATE_KEY_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group("field")
    return None


# ── Handlers ─────────────────────────────────────────────────

async def _handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.errors))


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    failure = ValidationFailed.from_errors(exc.errors())
    return JSONResponse(
        status_code=failure.status_code,
        content=error_body(failure.message, failure.errors),
    )


async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    field = duplicate_key_field(exc)
    conflict = Conflict(f"{field} already exists" if field else None)
    return JSONResponse(status_code=conflict.status_code, content=error_body(conflict.message))


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = "Method not allowed"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(InternalError.default_message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _handle_api_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(IntegrityError, _handle_integrity_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unexpected)
