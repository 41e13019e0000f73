"""
Error handling with security-compliant error sanitization.

Translates domain exceptions into the JSON error envelope and prevents
sensitive data from leaking into responses or logs.
"""

import logging
import re
import traceback
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import JobBoardError, ValidationFailed

logger = logging.getLogger(__name__)

# Bearer tokens first so a following ``Authorization:`` match swallows the scheme
SENSITIVE_PATTERNS = [
    re.compile(r'bearer\s+[A-Za-z0-9\-_.]+', re.IGNORECASE),
    re.compile(r'(?:password|token|api[_-]?key|secret|authorization)["\s:=]+[^"\s,}]+', re.IGNORECASE),
]

# Location prefixes FastAPI puts in front of the field name
_LOCATION_PREFIXES = {"body", "query", "path", "form", "header", "cookie"}

UNEXPECTED_MESSAGE = "An unexpected error occurred"

# Checked in order; the first matching class wins
DATABASE_ERRORS = [
    (IntegrityError, status.HTTP_409_CONFLICT, "INTEGRITY_ERROR",
     "Database integrity constraint violated"),
    (OperationalError, status.HTTP_503_SERVICE_UNAVAILABLE, "DATABASE_ERROR",
     "Database service temporarily unavailable"),
    (SQLAlchemyError, status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR",
     "A database error occurred"),
]


def sanitize_error_message(message: Any) -> str:
    """Replace credentials found in ``message`` with ``[REDACTED]``."""
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """
    Collapse FastAPI validation errors into a field-keyed message map.

    The key is the top-level field after the request-part prefix, so
    ``("body", "salary_to")`` becomes ``"salary_to"`` and a list item at
    ``("body", "skills", 0)`` is reported under ``"skills"``.
    """
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        message = sanitize_error_message(error.get("msg", "Invalid value"))
        # pydantic prefixes messages raised from validators
        message = message.removeprefix("Value error, ")
        errors.setdefault(loc[0] if loc else "__root__", []).append(message)
    return errors


def error_body(
    message: str,
    code: str,
    path: str,
    method: str,
    errors: Optional[dict[str, list[str]]] = None,
) -> dict[str, Any]:
    """Build the JSON error envelope shared by every handler."""
    body: dict[str, Any] = {
        "message": message,
        "error": {"code": code, "path": path, "method": method},
    }
    if errors is not None:
        body["errors"] = errors
    return body


def get_safe_error_details(exc: Exception) -> dict[str, Any]:
    """Exception type, sanitized message and traceback; development only."""
    return {
        "type": type(exc).__name__,
        "message": sanitize_error_message(exc),
        "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
    }


def domain_error_response(exc: JobBoardError, path: str, method: str) -> JSONResponse:
    """Envelope for a ``JobBoardError`` with its own status and code."""
    errors = exc.errors if isinstance(exc, ValidationFailed) else None
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(sanitize_error_message(exc.message), exc.code, path, method, errors),
        headers=headers,
    )


def _log_unexpected(exc: Exception, method: str, path: str) -> None:
    logger.error(
        f"Unhandled exception: {method} {path} - "
        f"{type(exc).__name__}: {sanitize_error_message(exc)}",
        exc_info=exc,
    )


class ErrorHandlingMiddleware:
    """
    Outermost guard for exceptions that escape the registered handlers.

    Anything reaching this middleware becomes a sanitized JSON response;
    database failures map onto 409/503/500 and domain errors keep their
    own status.
    """

    def __init__(self, app: Callable, debug: bool = False):
        """
        Args:
            app: The ASGI application
            debug: Attach exception details to 5xx responses
        """
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = self._handle_exception(exc, scope.get("path", "unknown"), scope.get("method", "unknown"))
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, path: str, method: str) -> Response:
        if isinstance(exc, JobBoardError):
            logger.warning(f"{type(exc).__name__} escaped handlers: {method} {path} - {sanitize_error_message(exc.message)}")
            response = domain_error_response(exc, path, method)
            if not (self.debug and exc.status_code >= 500):
                return response

        for error_class, status_code, code, message in DATABASE_ERRORS:
            if isinstance(exc, error_class):
                logger.error(f"{error_class.__name__}: {method} {path}", exc_info=exc)
                break
        else:
            if isinstance(exc, JobBoardError):
                status_code, code, message = exc.status_code, exc.code, sanitize_error_message(exc.message)
            else:
                _log_unexpected(exc, method, path)
                status_code, code, message = (
                    status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", UNEXPECTED_MESSAGE,
                )

        body = error_body(message, code, path, method)
        if self.debug and status_code >= 500:
            body["error"]["details"] = get_safe_error_details(exc)
        return JSONResponse(status_code=status_code, content=body)


def setup_error_handlers(app: FastAPI) -> None:
    """Register the JSON envelope handlers on ``app``."""

    @app.exception_handler(JobBoardError)
    async def job_board_error_handler(request: Request, exc: JobBoardError):
        """Domain errors raised by services and policies."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(f"{type(exc).__name__}: {request.method} {request.url.path} - {sanitize_error_message(exc.message)}")
        return domain_error_response(exc, request.url.path, request.method)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Routing errors (404/405) and explicit HTTPExceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                sanitize_error_message(exc.detail), "HTTP_EXCEPTION", request.url.path, request.method,
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Schema failures, keyed by field like ``ValidationFailed``."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body(
                "Validation failed", "VALIDATION_ERROR", request.url.path, request.method, field_errors(exc),
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        _log_unexpected(exc, request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(UNEXPECTED_MESSAGE, "INTERNAL_SERVER_ERROR", request.url.path, request.method),
        )
