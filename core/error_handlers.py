"""Error handlers for FastAPI application.

Provides consistent error response formatting and exception handling
across all API endpoints. Every error body carries a stable `kind`, a
human-readable `message` and the HTTP `status_code`; tracebacks are only
attached when running with ``APP_ENV=development``.
"""

import os
import traceback

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from core.exceptions import AppException
from core.logger import get_logger

logger = get_logger("core.error_handlers")

APP_ENV = os.getenv("APP_ENV", "production")


def is_development() -> bool:
    """Return True when detailed error output may be sent to clients."""
    return APP_ENV.lower() == "development"


def create_error_response(
    message: str,
    status_code: int = 500,
    kind: str = "internal_error",
    details: dict = None,
) -> JSONResponse:
    """Create a standardized error response.

    Args:
        message: Error message.
        status_code: HTTP status code.
        kind: Machine-stable error kind.
        details: Optional error details dictionary.

    Returns:
        JSONResponse with error details.
    """
    error_body = {
        "error": {
            "kind": kind,
            "message": message,
            "status_code": status_code,
        }
    }

    if details:
        error_body["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=error_body
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions.

    Args:
        request: FastAPI request object.
        exc: Application exception instance.

    Returns:
        JSONResponse with error details.
    """
    logger.warning(
        "Application error (%s): %s [%s %s]",
        exc.kind,
        exc.message,
        request.method,
        request.url.path
    )

    return create_error_response(
        message=exc.message,
        status_code=exc.status_code,
        kind=exc.kind,
        details=exc.details
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Malformed request bodies and query parameters share the
    `validation_error` kind and the 400 status with the domain-level
    `ValidationError`.
    """
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        "Validation error on %s %s: %s",
        request.method,
        request.url.path,
        errors
    )

    return create_error_response(
        message="Validation error",
        status_code=status.HTTP_400_BAD_REQUEST,
        kind="validation_error",
        details={"validation_errors": errors}
    )


async def stale_data_exception_handler(
    request: Request,
    exc: StaleDataError
) -> JSONResponse:
    """Handle optimistic concurrency failures raised during flush."""
    logger.warning(
        "Concurrent update detected on %s %s: %s",
        request.method,
        request.url.path,
        str(exc)
    )

    return create_error_response(
        message="The resource was modified by another request, reload and retry",
        status_code=status.HTTP_409_CONFLICT,
        kind="conflict",
    )


async def integrity_exception_handler(
    request: Request,
    exc: IntegrityError
) -> JSONResponse:
    """Handle unique-key and foreign-key violations."""
    logger.warning(
        "Integrity error on %s %s: %s",
        request.method,
        request.url.path,
        str(exc.orig)
    )

    return create_error_response(
        message="The request conflicts with existing data",
        status_code=status.HTTP_409_CONFLICT,
        kind="conflict",
    )


async def sqlalchemy_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle SQLAlchemy database errors.

    Args:
        request: FastAPI request object.
        exc: SQLAlchemy error.

    Returns:
        JSONResponse with database error details.
    """
    logger.error(
        "Database error on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=True
    )

    # Don't expose internal database errors to clients
    details = {"type": "database_error"}
    if is_development():
        details["error"] = str(exc)
    return create_error_response(
        message="A database error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        kind="database_error",
        details=details
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle all unhandled exceptions.

    Args:
        request: FastAPI request object.
        exc: Unhandled exception.

    Returns:
        JSONResponse with generic error message.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=True
    )

    details = {"type": "internal_error"}
    if is_development():
        details["traceback"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )

    # Return generic error to client
    return create_error_response(
        message="An internal server error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        kind="internal_error",
        details=details
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StaleDataError, stale_data_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
