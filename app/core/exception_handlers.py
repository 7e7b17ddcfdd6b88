"""
Centralized exception handlers for the FastAPI application.

Every error leaves the API with the same JSON shape: error flag, type,
code, message, kind-specific fields, path, timestamp and request id.
"""

import logging
import traceback
from datetime import UTC, datetime
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.logging_config import request_id_var
from app.utils.error_handler import (
    AppException,
    ConstraintViolationException,
    InvalidImportFileException,
    OrderNotFoundException,
    PersistenceUnavailableException,
    ValidationException,
    log_error,
)

logger = logging.getLogger(__name__)


def _base_content(request: Request, error_type: str, message: Any) -> Dict[str, Any]:
    return {
        "error": True,
        "error_type": error_type,
        "message": message,
        "path": str(request.url.path),
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id_var.get() or request.headers.get("X-Request-ID"),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handler for application exceptions without a dedicated handler.
    """
    log_error(exc, context={"url": str(request.url)})

    content = _base_content(request, "application_error", exc.message)
    content["error_code"] = exc.error_code.value
    content["details"] = exc.details if get_settings().DEBUG else None

    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Handler for rejected input; lists every violation found.
    """
    logger.warning(f"Validation Exception: {exc.message} - Field: {exc.field} - URL: {request.url}")

    content = _base_content(request, "validation_error", exc.message)
    content["error_code"] = exc.error_code.value
    content["field"] = exc.field
    content["violations"] = exc.violations

    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))


async def order_not_found_exception_handler(request: Request, exc: OrderNotFoundException) -> JSONResponse:
    logger.info(f"Order not found: {exc.order_id} - URL: {request.url}")

    content = _base_content(request, "not_found", exc.message)
    content["error_code"] = exc.error_code.value
    content["order_id"] = exc.order_id

    return JSONResponse(status_code=exc.status_code, content=content)


async def constraint_violation_exception_handler(
    request: Request, exc: ConstraintViolationException
) -> JSONResponse:
    logger.warning(f"Constraint violation: {exc.message} - Constraint: {exc.constraint} - URL: {request.url}")

    content = _base_content(request, "constraint_violation", exc.message)
    content["error_code"] = exc.error_code.value
    content["constraint"] = exc.constraint
    content["value"] = exc.value

    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))


async def persistence_unavailable_exception_handler(
    request: Request, exc: PersistenceUnavailableException
) -> JSONResponse:
    """
    Handler for an unreachable order store. Driver details stay out of the
    response unless DEBUG is on.
    """
    logger.critical(f"Persistence unavailable: {exc.message} - Operation: {exc.operation} - URL: {request.url}")

    message = exc.message if get_settings().DEBUG else "Order store is temporarily unavailable"
    content = _base_content(request, "persistence_unavailable", message)
    content["error_code"] = exc.error_code.value

    return JSONResponse(status_code=exc.status_code, content=content)


async def invalid_import_file_exception_handler(request: Request, exc: InvalidImportFileException) -> JSONResponse:
    logger.warning(f"Invalid import file: {exc.message} - File: {exc.filename} - URL: {request.url}")

    content = _base_content(request, "invalid_import_file", exc.message)
    content["error_code"] = exc.error_code.value
    content["filename"] = exc.filename

    return JSONResponse(status_code=exc.status_code, content=content)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handler for malformed requests rejected by FastAPI before reaching an
    endpoint (unparseable query params or body).
    """
    logger.warning(f"Request validation error: {exc.errors()} - URL: {request.url}")

    content = _base_content(request, "validation_error", "Request is malformed")
    content["error_code"] = "VALIDATION_ERROR"
    content["violations"] = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]

    return JSONResponse(status_code=422, content=jsonable_encoder(content))


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    content = _base_content(request, "http_error", exc.detail)
    content["status_code"] = exc.status_code

    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler for anything not caught above. Internals are only exposed in DEBUG.
    """
    logger.error(
        f"Unhandled Exception: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"URL: {request.url} - "
        f"Traceback: {traceback.format_exc()}"
    )

    debug = get_settings().DEBUG
    message = f"{type(exc).__name__}: {str(exc)}" if debug else "Internal server error occurred"

    content = _base_content(request, "internal_server_error", message)
    content["traceback"] = traceback.format_exc() if debug else None

    return JSONResponse(status_code=500, content=content)


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Register every exception handler on the application.

    Args:
        app: FastAPI instance
    """
    logger.info("Configuring exception handlers...")

    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(OrderNotFoundException, order_not_found_exception_handler)
    app.add_exception_handler(ConstraintViolationException, constraint_violation_exception_handler)
    app.add_exception_handler(PersistenceUnavailableException, persistence_unavailable_exception_handler)
    app.add_exception_handler(InvalidImportFileException, invalid_import_file_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)

    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers configured")
