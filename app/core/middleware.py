"""
Middleware configuration for the FastAPI application.

- CORS from the configured allow list
- Request logging with request id and processing time headers
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.logging_config import request_id_var

logger = logging.getLogger(__name__)


def configure_cors_middleware(app: FastAPI) -> None:
    """
    Allow cross-origin requests from the configured origins.

    Args:
        app: FastAPI instance
    """
    allowed_origins = get_settings().cors_allowed_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Accept-Language",
            "Content-Language",
            "Content-Type",
            "Authorization",
            "X-Request-ID",
        ],
        expose_headers=["X-Process-Time", "X-Request-ID"],
    )

    logger.info(f"CORS configured - allowed origins: {allowed_origins}")


def configure_request_logging_middleware(app: FastAPI) -> None:
    """
    Log every request and response.

    Args:
        app: FastAPI instance
    """
    slow_request_threshold = get_settings().SLOW_REQUEST_THRESHOLD

    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        token = request_id_var.set(request_id)

        start_time = time.time()
        logger.info(f"[{request_id}] {request.method} {request.url.path} - Client: {get_client_ip(request)}")
        if request.url.query:
            logger.debug(f"[{request_id}] Query params: {request.url.query}")

        try:
            response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                f"[{request_id}] {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Time: {process_time:.3f}s"
            )

            response.headers["X-Process-Time"] = f"{process_time:.3f}"
            response.headers["X-Request-ID"] = request_id

            if process_time > slow_request_threshold:
                logger.warning(
                    f"[{request_id}] Slow request detected: {process_time:.3f}s > {slow_request_threshold}s"
                )

            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"[{request_id}] {request.method} {request.url.path} - Error: {str(e)} - Time: {process_time:.3f}s"
            )
            raise
        finally:
            request_id_var.reset(token)


def configure_all_middleware(app: FastAPI) -> None:
    """
    Configure every middleware. They run in reverse order of registration.

    Args:
        app: FastAPI instance
    """
    logger.info("Configuring middleware...")

    configure_request_logging_middleware(app)

    # Added last so it runs first, including for preflight OPTIONS requests
    configure_cors_middleware(app)

    logger.info("Middleware configured")


def generate_request_id() -> str:
    """
    Short unique id for a request.

    Returns:
        str: 8 character id
    """
    return str(uuid.uuid4())[:8]


def get_client_ip(request: Request) -> str:
    """
    Client IP, honoring proxy headers.

    Args:
        request: FastAPI request

    Returns:
        str: Client IP
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"
