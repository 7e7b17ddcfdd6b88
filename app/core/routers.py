"""
Router configuration for the FastAPI application.

Registers the root and health endpoints and every API router.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from app.api.v1.endpoints.orders import router as orders_router
from app.core.config import get_settings
from app.db.connection import get_db_connection

logger = logging.getLogger(__name__)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Args:
        app: FastAPI instance
    """
    settings = get_settings()

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        return {
            "message": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "documentation": "/docs" if (settings.DEBUG or settings.ENABLE_DOCS) else "disabled",
            "timestamp": datetime.now(UTC).isoformat(),
            "endpoints": {
                "health": "/health",
                "orders": "/api/v1/orders",
                "import": "/api/v1/orders/import",
            },
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        return {"message": "pong", "timestamp": datetime.now(UTC).isoformat()}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Args:
        app: FastAPI instance
    """
    settings = get_settings()

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """
        Probe the database; 503 when it does not answer.
        """
        database_ok = await get_db_connection().test_connection()
        if not database_ok:
            logger.warning("Health check: database unavailable")

        return JSONResponse(
            status_code=200 if database_ok else 503,
            content={
                "status": "healthy" if database_ok else "unhealthy",
                "version": settings.APP_VERSION,
                "environment": settings.ENVIRONMENT,
                "timestamp": datetime.now(UTC).isoformat(),
                "services": {"database": "up" if database_ok else "down"},
            },
        )


def include_api_routers(app: FastAPI) -> None:
    """
    Args:
        app: FastAPI instance
    """
    app.include_router(orders_router, prefix="/api/v1/orders", tags=["Orders"])


def configure_all_routers(app: FastAPI) -> None:
    """
    Register every endpoint of the application.

    Args:
        app: FastAPI instance
    """
    logger.info("Configuring routers...")

    create_root_endpoints(app)
    create_health_endpoints(app)
    include_api_routers(app)

    logger.info("Routers configured")
