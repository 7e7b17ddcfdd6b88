"""
Print Shop Orders - FastAPI application entry point.

Order management for a print shop: CRUD over print orders and bulk import
of marketplace spreadsheet exports.
"""

import logging

import uvicorn
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.exception_handlers import configure_exception_handlers
from app.core.lifespan import lifespan
from app.core.middleware import configure_all_middleware
from app.core.routers import configure_all_routers

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """
    Build and configure the FastAPI application.

    Returns:
        FastAPI: Configured application
    """
    settings = get_settings()
    docs_enabled = settings.DEBUG or settings.ENABLE_DOCS

    logger.info("Creating FastAPI application...")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Print shop order management and marketplace spreadsheet import",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    # Order matters: middleware, then exception handlers, then routes
    configure_all_middleware(app)
    configure_exception_handlers(app)
    configure_all_routers(app)

    logger.info("FastAPI application created")
    return app


app = create_application()


if __name__ == "__main__":
    settings = get_settings()

    uvicorn_config = {
        "app": "app.main:app",
        "host": settings.HOST,
        "port": settings.PORT,
        "reload": settings.DEBUG,
        "log_level": settings.LOG_LEVEL.lower(),
        "access_log": True,
        "workers": 1 if settings.DEBUG else settings.WORKERS,
    }

    if settings.DEBUG:
        uvicorn_config.update(
            {
                "reload_dirs": ["app"],
                "reload_excludes": ["*.pyc", "__pycache__"],
            }
        )

    logger.info(f"Uvicorn configuration: {uvicorn_config}")

    try:
        uvicorn.run(**uvicorn_config)
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
