"""
FastAPI application lifecycle.

Startup configures logging and opens the database connection (creating
missing tables); shutdown disposes of the engine.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import get_environment_info, get_settings
from app.core.logging_config import setup_logging
from app.db.connection import close_database, initialize_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown.

    Args:
        app: FastAPI instance
    """
    settings = get_settings()

    # === STARTUP ===
    try:
        await startup_configure_logging()
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

        await startup_initialize_database()

        app.state.environment = get_environment_info()
        logger.info("Application started")

    except Exception as e:
        logger.error(f"Error during startup: {e}")
        await close_database()
        raise

    yield

    # === SHUTDOWN ===
    logger.info(f"Shutting down {settings.APP_NAME}...")

    try:
        await close_database()
        logger.info("Application stopped")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


async def startup_configure_logging() -> None:
    setup_logging()


async def startup_initialize_database() -> None:
    """Open the shared connection and make sure the schema exists."""
    conn_db = await initialize_database()
    logger.info(f"Database ready: {conn_db.engine.url.render_as_string(hide_password=True)}")
