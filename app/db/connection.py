# app/db/connection.py
"""
ConnDB: connection management for the orders database.

Owns the async engine, the session factory and the schema bootstrap.
Repositories borrow sessions from it and never create engines themselves.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.db.models import Base
from app.utils.error_handler import PersistenceUnavailableException

logger = logging.getLogger(__name__)


class ConnDB:
    """
    Connection manager for the orders database.

    One instance is shared by the application (see ``get_db_connection``);
    tests build their own against an in-memory database.
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        """
        Args:
            database_url: SQLAlchemy async URL. Defaults to settings.DATABASE_URL
            echo: Log SQL statements. Defaults to settings.DB_ECHO
        """
        settings = get_settings()
        self.database_url = database_url or settings.DATABASE_URL
        self.echo = settings.DB_ECHO if echo is None else echo
        self.pool_size = settings.DB_POOL_SIZE
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._connection_tested = False

    async def initialize(self, create_schema: bool = True) -> None:
        """
        Create the engine and session factory, then probe the database.

        Args:
            create_schema: Create missing tables after connecting

        Raises:
            PersistenceUnavailableException: If the database cannot be reached
        """
        if self.engine is not None:
            logger.info("Database connection already initialized")
            return

        logger.info("Initializing database connection...")
        try:
            self.engine = create_async_engine(self.database_url, **self._engine_options())
            self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

            await self._test_connection()
            if create_schema:
                await self.create_schema()

            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise PersistenceUnavailableException(
                message=f"Failed to initialize database connection: {str(e)}",
                operation="initialization",
            ) from e

    def _engine_options(self) -> dict:
        if self.database_url.startswith("sqlite"):
            options = {"echo": self.echo, "connect_args": {"check_same_thread": False}}
            # An in-memory database lives inside one connection; share it
            if ":memory:" in self.database_url or "mode=memory" in self.database_url:
                options["poolclass"] = StaticPool
            return options

        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "max_overflow": 10,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }

    async def _test_connection(self) -> None:
        async with self.get_session() as session:
            result = await session.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise PersistenceUnavailableException(
                    message="Connection test returned unexpected value",
                    operation="test",
                )
        self._connection_tested = True

    async def create_schema(self) -> None:
        """Create every table that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready")

    async def _cleanup_failed_initialization(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self.engine = None
        self.session_factory = None
        self._connection_tested = False

    def get_session(self) -> AsyncSession:
        """
        Return a new database session.

        Raises:
            PersistenceUnavailableException: If the connection is not initialized
        """
        if self.session_factory is None:
            raise PersistenceUnavailableException(
                message="Database connection not initialized. Call initialize() first.",
                operation="session_creation",
            )
        return self.session_factory()

    def is_initialized(self) -> bool:
        return self.engine is not None and self.session_factory is not None and self._connection_tested

    async def test_connection(self) -> bool:
        """
        Probe the database without raising.

        Returns:
            bool: True when a trivial query succeeds
        """
        if not self.is_initialized():
            return False
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database connection test failed: {e}")
            return False

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database connection closed")
        self.engine = None
        self.session_factory = None
        self._connection_tested = False


_conn_db_instance: Optional[ConnDB] = None


def get_db_connection() -> ConnDB:
    """
    Return the application-wide ConnDB instance.

    Returns:
        ConnDB: Shared connection manager
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance


async def initialize_database() -> ConnDB:
    """Initialize the shared connection and make sure the schema exists."""
    conn_db = get_db_connection()
    await conn_db.initialize()
    return conn_db


async def close_database() -> None:
    global _conn_db_instance

    if _conn_db_instance is not None:
        await _conn_db_instance.close()
        _conn_db_instance = None
