"""
Base repository for database operations.

Provides session access and the translation of driver-level connection
failures into the application's exception hierarchy. Derived repositories
only implement their domain operations.
"""

import functools
import logging
from abc import ABC
from typing import Callable, Optional

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.connection import ConnDB, get_db_connection
from app.utils.error_handler import AppException, PersistenceUnavailableException

logger = logging.getLogger(__name__)


def log_operation(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator that logs a repository operation and maps connection failures.

    Errors already expressed as AppException pass through untouched;
    OperationalError/InterfaceError from the driver become
    PersistenceUnavailableException. Nothing is retried.

    Args:
        operation_name: Optional custom name for the operation

    Returns:
        Decorated coroutine function
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
                logger.debug(f"Operation successful: {op_name}")
                return result
            except AppException:
                raise
            except (OperationalError, InterfaceError) as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise PersistenceUnavailableException(
                    message=f"Order store unavailable during {op_name}: {e}",
                    operation=op_name,
                ) from e

        return wrapper

    return decorator


class BaseRepository(ABC):
    """
    Abstract base repository.

    Holds the connection manager and hands out sessions. Derived classes
    implement their own domain operations on top of ``get_session``.
    """

    def __init__(self, conn_db: Optional[ConnDB] = None):
        """
        Args:
            conn_db: Connection manager. Defaults to the shared application one.
        """
        self.conn_db: ConnDB = conn_db or get_db_connection()
        self._repository_name: str = self.__class__.__name__

    def get_session(self) -> AsyncSession:
        """
        Get a database session.

        Raises:
            PersistenceUnavailableException: If the connection is not initialized
        """
        return self.conn_db.get_session()

    def __repr__(self) -> str:
        return f"<{self._repository_name}(initialized={self.conn_db.is_initialized()})>"
