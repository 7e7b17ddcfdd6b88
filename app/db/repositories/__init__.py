"""
Repositories for order persistence.
"""

from app.db.repositories.base import BaseRepository, log_operation
from app.db.repositories.order_repository import OrderRepository

__all__ = [
    "BaseRepository",
    "OrderRepository",
    "log_operation",
]
