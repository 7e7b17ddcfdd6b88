"""
Database access for the orders service.

- ConnDB: connection and session management
- OrderRepository: the order store
"""

from app.db.connection import ConnDB, close_database, get_db_connection, initialize_database

__all__ = [
    "ConnDB",
    "get_db_connection",
    "initialize_database",
    "close_database",
]
