"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .import_row import DEFAULT_ITEM_TYPE_KEYWORDS, IMPORT_COLUMNS, REQUIRED_IMPORT_COLUMNS, RawImportRow
from .order import (
    BulkInsertResult,
    FailedRecord,
    Order,
    OrderDraft,
    OrderItem,
    OrderStatus,
    OrderUpdate,
    PaginatedOrders,
)
from .order_filter import OrderFilter

__all__ = [
    "BulkInsertResult",
    "DEFAULT_ITEM_TYPE_KEYWORDS",
    "FailedRecord",
    "IMPORT_COLUMNS",
    "Order",
    "OrderDraft",
    "OrderFilter",
    "OrderItem",
    "OrderStatus",
    "OrderUpdate",
    "PaginatedOrders",
    "RawImportRow",
    "REQUIRED_IMPORT_COLUMNS",
]
