"""
Order services package.

Validation, spreadsheet reconciliation and the OrderService that ties them
to the order store.
"""

from .order_service import OrderService, create_order_service

__all__ = ["OrderService", "create_order_service"]
