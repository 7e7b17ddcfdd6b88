"""
OrderFactory - Factory pattern for creating domain objects (OCP).

This factory encapsulates object creation logic, making it easier
to modify without changing client code.
"""

import math
from typing import Any

from app.domain.models import OrderDraft, OrderItem, OrderStatus


def parse_quantity(value: Any) -> int | None:
    """
    Interpret a spreadsheet quantity cell.

    Integral numbers and numeric strings such as "2" or "2.0" become ints;
    anything else (blank, fractional, text) becomes None so validation
    rejects it.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None

    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if math.isfinite(number) and number.is_integer() else None


class OrderFactory:
    """Factory for creating domain objects with proper defaults."""

    @staticmethod
    def create_item(item_type: str, color: str, quantity: Any, note: Any = None) -> OrderItem:
        """
        Create an OrderItem from loosely typed import values.

        Args:
            item_type: Classified product type
            color: Print color
            quantity: Raw quantity cell
            note: Buyer note; blank notes mean nothing to print
        """
        name_to_print = str(note).strip() if note is not None else ""
        return OrderItem(
            color=color,
            type=item_type,
            quantity=parse_quantity(quantity),
            name_to_print=name_to_print or None,
        )

    @staticmethod
    def create_draft(client_name: Any, order_number: str, first_item: OrderItem) -> OrderDraft:
        """
        Create a draft from the first row seen for an order number.

        Status depends on that first item only: ``to_do`` when it has a name
        to print, ``pending`` otherwise.
        """
        status = OrderStatus.TO_DO if first_item.name_to_print else OrderStatus.PENDING
        return OrderDraft(
            client_name=str(client_name).strip() if client_name is not None else None,
            order_number=order_number,
            status=status.value,
            items=[first_item],
        )
