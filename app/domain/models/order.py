"""
Order domain model (Aggregate Root).

An order owns an ordered list of printable items. Items have no identity of
their own and are always replaced as a whole.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any


class OrderStatus(str, Enum):
    """Production status of a print order."""

    PENDING = "pending"
    TO_DO = "to_do"
    DESIGN_DONE = "design_done"
    READY = "ready"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


@dataclass
class OrderItem:
    """
    A printable line item.

    Attributes:
        color: Print color
        type: Product type (e.g. "Roblox", "Normal")
        quantity: Units to print, a positive integer
        name_to_print: Text to print on the item, if any
    """

    color: str
    type: str
    quantity: int
    name_to_print: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "color": self.color,
            "type": self.type,
            "quantity": self.quantity,
            "name_to_print": self.name_to_print,
        }


@dataclass
class OrderDraft:
    """
    Unvalidated, unpersisted candidate order.

    Fields are optional so the validator can report what is missing instead
    of failing at construction time.
    """

    client_name: str | None = None
    order_number: str | None = None
    status: str | None = None
    items: list[OrderItem] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_name": self.client_name,
            "order_number": self.order_number,
            "status": self.status,
            "items": [item.to_dict() for item in self.items] if self.items is not None else None,
        }


@dataclass
class OrderUpdate:
    """
    Partial change set for an existing order.

    ``None`` means "leave untouched"; any other value, including an empty
    string or list, is a supplied value and gets validated.
    """

    client_name: str | None = None
    order_number: str | None = None
    status: str | None = None
    items: list[OrderItem] | None = None

    def changes(self) -> dict[str, Any]:
        """Supplied fields only."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass
class Order:
    """
    Persisted order.

    Attributes:
        id: Public identifier (UUID4 string), distinct from the storage key
        client_name: Buyer name
        order_number: Marketplace order number, unique across all orders
        status: Production status
        items: Printable items, in order
        created_at: Creation timestamp (UTC)
        shipping_deadline: Date by which the order has to ship (UTC)
    """

    id: str
    client_name: str
    order_number: str
    status: OrderStatus
    items: list[OrderItem] = field(default_factory=list)
    created_at: datetime | None = None
    shipping_deadline: datetime | None = None


@dataclass
class FailedRecord:
    """
    A draft that could not be persisted during a bulk insert.

    Attributes:
        index: Position of the draft in the submitted batch
        code: Machine readable reason (e.g. "duplicate_key")
        message: Human readable reason
        draft: The offending draft, for inspection or retry
    """

    index: int
    code: str
    message: str
    draft: OrderDraft


@dataclass
class BulkInsertResult:
    """Outcome of an unordered bulk insert."""

    inserted: list[Order] = field(default_factory=list)
    failed: list[FailedRecord] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


@dataclass
class PaginatedOrders:
    """One page of orders plus navigation flags."""

    orders: list[Order]
    total: int
    has_next_page: bool
    has_previous_page: bool
