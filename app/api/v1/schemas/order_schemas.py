"""
Pydantic schemas for the orders API.

Request models are deliberately loose: they only shape the payload, and the
order validator decides what is acceptable so that rule violations are
reported the same way for JSON and spreadsheet input.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.domain.models import (
    BulkInsertResult,
    FailedRecord,
    Order,
    OrderDraft,
    OrderItem,
    OrderStatus,
    OrderUpdate,
    PaginatedOrders,
)


class OrderItemPayload(BaseModel):
    """Printable item as sent by clients."""

    color: str | None = Field(None, description="Print color")
    type: str | None = Field(None, description="Product type, e.g. Roblox")
    quantity: Any = Field(None, description="Units to print, a positive integer")
    name_to_print: str | None = Field(None, description="Text to print on the item")

    def to_domain(self) -> OrderItem:
        return OrderItem(
            color=self.color,
            type=self.type,
            quantity=self.quantity,
            name_to_print=self.name_to_print,
        )


class OrderCreateRequest(BaseModel):
    """Body of POST /orders."""

    client_name: str | None = Field(None, description="Buyer name")
    order_number: str | None = Field(None, description="Marketplace order number, unique")
    status: str = Field(OrderStatus.PENDING.value, description="Production status")
    items: list[OrderItemPayload] | None = Field(None, description="Printable items, at least one")

    def to_draft(self) -> OrderDraft:
        return OrderDraft(
            client_name=self.client_name,
            order_number=self.order_number,
            status=self.status,
            items=[item.to_domain() for item in self.items] if self.items is not None else None,
        )


class OrderUpdateRequest(BaseModel):
    """Body of PUT /orders/{order_id}; omitted fields stay untouched."""

    client_name: str | None = None
    order_number: str | None = None
    status: str | None = None
    items: list[OrderItemPayload] | None = Field(None, description="Replaces every item when supplied")

    def to_update(self) -> OrderUpdate:
        return OrderUpdate(
            client_name=self.client_name,
            order_number=self.order_number,
            status=self.status,
            items=[item.to_domain() for item in self.items] if self.items is not None else None,
        )


class OrderItemResponse(BaseModel):
    color: str
    type: str
    quantity: int
    name_to_print: str | None = None


class OrderResponse(BaseModel):
    id: str
    client_name: str
    order_number: str
    status: OrderStatus
    items: list[OrderItemResponse]
    created_at: datetime | None = None
    shipping_deadline: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            client_name=order.client_name,
            order_number=order.order_number,
            status=order.status,
            items=[OrderItemResponse(**item.to_dict()) for item in order.items],
            created_at=order.created_at,
            shipping_deadline=order.shipping_deadline,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def from_domain(cls, page: PaginatedOrders) -> "OrderListResponse":
        return cls(
            orders=[OrderResponse.from_domain(order) for order in page.orders],
            total=page.total,
            has_next_page=page.has_next_page,
            has_previous_page=page.has_previous_page,
        )


class FailedRecordResponse(BaseModel):
    index: int
    code: str
    message: str
    order_number: str | None = None
    draft: dict[str, Any]

    @classmethod
    def from_domain(cls, record: FailedRecord) -> "FailedRecordResponse":
        return cls(
            index=record.index,
            code=record.code,
            message=record.message,
            order_number=record.draft.order_number,
            draft=record.draft.to_dict(),
        )


class ImportResponse(BaseModel):
    inserted_count: int
    failed_count: int
    inserted: list[OrderResponse]
    failed: list[FailedRecordResponse]

    @classmethod
    def from_domain(cls, result: BulkInsertResult) -> "ImportResponse":
        return cls(
            inserted_count=len(result.inserted),
            failed_count=len(result.failed),
            inserted=[OrderResponse.from_domain(order) for order in result.inserted],
            failed=[FailedRecordResponse.from_domain(record) for record in result.failed],
        )
