"""
SQLAlchemy table mappings for orders.

An order row owns its item rows; items are deleted with their order and
rewritten as a whole on update.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class OrderRecord(Base):
    __tablename__ = "orders"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    order_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(32), index=True, nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    shipping_deadline: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)

    items: Mapped[list["OrderItemRecord"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemRecord.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<OrderRecord(id={self.id!r}, order_number={self.order_number!r}, status={self.status!r})>"


class OrderItemRecord(Base):
    __tablename__ = "order_items"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_pk: Mapped[int] = mapped_column(ForeignKey("orders.pk", ondelete="CASCADE"), index=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    color: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    name_to_print: Mapped[Optional[str]] = mapped_column(String(255))

    order: Mapped[OrderRecord] = relationship(back_populates="items")
