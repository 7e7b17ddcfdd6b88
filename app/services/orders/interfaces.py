"""
Interfaces/Protocols for order services (Dependency Inversion Principle).

These protocols define contracts that services must implement,
allowing for loose coupling and easy testing.
"""

from typing import Protocol

from app.domain.models import (
    BulkInsertResult,
    Order,
    OrderDraft,
    OrderFilter,
    OrderUpdate,
    RawImportRow,
)


class IOrderStore(Protocol):
    """Protocol for order persistence."""

    async def create(self, draft: OrderDraft) -> Order:
        """Persist a draft, return the stored order."""
        ...

    async def find_all(self, criteria: OrderFilter) -> tuple[list[Order], int]:
        """Return one page of matching orders and the total match count."""
        ...

    async def find_by_id(self, order_id: str) -> Order | None:
        ...

    async def update(self, order_id: str, changes: OrderUpdate) -> Order | None:
        ...

    async def delete(self, order_id: str) -> bool:
        ...

    async def create_bulk(self, drafts: list[OrderDraft]) -> BulkInsertResult:
        """Insert drafts independently, collecting per-record failures."""
        ...

    async def count_by_status(self, status: str) -> int:
        ...


class ISpreadsheetReconciler(Protocol):
    """Protocol for turning spreadsheet rows into order drafts."""

    def reconcile(self, rows: list[RawImportRow]) -> list[OrderDraft]:
        """Group rows by order number into validated drafts."""
        ...
