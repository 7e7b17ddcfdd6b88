"""
OrderService - single entry point for order operations.

This service follows:
- SRP: Only coordinates validation, reconciliation and persistence
- DIP: Depends on the store and reconciler protocols, not on SQLAlchemy
"""

import logging
import uuid

from app.core.config import Settings, get_settings
from app.core.logging_config import import_id_var, log_import_operation
from app.db.repositories import OrderRepository
from app.domain.models import (
    BulkInsertResult,
    Order,
    OrderDraft,
    OrderFilter,
    OrderStatus,
    OrderUpdate,
    PaginatedOrders,
    RawImportRow,
)
from app.services.orders.converters import ImportPolicy, SpreadsheetReconciler
from app.services.orders.interfaces import IOrderStore, ISpreadsheetReconciler
from app.services.orders.validators import OrderValidator
from app.utils.error_handler import OrderNotFoundException

logger = logging.getLogger(__name__)


class OrderService:
    """
    Orchestrates order use cases.

    Validation always runs before the store is touched; store errors
    propagate unchanged.
    """

    def __init__(
        self,
        store: IOrderStore,
        reconciler: ISpreadsheetReconciler | None = None,
        validator: OrderValidator | None = None,
    ):
        """
        Initialize service with its dependencies (DIP).

        Args:
            store: Order persistence
            reconciler: Spreadsheet rows -> drafts
            validator: Order validation rules
        """
        self.store = store
        self.validator = validator or OrderValidator()
        self.reconciler = reconciler or SpreadsheetReconciler(validator=self.validator)

    async def create_order(self, draft: OrderDraft) -> Order:
        """
        Validate and persist a new order.

        Raises:
            ValidationException: If the draft breaks a creation rule
            ConstraintViolationException: If the order number is taken
        """
        self.validator.ensure_valid(self.validator.validate_create(draft))
        order = await self.store.create(draft)
        logger.info(f"Created order {order.order_number} ({order.id})")
        return order

    async def get_all_orders(self, criteria: OrderFilter) -> PaginatedOrders:
        """
        List orders with navigation flags.

        ``has_next_page`` is only computed when both page and page_size were
        supplied; ``has_previous_page`` only needs page.

        Raises:
            ValidationException: If page, page_size or status are invalid
        """
        self.validator.ensure_valid(self.validator.validate_filter(criteria), subject="filter")

        orders, total = await self.store.find_all(criteria)

        has_next_page = False
        if criteria.page is not None and criteria.page_size is not None:
            has_next_page = criteria.page * criteria.page_size < total
        has_previous_page = criteria.page is not None and criteria.page > 1

        return PaginatedOrders(
            orders=orders,
            total=total,
            has_next_page=has_next_page,
            has_previous_page=has_previous_page,
        )

    async def get_order(self, order_id: str) -> Order:
        """
        Raises:
            OrderNotFoundException: If no order has this id
        """
        order = await self.store.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    async def update_order(self, order_id: str, changes: OrderUpdate) -> Order:
        """
        Apply a partial update; only supplied fields are validated.

        Raises:
            ValidationException: If a supplied field is invalid
            OrderNotFoundException: If no order has this id
            ConstraintViolationException: If the new order number is taken
        """
        self.validator.ensure_valid(self.validator.validate_update(changes))

        order = await self.store.update(order_id, changes)
        if order is None:
            raise OrderNotFoundException(order_id)

        logger.info(f"Updated order {order_id}: {sorted(changes.changes())}")
        return order

    async def delete_order(self, order_id: str) -> bool:
        """
        Raises:
            OrderNotFoundException: If no order has this id
        """
        deleted = await self.store.delete(order_id)
        if not deleted:
            raise OrderNotFoundException(order_id)

        logger.info(f"Deleted order {order_id}")
        return True

    async def import_orders(self, rows: list[RawImportRow]) -> BulkInsertResult:
        """
        Import spreadsheet rows as orders.

        Rows are grouped and validated first; one invalid order rejects the
        whole import. Orders the store refuses (duplicate order numbers) are
        reported in the result and do not fail the call.

        Raises:
            ValidationException: If any grouped order is invalid
        """
        import_id = str(uuid.uuid4())

        token = import_id_var.set(import_id)
        try:
            logger.info(f"Starting import {import_id} with {len(rows)} rows")

            drafts = self.reconciler.reconcile(rows)
            result = await self.store.create_bulk(drafts)

            if result.has_failures:
                failed_numbers = [record.draft.order_number for record in result.failed]
                logger.warning(f"Import {import_id}: {len(result.failed)} orders not inserted: {failed_numbers}")

            log_import_operation(
                import_id=import_id,
                rows=len(rows),
                inserted=len(result.inserted),
                failed=len(result.failed),
                orders=len(drafts),
            )
        finally:
            import_id_var.reset(token)

        return result

    async def get_status_counts(self) -> dict[str, int]:
        """Number of orders in each status."""
        return {status.value: await self.store.count_by_status(status.value) for status in OrderStatus}


def create_order_service(store: IOrderStore | None = None, settings: Settings | None = None) -> OrderService:
    """
    Factory function to create a fully wired OrderService.

    Args:
        store: Order store; defaults to an OrderRepository on the shared connection
        settings: Configuration; defaults to the cached application settings

    Returns:
        OrderService: Configured service
    """
    settings = settings or get_settings()

    if store is None:
        store = OrderRepository(
            default_page_size=settings.DEFAULT_PAGE_SIZE,
            shipping_deadline_days=settings.SHIPPING_DEADLINE_DAYS,
            shipped_status=settings.SHIPPED_STATUS,
        )

    validator = OrderValidator()
    policy = ImportPolicy(
        item_type_keywords=dict(settings.IMPORT_ITEM_TYPE_KEYWORDS),
        fallback_item_type=settings.IMPORT_FALLBACK_ITEM_TYPE,
        default_item_color=settings.IMPORT_DEFAULT_ITEM_COLOR,
    )

    return OrderService(
        store=store,
        reconciler=SpreadsheetReconciler(policy=policy, validator=validator),
        validator=validator,
    )
