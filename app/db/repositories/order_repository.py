"""
Order store backed by SQLAlchemy.

Persists orders with their items, answers filtered/paginated listings and
performs unordered bulk inserts that report per-record failures instead of
aborting the batch.
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Callable, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from app.db.connection import ConnDB
from app.db.models import OrderItemRecord, OrderRecord
from app.db.repositories.base import BaseRepository, log_operation
from app.domain.models import (
    BulkInsertResult,
    FailedRecord,
    Order,
    OrderDraft,
    OrderFilter,
    OrderItem,
    OrderStatus,
    OrderUpdate,
)
from app.utils.error_handler import ConstraintViolationException

logger = logging.getLogger(__name__)

DUPLICATE_KEY = "duplicate_key"
CONSTRAINT_VIOLATION = "constraint_violation"


def _violates_order_number(error: IntegrityError) -> bool:
    """True when the rejected constraint is the order number uniqueness."""
    return "order_number" in str(error.orig)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _contains_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class OrderRepository(BaseRepository):
    """
    Order store.

    Args:
        conn_db: Connection manager
        default_page_size: Page size used when a listing does not specify one
        shipping_deadline_days: Days between creation and shipping deadline
        shipped_status: Status value treated as "already shipped" by the
            deadline filter
        clock: Returns the current UTC time; replaceable in tests
    """

    def __init__(
        self,
        conn_db: Optional[ConnDB] = None,
        default_page_size: int = 10,
        shipping_deadline_days: int = 5,
        shipped_status: str = "shipped",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(conn_db)
        self.default_page_size = default_page_size
        self.shipping_deadline_days = shipping_deadline_days
        self.shipped_status = shipped_status
        self._clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @log_operation("create_order")
    async def create(self, draft: OrderDraft) -> Order:
        """
        Persist a single validated draft.

        Raises:
            ConstraintViolationException: If the order number already exists
            PersistenceUnavailableException: If the store cannot be reached
        """
        record = self._build_record(draft)

        async with self.get_session() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise self._constraint_violation(draft.order_number, e) from e

        logger.info(f"Order created: {record.order_number} ({record.id})")
        return self._to_domain(record)

    @log_operation("create_orders_bulk")
    async def create_bulk(self, drafts: List[OrderDraft]) -> BulkInsertResult:
        """
        Insert every draft independently.

        A draft the store rejects is reported as a FailedRecord carrying its
        batch index (code "duplicate_key" for an existing order number,
        "constraint_violation" otherwise); the remaining drafts are still
        inserted.
        """
        result = BulkInsertResult()

        for index, draft in enumerate(drafts):
            record = self._build_record(draft)
            async with self.get_session() as session:
                session.add(record)
                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    logger.warning(f"Bulk insert: record {index} rejected ({draft.order_number}): {e.orig}")
                    if _violates_order_number(e):
                        code = DUPLICATE_KEY
                        message = f"Order number '{draft.order_number}' already exists"
                    else:
                        code = CONSTRAINT_VIOLATION
                        message = f"Order '{draft.order_number}' rejected by the store: {e.orig}"
                    result.failed.append(FailedRecord(index=index, code=code, message=message, draft=draft))
                    continue

            result.inserted.append(self._to_domain(record))

        logger.info(f"Bulk insert finished: {len(result.inserted)} inserted, {len(result.failed)} failed")
        return result

    @log_operation("update_order")
    async def update(self, order_id: str, changes: OrderUpdate) -> Optional[Order]:
        """
        Apply a partial update.

        Supplied items replace the stored list as a whole.

        Returns:
            The updated order, or None if no order has this id

        Raises:
            ConstraintViolationException: If the new order number is taken
        """
        async with self.get_session() as session:
            record = await self._get_record(session, order_id)
            if record is None:
                return None

            for name, value in changes.changes().items():
                if name == "items":
                    record.items = [self._build_item(item, position) for position, item in enumerate(value)]
                elif name == "status":
                    record.status = OrderStatus(value).value
                else:
                    setattr(record, name, value)

            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise self._constraint_violation(changes.order_number, e) from e

            order = self._to_domain(record)

        logger.info(f"Order updated: {order_id}")
        return order

    @log_operation("delete_order")
    async def delete(self, order_id: str) -> bool:
        """
        Delete an order and its items.

        Returns:
            True if an order was deleted
        """
        async with self.get_session() as session:
            record = await self._get_record(session, order_id)
            if record is None:
                return False
            await session.delete(record)
            await session.commit()

        logger.info(f"Order deleted: {order_id}")
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @log_operation("find_order_by_id")
    async def find_by_id(self, order_id: str) -> Optional[Order]:
        async with self.get_session() as session:
            record = await self._get_record(session, order_id)
            return self._to_domain(record) if record is not None else None

    @log_operation("find_orders")
    async def find_all(self, criteria: OrderFilter) -> Tuple[List[Order], int]:
        """
        List orders matching the criteria, newest first.

        Returns:
            Tuple of (orders on the requested page, total matches)
        """
        page = criteria.resolved_page(1)
        page_size = criteria.resolved_page_size(self.default_page_size)
        conditions = self._build_conditions(criteria)

        count_stmt = select(func.count()).select_from(OrderRecord).where(*conditions)
        list_stmt = (
            select(OrderRecord)
            .where(*conditions)
            .order_by(OrderRecord.created_at.desc(), OrderRecord.pk.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )

        async with self.get_session() as session:
            total = (await session.execute(count_stmt)).scalar_one()
            records = (await session.execute(list_stmt)).scalars().all()
            orders = [self._to_domain(record) for record in records]

        logger.debug(f"find_all: page={page} page_size={page_size} returned={len(orders)} total={total}")
        return orders, total

    @log_operation("count_orders_by_status")
    async def count_by_status(self, status: str) -> int:
        stmt = select(func.count()).select_from(OrderRecord).where(OrderRecord.status == status)
        async with self.get_session() as session:
            return (await session.execute(stmt)).scalar_one()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_conditions(self, criteria: OrderFilter) -> list:
        conditions = []

        if criteria.order_number:
            conditions.append(OrderRecord.order_number == criteria.order_number)
        if criteria.client_name:
            conditions.append(OrderRecord.client_name == criteria.client_name)

        # The deadline filter carries its own status condition and replaces
        # any status equality the caller asked for.
        if criteria.deadline_before is not None:
            deadline = _ensure_utc(criteria.deadline_before)
            conditions.append(OrderRecord.status != self.shipped_status)
            conditions.append(OrderRecord.shipping_deadline < deadline)
        elif criteria.status:
            conditions.append(OrderRecord.status == criteria.status)

        if criteria.search:
            pattern = _contains_pattern(criteria.search)
            conditions.append(
                or_(
                    OrderRecord.order_number.ilike(pattern, escape="\\"),
                    OrderRecord.client_name.ilike(pattern, escape="\\"),
                    OrderRecord.items.any(OrderItemRecord.name_to_print.ilike(pattern, escape="\\")),
                )
            )

        return conditions

    async def _get_record(self, session, order_id: str) -> Optional[OrderRecord]:
        result = await session.execute(select(OrderRecord).where(OrderRecord.id == order_id))
        return result.scalar_one_or_none()

    def _build_record(self, draft: OrderDraft) -> OrderRecord:
        created_at = self._clock()
        return OrderRecord(
            id=str(uuid.uuid4()),
            client_name=draft.client_name,
            order_number=draft.order_number,
            status=OrderStatus(draft.status).value,
            created_at=created_at,
            shipping_deadline=created_at + timedelta(days=self.shipping_deadline_days),
            items=[self._build_item(item, position) for position, item in enumerate(draft.items or [])],
        )

    @staticmethod
    def _build_item(item: OrderItem, position: int) -> OrderItemRecord:
        return OrderItemRecord(
            position=position,
            color=item.color,
            type=item.type,
            quantity=item.quantity,
            name_to_print=item.name_to_print,
        )

    @staticmethod
    def _to_domain(record: OrderRecord) -> Order:
        return Order(
            id=record.id,
            client_name=record.client_name,
            order_number=record.order_number,
            status=OrderStatus(record.status),
            items=[
                OrderItem(
                    color=item.color,
                    type=item.type,
                    quantity=item.quantity,
                    name_to_print=item.name_to_print,
                )
                for item in record.items
            ],
            created_at=_ensure_utc(record.created_at),
            shipping_deadline=_ensure_utc(record.shipping_deadline),
        )

    @staticmethod
    def _constraint_violation(order_number: Optional[str], error: IntegrityError) -> ConstraintViolationException:
        if not _violates_order_number(error):
            logger.warning(f"Constraint violation for order {order_number}: {error.orig}")
            return ConstraintViolationException(
                message=f"Order rejected by a store constraint: {error.orig}",
                constraint="unknown",
            )

        logger.warning(f"Uniqueness violation for order number {order_number}: {error.orig}")
        return ConstraintViolationException(
            message=f"Order number '{order_number}' already exists",
            constraint="order_number",
            value=order_number,
        )
