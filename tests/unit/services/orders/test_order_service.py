"""Unit tests for OrderService with a mocked order store."""

import asyncio
import logging
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.config import Settings
from app.core.logging_config import RequestContextFilter, import_id_var
from app.domain.models import (
    BulkInsertResult,
    FailedRecord,
    Order,
    OrderFilter,
    OrderItem,
    OrderStatus,
    OrderUpdate,
    RawImportRow,
)
from app.services.orders import OrderService, create_order_service
from app.utils.error_handler import OrderNotFoundException, ValidationException


def _order(order_number="240101AAA", status=OrderStatus.PENDING) -> Order:
    return Order(
        id="8a1f0c7e-0000-4000-8000-000000000001",
        client_name="Ana",
        order_number=order_number,
        status=status,
        items=[OrderItem(color="black", type="Roblox", quantity=1)],
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def store():
    mock = MagicMock()
    mock.create = AsyncMock(return_value=_order())
    mock.find_all = AsyncMock(return_value=([], 0))
    mock.find_by_id = AsyncMock(return_value=None)
    mock.update = AsyncMock(return_value=None)
    mock.delete = AsyncMock(return_value=False)
    mock.create_bulk = AsyncMock(return_value=BulkInsertResult())
    mock.count_by_status = AsyncMock(return_value=0)
    return mock


@pytest.fixture
def service(store):
    return OrderService(store=store)


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_valid_draft_is_persisted(self, service, store, make_draft):
        order = await service.create_order(make_draft())

        store.create.assert_awaited_once()
        assert order.order_number == "240101AAA"

    @pytest.mark.asyncio
    async def test_invalid_draft_never_reaches_store(self, service, store, make_draft, make_item):
        with pytest.raises(ValidationException) as exc_info:
            await service.create_order(make_draft(items=[make_item(quantity=0)]))

        assert exc_info.value.field == "items[0].quantity"
        store.create.assert_not_awaited()


class TestGetAllOrders:
    @pytest.mark.asyncio
    async def test_second_page_of_fifteen(self, service, store):
        store.find_all.return_value = ([_order()] * 5, 15)

        result = await service.get_all_orders(OrderFilter(page=2, page_size=10))

        assert result.total == 15
        assert result.has_next_page is False
        assert result.has_previous_page is True

    @pytest.mark.asyncio
    async def test_first_page_of_fifteen(self, service, store):
        store.find_all.return_value = ([_order()] * 10, 15)

        result = await service.get_all_orders(OrderFilter(page=1, page_size=10))

        assert result.has_next_page is True
        assert result.has_previous_page is False

    @pytest.mark.asyncio
    async def test_no_next_page_without_explicit_pagination(self, service, store):
        store.find_all.return_value = ([_order()] * 10, 15)

        result = await service.get_all_orders(OrderFilter())

        assert result.has_next_page is False
        assert result.has_previous_page is False

    @pytest.mark.asyncio
    async def test_invalid_page_is_rejected_before_query(self, service, store):
        with pytest.raises(ValidationException):
            await service.get_all_orders(OrderFilter(page=0))

        store.find_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_status_is_rejected(self, service, store):
        with pytest.raises(ValidationException):
            await service.get_all_orders(OrderFilter(status="unknown"))


class TestSingleOrderOperations:
    @pytest.mark.asyncio
    async def test_get_missing_order(self, service):
        with pytest.raises(OrderNotFoundException):
            await service.get_order("missing")

    @pytest.mark.asyncio
    async def test_get_existing_order(self, service, store):
        store.find_by_id.return_value = _order()

        order = await service.get_order("8a1f0c7e-0000-4000-8000-000000000001")

        assert order.client_name == "Ana"

    @pytest.mark.asyncio
    async def test_update_missing_order(self, service):
        with pytest.raises(OrderNotFoundException):
            await service.update_order("missing", OrderUpdate(status="ready"))

    @pytest.mark.asyncio
    async def test_update_validates_supplied_fields_only(self, service, store):
        store.update.return_value = _order(status=OrderStatus.READY)

        order = await service.update_order("id-1", OrderUpdate(status="ready"))

        assert order.status == OrderStatus.READY
        store.update.assert_awaited_once_with("id-1", OrderUpdate(status="ready"))

    @pytest.mark.asyncio
    async def test_update_with_invalid_field_is_rejected(self, service, store):
        with pytest.raises(ValidationException):
            await service.update_order("id-1", OrderUpdate(order_number="  "))

        store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_missing_order(self, service):
        with pytest.raises(OrderNotFoundException):
            await service.delete_order("missing")

    @pytest.mark.asyncio
    async def test_delete_existing_order(self, service, store):
        store.delete.return_value = True

        assert await service.delete_order("id-1") is True


class TestImportOrders:
    @pytest.mark.asyncio
    async def test_grouped_drafts_are_bulk_inserted(self, service, store):
        rows = [
            RawImportRow(buyer_name="Ana", marketplace_order_id="A1", product_name="Roblox", quantity="1"),
            RawImportRow(buyer_name="Ana", marketplace_order_id="A1", product_name="Barbie", quantity="2"),
            RawImportRow(buyer_name="Bia", marketplace_order_id="B2", product_name="Caneca", quantity="1"),
        ]

        await service.import_orders(rows)

        drafts = store.create_bulk.await_args.args[0]
        assert [draft.order_number for draft in drafts] == ["A1", "B2"]
        assert len(drafts[0].items) == 2

    @pytest.mark.asyncio
    async def test_store_failures_are_returned_not_raised(self, service, store):
        rows = [RawImportRow(buyer_name="Ana", marketplace_order_id="A1", product_name="Roblox", quantity="1")]
        store.create_bulk.side_effect = lambda drafts: BulkInsertResult(
            inserted=[],
            failed=[FailedRecord(index=0, code="duplicate_key", message="exists", draft=drafts[0])],
        )

        result = await service.import_orders(rows)

        assert result.has_failures
        assert result.failed[0].index == 0

    @pytest.mark.asyncio
    async def test_invalid_rows_abort_before_any_write(self, service, store):
        rows = [RawImportRow(buyer_name="Ana", marketplace_order_id="A1", product_name="Roblox", quantity="x")]

        with pytest.raises(ValidationException):
            await service.import_orders(rows)

        store.create_bulk.assert_not_awaited()


def _stamped_import_id(message: str):
    record = logging.getLogRecordFactory()("app.api", logging.INFO, __file__, 1, message, None, None)
    RequestContextFilter().filter(record)
    return record.import_id


class TestImportIdLogging:
    @pytest.mark.asyncio
    async def test_overlapping_imports_do_not_leak_their_ids(self, service, store):
        original_factory = logging.getLogRecordFactory()
        release_first = asyncio.Event()
        release_second = asyncio.Event()
        seen_ids = []

        async def create_bulk(drafts):
            seen_ids.append(_stamped_import_id("inserting"))
            if len(seen_ids) == 1:
                await release_first.wait()
            else:
                release_first.set()
                await release_second.wait()
            return BulkInsertResult()

        store.create_bulk.side_effect = create_bulk
        rows_a = [RawImportRow(buyer_name="Ana", marketplace_order_id="A1", product_name="Roblox", quantity="1")]
        rows_b = [RawImportRow(buyer_name="Bia", marketplace_order_id="B2", product_name="Barbie", quantity="1")]

        first = asyncio.create_task(service.import_orders(rows_a))
        second = asyncio.create_task(service.import_orders(rows_b))
        await first

        assert not second.done()
        assert _stamped_import_id("other request") is None

        release_second.set()
        await second

        assert len(seen_ids) == 2
        assert None not in seen_ids
        assert seen_ids[0] != seen_ids[1]
        assert logging.getLogRecordFactory() is original_factory
        assert import_id_var.get() is None
        assert _stamped_import_id("after imports") is None

    @pytest.mark.asyncio
    async def test_import_id_is_cleared_when_import_is_rejected(self, service):
        rows = [RawImportRow(buyer_name="Ana", marketplace_order_id="A1", product_name="Roblox", quantity="x")]

        with pytest.raises(ValidationException):
            await service.import_orders(rows)

        assert import_id_var.get() is None


class TestStatusCounts:
    @pytest.mark.asyncio
    async def test_counts_every_status(self, service, store):
        store.count_by_status.side_effect = lambda status: {"pending": 3, "ready": 1}.get(status, 0)

        counts = await service.get_status_counts()

        assert counts == {"pending": 3, "to_do": 0, "design_done": 0, "ready": 1}


class TestCreateOrderService:
    def test_import_policy_comes_from_settings(self, store):
        settings = Settings(
            IMPORT_DEFAULT_ITEM_COLOR="white",
            IMPORT_FALLBACK_ITEM_TYPE="Generic",
            IMPORT_ITEM_TYPE_KEYWORDS={"pokemon": "Pokemon"},
        )

        service = create_order_service(store=store, settings=settings)

        assert service.reconciler.classify("Pokemon cup") == "Pokemon"
        assert service.reconciler.classify("Roblox cup") == "Generic"
        assert service.reconciler.default_color_for("Pokemon") == "white"
