"""
Shared fixtures: in-memory SQLite store, deterministic clock and draft builders.
"""

import os
from datetime import UTC, datetime, timedelta

# Must be set before the application reads its settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"
os.environ["DEBUG"] = "false"
os.environ["LOG_FILE_PATH"] = ""

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from app.db.connection import ConnDB  # noqa: E402
from app.db.repositories import OrderRepository  # noqa: E402
from app.domain.models import OrderDraft, OrderItem  # noqa: E402


class StepClock:
    """Returns a strictly increasing UTC time on every call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(minutes=1)):
        self.current = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now


@pytest.fixture
def clock():
    return StepClock()


@pytest_asyncio.fixture
async def conn_db():
    conn = ConnDB(database_url="sqlite+aiosqlite:///:memory:", echo=False)
    await conn.initialize()
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def repository(conn_db, clock):
    return OrderRepository(conn_db, default_page_size=10, shipping_deadline_days=5, clock=clock)


@pytest.fixture
def make_item():
    def _make_item(color="black", type="Roblox", quantity=1, name_to_print=None):
        return OrderItem(color=color, type=type, quantity=quantity, name_to_print=name_to_print)

    return _make_item


@pytest.fixture
def make_draft(make_item):
    def _make_draft(order_number="240101AAA", client_name="Ana", status="pending", items=None):
        return OrderDraft(
            client_name=client_name,
            order_number=order_number,
            status=status,
            items=items if items is not None else [make_item()],
        )

    return _make_draft
