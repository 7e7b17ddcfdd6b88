"""
Query descriptor for listing orders.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OrderFilter:
    """
    Closed set of criteria accepted when listing orders.

    Every field is optional. ``page`` and ``page_size`` keep ``None`` when the
    caller did not send them; defaults are applied by the store, so the
    service can still tell "absent" from "present".

    Attributes:
        order_number: Exact order number
        client_name: Exact client name
        status: Exact status
        search: Case-insensitive text matched against order number, client
            name and any item's name to print
        deadline_before: Only unshipped orders whose shipping deadline is
            earlier than this instant. Takes precedence over ``status``.
        page: 1-based page number
        page_size: Orders per page
    """

    order_number: str | None = None
    client_name: str | None = None
    status: str | None = None
    search: str | None = None
    deadline_before: datetime | None = None
    page: int | None = None
    page_size: int | None = None

    def resolved_page(self, default: int = 1) -> int:
        return self.page if self.page is not None and self.page > 0 else default

    def resolved_page_size(self, default: int = 10) -> int:
        return self.page_size if self.page_size is not None and self.page_size > 0 else default
