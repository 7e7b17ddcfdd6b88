"""
OrderValidator: validation rules for order drafts, updates and listing filters.

Every check returns the full list of violations instead of stopping at the
first one; ``ensure_valid`` turns a non-empty list into a ValidationException.
"""

import logging
from dataclasses import dataclass
from typing import Any

from app.domain.models import OrderDraft, OrderFilter, OrderItem, OrderStatus, OrderUpdate
from app.utils.error_handler import ValidationException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A single broken rule, addressed by field path (e.g. ``items[1].quantity``)."""

    field: str
    message: str
    invalid_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "message": self.message,
            "invalid_value": self.invalid_value,
        }


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class OrderValidator:
    """
    Validates orders before they reach the store.

    Responsibilities:
    - Required fields on create
    - Supplied fields on partial update
    - Item rules (color, type, quantity, name to print)
    - Pagination and status of listing filters
    """

    def validate_create(self, draft: OrderDraft) -> list[Violation]:
        """
        Check a complete draft.

        Args:
            draft: Candidate order

        Returns:
            list[Violation]: Empty if the draft is valid
        """
        violations: list[Violation] = []

        if _is_blank(draft.client_name):
            violations.append(Violation("client_name", "Client name is required", draft.client_name))
        if _is_blank(draft.order_number):
            violations.append(Violation("order_number", "Order number is required", draft.order_number))

        if draft.status is None:
            violations.append(Violation("status", "Status is required"))
        else:
            violations.extend(self._validate_status(draft.status))

        if not draft.items:
            violations.append(Violation("items", "Order must have at least one item", draft.items))
        else:
            violations.extend(self._validate_items(draft.items))

        return violations

    def validate_update(self, changes: OrderUpdate) -> list[Violation]:
        """
        Check only the fields present in a partial update.

        Args:
            changes: Partial change set

        Returns:
            list[Violation]: Empty if every supplied field is valid
        """
        violations: list[Violation] = []

        if changes.client_name is not None and _is_blank(changes.client_name):
            violations.append(Violation("client_name", "Client name cannot be empty", changes.client_name))
        if changes.order_number is not None and _is_blank(changes.order_number):
            violations.append(Violation("order_number", "Order number cannot be empty", changes.order_number))
        if changes.status is not None:
            violations.extend(self._validate_status(changes.status))
        if changes.items is not None:
            if not changes.items:
                violations.append(Violation("items", "Order must have at least one item", changes.items))
            else:
                violations.extend(self._validate_items(changes.items))

        return violations

    def validate_filter(self, criteria: OrderFilter) -> list[Violation]:
        """
        Check pagination and status of a listing request.

        Absent values are fine; present ones must be positive (page,
        page_size) or a known status. An empty status is treated as absent.
        """
        violations: list[Violation] = []

        if criteria.page is not None and not _is_positive_int(criteria.page):
            violations.append(Violation("page", "Page must be a positive integer", criteria.page))
        if criteria.page_size is not None and not _is_positive_int(criteria.page_size):
            violations.append(Violation("page_size", "Page size must be a positive integer", criteria.page_size))
        if criteria.status:
            violations.extend(self._validate_status(criteria.status))

        return violations

    def ensure_valid(self, violations: list[Violation], subject: str = "order") -> None:
        """
        Raise if any violation was found.

        Raises:
            ValidationException: Carrying the first violation's field and all
                violations in its details
        """
        if not violations:
            return

        first = violations[0]
        logger.debug(f"Validation failed for {subject}: {len(violations)} violation(s)")
        raise ValidationException(
            message=f"Invalid {subject}: {first.message}",
            field=first.field,
            invalid_value=first.invalid_value,
            violations=[violation.to_dict() for violation in violations],
        )

    def _validate_status(self, status: Any) -> list[Violation]:
        if status not in OrderStatus.values():
            return [
                Violation(
                    "status",
                    f"Status must be one of: {', '.join(OrderStatus.values())}",
                    status,
                )
            ]
        return []

    def _validate_items(self, items: list[OrderItem]) -> list[Violation]:
        violations: list[Violation] = []

        for i, item in enumerate(items):
            prefix = f"items[{i}]"
            if _is_blank(item.color):
                violations.append(Violation(f"{prefix}.color", "Item color is required", item.color))
            if _is_blank(item.type):
                violations.append(Violation(f"{prefix}.type", "Item type is required", item.type))
            if not _is_positive_int(item.quantity):
                violations.append(
                    Violation(f"{prefix}.quantity", "Item quantity must be a positive integer", item.quantity)
                )
            if item.name_to_print is not None and _is_blank(item.name_to_print):
                violations.append(
                    Violation(f"{prefix}.name_to_print", "Name to print cannot be empty", item.name_to_print)
                )

        return violations
