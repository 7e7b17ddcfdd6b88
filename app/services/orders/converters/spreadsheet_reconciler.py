"""SpreadsheetReconciler - groups marketplace export rows into order drafts (SRP)."""

import logging
from dataclasses import dataclass, field

from app.domain.models import DEFAULT_ITEM_TYPE_KEYWORDS, OrderDraft, RawImportRow
from app.services.orders.factories import OrderFactory
from app.services.orders.validators import OrderValidator, Violation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportPolicy:
    """
    Item attribute rules applied while importing.

    Attributes:
        item_type_keywords: Ordered keyword -> item type mapping; the first
            keyword found in the product name wins
        fallback_item_type: Type used when no keyword matches
        default_item_color: Color given to every imported item
    """

    item_type_keywords: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ITEM_TYPE_KEYWORDS))
    fallback_item_type: str = "Normal"
    default_item_color: str = "default"


class SpreadsheetReconciler:
    """
    Turns raw export rows into validated drafts (SRP: reconciliation only).

    Rows are grouped by order number in first-seen order; every row adds
    one item to its order's draft.
    """

    def __init__(self, policy: ImportPolicy | None = None, validator: OrderValidator | None = None):
        """
        Args:
            policy: Item attribute rules
            validator: Validator applied to every grouped draft
        """
        self.policy = policy or ImportPolicy()
        self.validator = validator or OrderValidator()

    def classify(self, product_name: str | None) -> str:
        """Item type for a product name (case-insensitive keyword match)."""
        name = (product_name or "").lower()
        for keyword, item_type in self.policy.item_type_keywords.items():
            if keyword.lower() in name:
                return item_type
        return self.policy.fallback_item_type

    def default_color_for(self, item_type: str) -> str:
        return self.policy.default_item_color

    def group(self, rows: list[RawImportRow]) -> list[OrderDraft]:
        """
        Group rows into drafts without validating them.

        Returns:
            list[OrderDraft]: One draft per distinct order number, in the order
                the numbers first appear
        """
        drafts: dict[str, OrderDraft] = {}

        for row in rows:
            order_number = str(row.marketplace_order_id).strip() if row.marketplace_order_id is not None else ""
            item_type = self.classify(row.product_name)
            item = OrderFactory.create_item(
                item_type=item_type,
                color=self.default_color_for(item_type),
                quantity=row.quantity,
                note=row.buyer_note,
            )

            draft = drafts.get(order_number)
            if draft is None:
                drafts[order_number] = OrderFactory.create_draft(row.buyer_name, order_number, item)
            else:
                draft.items.append(item)

        logger.debug(f"Grouped {len(rows)} rows into {len(drafts)} drafts")
        return list(drafts.values())

    def reconcile(self, rows: list[RawImportRow]) -> list[OrderDraft]:
        """
        Group rows and validate every resulting draft.

        Raises:
            ValidationException: If any draft breaks a creation rule; nothing
                is returned for partial use
        """
        drafts = self.group(rows)

        violations: list[Violation] = []
        for index, draft in enumerate(drafts):
            for violation in self.validator.validate_create(draft):
                violations.append(
                    Violation(
                        field=f"orders[{index}].{violation.field}",
                        message=f"Order {draft.order_number or '?'}: {violation.message}",
                        invalid_value=violation.invalid_value,
                    )
                )

        self.validator.ensure_valid(violations, subject="import")
        logger.info(f"Reconciled {len(rows)} rows into {len(drafts)} orders")
        return drafts
