"""
Raw spreadsheet row from a marketplace order export.
"""

from dataclasses import dataclass
from typing import Any

# Column headers of the marketplace export, mapped to RawImportRow fields
IMPORT_COLUMNS = {
    "Nome de usuário (comprador)": "buyer_name",
    "ID do pedido": "marketplace_order_id",
    "Status": "marketplace_status",
    "Items": "items_summary",
    "Nome do Produto": "product_name",
    "Nome da variação": "variation_name",
    "Observação do comprador": "buyer_note",
    "Quantidade": "quantity",
}

REQUIRED_IMPORT_COLUMNS = [
    "Nome de usuário (comprador)",
    "ID do pedido",
    "Status",
    "Nome do Produto",
    "Observação do comprador",
    "Quantidade",
]

# Ordered: the first keyword found in a product name decides the item type
DEFAULT_ITEM_TYPE_KEYWORDS = {
    "roblox": "Roblox",
    "minecraft": "Minecraft",
    "harry potter": "Harry Potter",
    "barbie": "Barbie",
}


@dataclass
class RawImportRow:
    """
    One row of the export, as read from the sheet.

    Values are kept as they come; the reconciler does the interpretation.
    """

    buyer_name: str = ""
    marketplace_order_id: str = ""
    marketplace_status: str = ""
    product_name: str = ""
    buyer_note: str = ""
    quantity: Any = None
    variation_name: str = ""
    items_summary: str = ""

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "RawImportRow":
        """Build a row from a header -> value mapping."""
        values = {field: record[column] for column, field in IMPORT_COLUMNS.items() if column in record}
        return cls(**values)
