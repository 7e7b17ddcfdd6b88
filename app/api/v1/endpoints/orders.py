"""
Orders API.

CRUD over print orders plus bulk import from marketplace spreadsheet exports.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from app.api.v1.schemas.order_schemas import (
    ImportResponse,
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
    OrderUpdateRequest,
)
from app.core.config import get_settings
from app.domain.models import OrderFilter
from app.services.orders import OrderService, create_order_service
from app.utils.error_handler import InvalidImportFileException
from app.utils.spreadsheet import check_import_filename, read_import_rows

logger = logging.getLogger(__name__)

router = APIRouter()


def get_order_service() -> OrderService:
    """Dependency providing the order service."""
    return create_order_service()


def _envelope(message: str, data: Any) -> dict[str, Any]:
    return {"status": "success", "message": message, "data": data}


def _file_too_large(filename: str | None, limit_mb: int) -> InvalidImportFileException:
    return InvalidImportFileException(message=f"File exceeds the {limit_mb} MB limit", filename=filename)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreateRequest,
    service: OrderService = Depends(get_order_service),
) -> dict[str, Any]:
    """
    Create an order.

    Example Request:
        ```json
        {
            "client_name": "Ana",
            "order_number": "240101ABC",
            "status": "pending",
            "items": [{"color": "red", "type": "Roblox", "quantity": 2, "name_to_print": "ANA"}]
        }
        ```
    """
    order = await service.create_order(payload.to_draft())
    return _envelope("Order created successfully", OrderResponse.from_domain(order).model_dump(mode="json"))


@router.get("/", status_code=status.HTTP_200_OK)
async def list_orders(
    order_number: str | None = Query(None, description="Exact order number"),
    client_name: str | None = Query(None, description="Exact client name"),
    order_status: str | None = Query(None, alias="status", description="Exact status"),
    search: str | None = Query(None, description="Text matched against order number, client and names to print"),
    deadline_before: datetime | None = Query(
        None, description="Unshipped orders due before this instant; overrides status"
    ),
    page: int | None = Query(None, description="1-based page number"),
    page_size: int | None = Query(None, description="Orders per page"),
    service: OrderService = Depends(get_order_service),
) -> dict[str, Any]:
    """
    List orders, newest first.
    """
    criteria = OrderFilter(
        order_number=order_number,
        client_name=client_name,
        status=order_status,
        search=search,
        deadline_before=deadline_before,
        page=page,
        page_size=page_size,
    )
    result = await service.get_all_orders(criteria)
    return _envelope("Orders retrieved successfully", OrderListResponse.from_domain(result).model_dump(mode="json"))


@router.get("/status-counts", status_code=status.HTTP_200_OK)
async def get_status_counts(service: OrderService = Depends(get_order_service)) -> dict[str, Any]:
    """
    Number of orders per status.
    """
    counts = await service.get_status_counts()
    return _envelope("Status counts retrieved successfully", counts)


@router.post("/import", status_code=status.HTTP_201_CREATED)
async def import_orders(
    file: UploadFile = File(..., description="Marketplace order export (.xlsx)"),
    service: OrderService = Depends(get_order_service),
) -> dict[str, Any]:
    """
    Import orders from a marketplace spreadsheet export.

    Rows sharing an order number become one order with several items.
    Orders whose number already exists are reported under ``failed``.
    """
    settings = get_settings()
    check_import_filename(file.filename, settings.IMPORT_ALLOWED_EXTENSIONS)

    limit = settings.import_max_file_size_bytes
    if file.size is not None and file.size > limit:
        raise _file_too_large(file.filename, settings.IMPORT_MAX_FILE_SIZE_MB)

    # At most one byte past the limit is buffered
    contents = await file.read(limit + 1)
    if len(contents) > limit:
        raise _file_too_large(file.filename, settings.IMPORT_MAX_FILE_SIZE_MB)

    rows = read_import_rows(contents, file.filename)
    result = await service.import_orders(rows)

    message = "Orders imported successfully"
    if result.has_failures:
        message = f"Orders imported with {len(result.failed)} failures"

    return _envelope(message, ImportResponse.from_domain(result).model_dump(mode="json"))


@router.get("/{order_id}", status_code=status.HTTP_200_OK)
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)) -> dict[str, Any]:
    order = await service.get_order(order_id)
    return _envelope("Order retrieved successfully", OrderResponse.from_domain(order).model_dump(mode="json"))


@router.put("/{order_id}", status_code=status.HTTP_200_OK)
async def update_order(
    order_id: str,
    payload: OrderUpdateRequest,
    service: OrderService = Depends(get_order_service),
) -> dict[str, Any]:
    """
    Partially update an order. Supplied items replace the existing ones.
    """
    order = await service.update_order(order_id, payload.to_update())
    return _envelope("Order updated successfully", OrderResponse.from_domain(order).model_dump(mode="json"))


@router.delete("/{order_id}", status_code=status.HTTP_200_OK)
async def delete_order(order_id: str, service: OrderService = Depends(get_order_service)) -> dict[str, Any]:
    deleted = await service.delete_order(order_id)
    return _envelope("Order deleted successfully", {"id": order_id, "deleted": deleted})
