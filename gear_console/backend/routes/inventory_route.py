from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Path, Query
from pydantic import ValidationError

from gear_console.backend.crud.inventory_crud import (
    DEFAULT_PER_PAGE,
    delete_inventory_item,
    get_inventory_item,
    list_inventory,
    update_inventory_item,
)
from gear_console.backend.dependencies import first_error, get_store, parse_int
from gear_console.backend.store import InventoryStore
from gear_console.exceptions import ItemNotFoundError
from gear_console.logging_config import get_child_logger, tracer
from gear_console.models import (
    InventoryItemDelete,
    InventoryItemDetail,
    InventoryItemUpdate,
    InventoryPage,
    MutationResult,
)

# Create a child logger for this module
logger = get_child_logger("backend.routes.inventory")

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

INVALID_ID = "Invalid inventory id"


@router.get("", response_model=InventoryPage, response_model_exclude_none=True)
async def get_inventory(
    page: Optional[str] = Query(None, title="Page number, starting at 1"),
    per_page: Optional[str] = Query(None, alias="perPage", title="Rows per page"),
    search: str = Query("", title="Substring of item name or location"),
    store: InventoryStore = Depends(get_store),
):
    with tracer.start_as_current_span("api_get_inventory") as span:
        page_number = parse_int(page, 1)
        page_size = parse_int(per_page, DEFAULT_PER_PAGE)
        span.set_attribute("page", page_number)
        span.set_attribute("per_page", page_size)

        logger.info(
            "Handling GET /api/inventory request",
            extra={"page": page_number, "per_page": page_size, "search": search}
        )

        result = await list_inventory(store, page_number, page_size, search)
        logger.info(
            f"Successfully retrieved {len(result.items)} inventory rows",
            extra={"count": len(result.items)}
        )
        return result


@router.get("/item/{inventory_id}")
async def get_item(
    inventory_id: str = Path(..., title="The ID of the inventory record"),
    store: InventoryStore = Depends(get_store),
) -> Dict[str, Any]:
    try:
        item_id = int(inventory_id)
    except ValueError:
        return {"error": INVALID_ID}

    try:
        detail: InventoryItemDetail = await get_inventory_item(store, item_id)
    except ItemNotFoundError:
        return {"error": "Inventory item not found"}
    return detail.model_dump(by_alias=True)


@router.put("/{inventory_id}", response_model=MutationResult, response_model_exclude_none=True)
async def update_item(
    inventory_id: str = Path(..., title="The ID of the inventory record to update"),
    payload: Dict[str, Any] = Body(..., description="quantity, location and reason"),
    store: InventoryStore = Depends(get_store),
):
    try:
        item_id = int(inventory_id)
    except ValueError:
        return MutationResult(success=False, error=INVALID_ID)

    try:
        update = InventoryItemUpdate.model_validate(payload)
    except ValidationError as e:
        logger.warning("Rejected update request", extra={"inventory_id": item_id, "error": first_error(e)})
        return MutationResult(success=False, error=first_error(e))

    try:
        await update_inventory_item(store, item_id, update)
    except ItemNotFoundError:
        return MutationResult(success=False, message="Update failed: item not found")
    return MutationResult(success=True, message="Updated")


@router.delete("/{inventory_id}", response_model=MutationResult, response_model_exclude_none=True)
async def delete_item(
    inventory_id: str = Path(..., title="The ID of the inventory record to delete"),
    payload: Dict[str, Any] = Body(..., description="reason"),
    store: InventoryStore = Depends(get_store),
):
    try:
        item_id = int(inventory_id)
    except ValueError:
        return MutationResult(success=False, error=INVALID_ID)

    try:
        request = InventoryItemDelete.model_validate(payload)
    except ValidationError as e:
        return MutationResult(success=False, error=first_error(e))

    try:
        await delete_inventory_item(store, item_id, request.reason)
    except ItemNotFoundError:
        return MutationResult(success=False, message="Delete failed: item not found")
    return MutationResult(success=True, message="Deleted")
