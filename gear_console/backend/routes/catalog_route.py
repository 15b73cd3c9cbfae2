from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from gear_console.backend.crud.catalog_crud import add_inventory_item, check_item, search_catalog
from gear_console.backend.dependencies import first_error, get_store
from gear_console.backend.store import InventoryStore
from gear_console.exceptions import ItemAlreadyExistsError, ItemNotFoundError
from gear_console.logging_config import get_child_logger, tracer
from gear_console.models import AddItemRequest, CatalogItem, MutationResult

# Create a child logger for this module
logger = get_child_logger("backend.routes.catalog")

router = APIRouter(prefix="/api", tags=["catalog"])


def _bad_request(content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@router.get("/check-item")
async def get_check_item(
    name: Optional[str] = Query(None, title="Exact catalog item name"),
    store: InventoryStore = Depends(get_store),
):
    if name is None:
        return _bad_request({"error": "Missing item name"})
    result = await check_item(store, name)
    return result.model_dump(by_alias=True)


@router.get("/search-items", response_model=List[CatalogItem])
async def get_search_items(
    q: Optional[str] = Query(None, title="Substring of the item name"),
    store: InventoryStore = Depends(get_store),
):
    if q is None:
        return _bad_request({"error": "Missing search query"})
    return await search_catalog(store, q)


@router.post("/add-item", response_model=MutationResult, response_model_exclude_none=True)
async def post_add_item(
    payload: Dict[str, Any] = Body(..., description="isNewItem, item, quantity, location and reason"),
    store: InventoryStore = Depends(get_store),
):
    with tracer.start_as_current_span("api_add_item") as span:
        try:
            request = AddItemRequest.model_validate(payload)
        except ValidationError as e:
            span.set_attribute("error", True)
            logger.warning("Rejected add-item request", extra={"error": first_error(e)})
            return _bad_request({"success": False, "message": first_error(e)})

        try:
            await add_inventory_item(store, request)
        except ItemAlreadyExistsError as e:
            logger.warning("Catalog item already exists", extra={"item_name": request.item.name})
            return MutationResult(success=False, message=f"Failed to add item to the catalog: {e}")
        except ItemNotFoundError as e:
            logger.warning("Catalog item not found", extra={"item_id": request.item.id})
            return MutationResult(success=False, message=f"Failed to add to inventory: {e}")
        return MutationResult(success=True)
