from typing import List, Sequence, Tuple, TypeVar

from gear_console.backend.store import InventoryRecord, InventoryStore, format_time
from gear_console.exceptions import ItemNotFoundError
from gear_console.logging_config import get_child_logger, tracer
from gear_console.models import (
    InventoryItemDetail,
    InventoryItemUpdate,
    InventoryPage,
    InventoryRow,
)
from gear_console.table.query_state import MAX_PAGE_SIZE, compute_total_pages

# Create a child logger for this module
logger = get_child_logger("backend.crud.inventory")

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = MAX_PAGE_SIZE

T = TypeVar("T")


def normalize_paging(page: int, per_page: int) -> Tuple[int, int]:
    """
    Clamp paging parameters: page is at least 1, per_page falls back to the
    default when below 1 and is capped at MAX_PER_PAGE.
    """
    if page < 1:
        page = 1
    if per_page < 1:
        per_page = DEFAULT_PER_PAGE
    return page, min(per_page, MAX_PER_PAGE)


def paginate(records: Sequence[T], page: int, per_page: int) -> List[T]:
    start = (page - 1) * per_page
    return list(records[start:start + per_page])


def to_row(record: InventoryRecord) -> InventoryRow:
    return InventoryRow(
        id=record.id,
        external_item_id=record.item_id,
        name=record.item_name,
        quantity=record.quantity,
        location=record.location,
        stored_at=format_time(record.stored_time),
        updated_at=format_time(record.last_updated),
    )


async def list_inventory(store: InventoryStore, page: int, per_page: int, search: str = "") -> InventoryPage:
    """
    Retrieve one page of inventory records matching search.
    """
    page, per_page = normalize_paging(page, per_page)

    with tracer.start_as_current_span("list_inventory") as span:
        span.set_attribute("page", page)
        span.set_attribute("per_page", per_page)
        span.set_attribute("has_search", bool(search))

        logger.info(
            "Listing inventory",
            extra={"page": page, "per_page": per_page, "search": search}
        )

        async with store.lock:
            matches = store.search_items(search)

        items = [to_row(record) for record in paginate(matches, page, per_page)]
        span.set_attribute("items.count", len(items))

        return InventoryPage(
            items=items,
            total=len(matches),
            page=page,
            per_page=per_page,
            total_pages=compute_total_pages(len(matches), per_page),
        )


async def get_inventory_item(store: InventoryStore, inventory_id: int) -> InventoryItemDetail:
    """
    Raises:
        ItemNotFoundError: If the record does not exist
        DatabaseError: If the store is unreachable
    """
    async with store.lock:
        record = store.get_item(inventory_id)
    return InventoryItemDetail(
        id=record.id,
        external_item_id=record.item_id,
        name=record.item_name,
        quantity=record.quantity,
        location=record.location,
    )


async def update_inventory_item(
    store: InventoryStore, inventory_id: int, update: InventoryItemUpdate
) -> InventoryRow:
    """
    Set quantity and location of a record and log the change with its reason.

    Raises:
        ItemNotFoundError: If the record does not exist
        DatabaseError: If the store is unreachable
    """
    with tracer.start_as_current_span("update_inventory_item") as span:
        span.set_attribute("inventory.id", inventory_id)

        try:
            async with store.lock:
                record = store.update_item(inventory_id, update.quantity, update.location, update.reason)
        except ItemNotFoundError:
            span.set_attribute("error", True)
            logger.warning("Inventory item not found", extra={"inventory_id": inventory_id})
            raise

        logger.info(
            "Inventory item updated",
            extra={"inventory_id": inventory_id, "quantity": update.quantity, "location": update.location}
        )
        return to_row(record)


async def delete_inventory_item(store: InventoryStore, inventory_id: int, reason: str) -> None:
    """
    Raises:
        ItemNotFoundError: If the record does not exist
        DatabaseError: If the store is unreachable
    """
    with tracer.start_as_current_span("delete_inventory_item") as span:
        span.set_attribute("inventory.id", inventory_id)

        try:
            async with store.lock:
                store.delete_item(inventory_id, reason)
        except ItemNotFoundError:
            span.set_attribute("error", True)
            logger.warning("Inventory item not found", extra={"inventory_id": inventory_id})
            raise

        logger.info("Inventory item deleted", extra={"inventory_id": inventory_id})
