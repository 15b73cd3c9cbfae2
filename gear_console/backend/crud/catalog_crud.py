from typing import List

from gear_console.backend.crud.inventory_crud import to_row
from gear_console.backend.store import CatalogRecord, InventoryStore
from gear_console.logging_config import get_child_logger, tracer
from gear_console.models import AddItemRequest, CatalogItem, InventoryRow, ItemCheck

# Create a child logger for this module
logger = get_child_logger("backend.crud.catalog")

SEARCH_LIMIT = 10


def to_catalog_item(record: CatalogRecord) -> CatalogItem:
    return CatalogItem(
        id=record.id,
        name=record.name,
        category=record.category,
        grade=record.grade,
        effect=record.effect,
        description=record.description,
    )


async def check_item(store: InventoryStore, name: str) -> ItemCheck:
    async with store.lock:
        record = store.find_catalog_item(name)
    if record is None:
        return ItemCheck(exists=False)
    return ItemCheck(exists=True, item_id=record.id)


async def search_catalog(store: InventoryStore, query: str) -> List[CatalogItem]:
    """
    Up to SEARCH_LIMIT catalog entries whose name contains query.
    """
    with tracer.start_as_current_span("search_catalog") as span:
        async with store.lock:
            records = store.search_catalog(query, SEARCH_LIMIT)
        span.set_attribute("items.count", len(records))
        logger.info(f"Found {len(records)} catalog items", extra={"count": len(records), "query": query})
        return [to_catalog_item(record) for record in records]


async def add_inventory_item(store: InventoryStore, request: AddItemRequest) -> InventoryRow:
    """
    Add stock of a catalog item, registering the item in the catalog first
    when it is new.

    Raises:
        ItemAlreadyExistsError: If a new item's name is already in the catalog
        ItemNotFoundError: If an existing item's id is not in the catalog
        DatabaseError: If the store is unreachable
    """
    with tracer.start_as_current_span("add_inventory_item") as span:
        span.set_attribute("item.is_new", request.is_new_item)

        item = request.item
        async with store.lock:
            if request.is_new_item:
                catalog_entry = store.add_catalog_item(
                    item.name,
                    item.category,
                    grade=item.grade,
                    effect=item.effect,
                    description=item.description,
                    note=item.note,
                    reason=request.reason,
                )
                logger.info("Catalog item added", extra={"item_id": catalog_entry.id, "item_name": item.name})
            else:
                catalog_entry = store.get_catalog_item(item.id)

            record = store.add_item(
                catalog_entry.id,
                catalog_entry.name,
                request.quantity,
                request.location,
                request.reason,
            )

        span.set_attribute("inventory.id", record.id)
        logger.info(
            "Inventory item added",
            extra={"inventory_id": record.id, "item_id": catalog_entry.id, "quantity": request.quantity}
        )
        return to_row(record)
