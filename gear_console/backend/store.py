import asyncio
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from gear_console.exceptions import DatabaseError, ItemAlreadyExistsError, ItemNotFoundError

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class InventoryRecord(BaseModel):
    id: int
    item_id: int
    item_name: str = ""
    quantity: int = Field(..., ge=0)
    location: str
    stored_time: datetime
    last_updated: datetime


class CatalogRecord(BaseModel):
    id: int
    name: str
    category: str
    grade: str = ""
    effect: str = ""
    description: str = ""
    note: str = ""


class OperationLogRecord(BaseModel):
    id: int
    operation_type: str
    item_name: str = ""
    operation_note: str = ""
    operation_time: datetime


class InventoryStore:
    """
    In-memory item catalog, inventory and operation log tables.

    Every change to the catalog or the inventory appends an operation log
    entry carrying the reason given by the operator. Set connected to False
    to make every call fail the way an unreachable database does.
    """

    def __init__(self, clock=None):
        self._clock = clock or (lambda: datetime.now().replace(microsecond=0))
        self._catalog: Dict[int, CatalogRecord] = {}
        self._items: Dict[int, InventoryRecord] = {}
        self._logs: List[OperationLogRecord] = []
        self._next_catalog_id = 1
        self._next_item_id = 1
        self._next_log_id = 1
        self.connected = True
        self.lock = asyncio.Lock()

    def check_connection(self) -> None:
        if not self.connected:
            raise DatabaseError("Unable to connect to the database")

    def _log(self, operation_type: str, item_name: str, note: str) -> OperationLogRecord:
        entry = OperationLogRecord(
            id=self._next_log_id,
            operation_type=operation_type,
            item_name=item_name,
            operation_note=note,
            operation_time=self._clock(),
        )
        self._next_log_id += 1
        self._logs.append(entry)
        return entry

    def find_catalog_item(self, name: str) -> Optional[CatalogRecord]:
        self.check_connection()
        needle = name.casefold()
        for record in self._catalog.values():
            if record.name.casefold() == needle:
                return record
        return None

    def get_catalog_item(self, item_id: int) -> CatalogRecord:
        self.check_connection()
        record = self._catalog.get(item_id)
        if record is None:
            raise ItemNotFoundError(f"Catalog item {item_id} not found")
        return record

    def add_catalog_item(
        self,
        name: str,
        category: str,
        grade: str = "",
        effect: str = "",
        description: str = "",
        note: str = "",
        reason: str = "",
    ) -> CatalogRecord:
        if self.find_catalog_item(name) is not None:
            raise ItemAlreadyExistsError(f"Item {name!r} is already in the catalog")
        record = CatalogRecord(
            id=self._next_catalog_id,
            name=name,
            category=category,
            grade=grade,
            effect=effect,
            description=description,
            note=note,
        )
        self._next_catalog_id += 1
        self._catalog[record.id] = record
        self._log("ADD", name, _with_reason(f"category: {category}, grade: {grade}", reason))
        return record

    def search_catalog(self, query: str, limit: int = 10) -> List[CatalogRecord]:
        """
        Catalog entries whose name contains query, ordered by name.
        """
        self.check_connection()
        needle = query.casefold()
        matches = sorted(
            (record for record in self._catalog.values() if needle in record.name.casefold()),
            key=lambda r: (r.name.casefold(), r.id),
        )
        return matches[:limit]

    def add_item(self, item_id: int, item_name: str, quantity: int, location: str, reason: str = "") -> InventoryRecord:
        self.check_connection()
        now = self._clock()
        record = InventoryRecord(
            id=self._next_item_id,
            item_id=item_id,
            item_name=item_name,
            quantity=quantity,
            location=location,
            stored_time=now,
            last_updated=now,
        )
        self._next_item_id += 1
        self._items[record.id] = record
        self._log("ADD", item_name, _with_reason(f"quantity: {quantity}, location: {location}", reason))
        return record

    def get_item(self, inventory_id: int) -> InventoryRecord:
        self.check_connection()
        record = self._items.get(inventory_id)
        if record is None:
            raise ItemNotFoundError(f"Inventory item {inventory_id} not found")
        return record

    def update_item(self, inventory_id: int, quantity: int, location: str, reason: str) -> InventoryRecord:
        record = self.get_item(inventory_id)
        updated = record.model_copy(
            update={"quantity": quantity, "location": location, "last_updated": self._clock()}
        )
        self._items[inventory_id] = updated
        self._log(
            "UPDATE",
            record.item_name,
            f"quantity {record.quantity} -> {quantity}, location {record.location} -> {location}; {reason}",
        )
        return updated

    def delete_item(self, inventory_id: int, reason: str) -> InventoryRecord:
        record = self.get_item(inventory_id)
        del self._items[inventory_id]
        self._log("DELETE", record.item_name, reason)
        return record

    def search_items(self, search: str = "") -> List[InventoryRecord]:
        self.check_connection()
        needle = search.lower()
        return [
            record
            for record in sorted(self._items.values(), key=lambda r: r.id)
            if not needle or needle in record.item_name.lower() or needle in record.location.lower()
        ]

    def search_logs(self, search: str = "") -> List[OperationLogRecord]:
        self.check_connection()
        needle = search.lower()
        return [
            entry
            for entry in sorted(self._logs, key=lambda e: (e.operation_time, e.id), reverse=True)
            if not needle or needle in entry.item_name.lower() or needle in entry.operation_note.lower()
        ]


def format_time(value: Optional[datetime]) -> Optional[str]:
    return value.strftime(TIME_FORMAT) if value is not None else None


def _with_reason(note: str, reason: str) -> str:
    return f"{note} | reason: {reason}" if reason else note
