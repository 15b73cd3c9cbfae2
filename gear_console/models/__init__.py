"""
Models Package

Pydantic models for the request and response bodies of the inventory API.
"""

from gear_console.models.inventory_item import (
    InventoryRow,
    InventoryPage,
    InventoryItemDetail,
    InventoryItemUpdate,
    InventoryItemDelete,
    MutationResult,
)
from gear_console.models.operation_log import LogRow, OperationLogPage
from gear_console.models.connection import ConnectionStatus
from gear_console.models.catalog import AddItemRequest, CatalogItem, ItemCheck, NewItemDetails

__all__ = [
    'InventoryRow',
    'InventoryPage',
    'InventoryItemDetail',
    'InventoryItemUpdate',
    'InventoryItemDelete',
    'MutationResult',
    'LogRow',
    'OperationLogPage',
    'ConnectionStatus',
    'AddItemRequest',
    'CatalogItem',
    'ItemCheck',
    'NewItemDetails',
]
