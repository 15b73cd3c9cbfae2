"""
Table Package

Paginated query state, fetcher, renderer and controllers for the
inventory and operation log tables.
"""

from gear_console.table.controllers import (
    InventoryTableController,
    OperationLogTableController,
    RowActionDispatcher,
    TableController,
)
from gear_console.table.pagination import PaginationView, describe_pagination
from gear_console.table.query_state import PageQuery, QueryState, compute_total_pages

__all__ = [
    'InventoryTableController',
    'OperationLogTableController',
    'RowActionDispatcher',
    'TableController',
    'PaginationView',
    'describe_pagination',
    'PageQuery',
    'QueryState',
    'compute_total_pages',
]
