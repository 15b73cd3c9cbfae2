from typing import Optional

from fastapi import APIRouter, Depends, Query

from gear_console.backend.crud.inventory_crud import DEFAULT_PER_PAGE
from gear_console.backend.crud.operation_log_crud import list_operation_logs
from gear_console.backend.dependencies import get_store, parse_int
from gear_console.backend.store import InventoryStore
from gear_console.exceptions import DatabaseError
from gear_console.logging_config import get_child_logger
from gear_console.models import ConnectionStatus, OperationLogPage
from gear_console.models.connection import CONNECTED, DISCONNECTED

logger = get_child_logger("backend.routes.operation_log")

router = APIRouter(prefix="/api", tags=["operation-logs"])


@router.get("/operation_logs", response_model=OperationLogPage, response_model_exclude_none=True)
async def get_operation_logs(
    page: Optional[str] = Query(None, title="Page number, starting at 1"),
    per_page: Optional[str] = Query(None, alias="perPage", title="Rows per page"),
    search: str = Query("", title="Substring of item name or note"),
    store: InventoryStore = Depends(get_store),
):
    return await list_operation_logs(
        store, parse_int(page, 1), parse_int(per_page, DEFAULT_PER_PAGE), search
    )


@router.get("/connection-status", response_model=ConnectionStatus, response_model_exclude_none=True)
async def get_connection_status(store: InventoryStore = Depends(get_store)):
    try:
        store.check_connection()
    except DatabaseError as e:
        logger.warning("Database connection check failed", extra={"error": str(e)})
        return ConnectionStatus(status=DISCONNECTED, error=str(e))
    return ConnectionStatus(status=CONNECTED, message="Database connection OK")
