from gear_console.backend.crud.inventory_crud import normalize_paging, paginate
from gear_console.backend.store import InventoryStore, format_time
from gear_console.logging_config import get_child_logger, tracer
from gear_console.models import LogRow, OperationLogPage
from gear_console.models.operation_log import SUCCESS_STATUS
from gear_console.table.query_state import compute_total_pages

logger = get_child_logger("backend.crud.operation_log")


async def list_operation_logs(store: InventoryStore, page: int, per_page: int, search: str = "") -> OperationLogPage:
    """
    Retrieve one page of operation log entries, newest first.
    """
    page, per_page = normalize_paging(page, per_page)

    with tracer.start_as_current_span("list_operation_logs") as span:
        span.set_attribute("page", page)
        span.set_attribute("per_page", per_page)

        async with store.lock:
            matches = store.search_logs(search)

        logs = [
            LogRow(
                id=entry.id,
                operation_type=entry.operation_type,
                item_name=entry.item_name,
                operation_note=entry.operation_note,
                operation_time=format_time(entry.operation_time),
            )
            for entry in paginate(matches, page, per_page)
        ]
        span.set_attribute("logs.count", len(logs))
        logger.info(f"Retrieved {len(logs)} operation logs", extra={"count": len(logs), "search": search})

        return OperationLogPage(
            status=SUCCESS_STATUS,
            logs=logs,
            total_items=len(matches),
            total_pages=compute_total_pages(len(matches), per_page),
            page=page,
            per_page=per_page,
        )
