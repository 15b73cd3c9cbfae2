from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from gear_console.client import InventoryApiClient
from gear_console.exceptions import ReportedFailure, TransportFailure, ValidationFailure
from gear_console.logging_config import get_child_logger, tracer
from gear_console.models import AddItemRequest, InventoryItemUpdate, InventoryRow, ItemCheck
from gear_console.table.dialogs import (
    AddCancelled,
    AddSubmission,
    Cancelled,
    Dialogs,
    EditCancelled,
    EditSubmission,
)
from gear_console.table.fetcher import Fetcher, FetchResult, TRANSPORT_FAILURE_MESSAGE
from gear_console.table.pagination import describe_pagination
from gear_console.table.query_state import PageQuery, QueryState, compute_total_pages
from gear_console.table.renderer import (
    DisplayRow,
    INVENTORY_COLUMNS,
    LOG_COLUMNS,
    error_row,
    render_inventory_rows,
    render_log_rows,
)

# Create a child logger for this module
logger = get_child_logger("table.controllers")

EDIT_FIELD_MESSAGES = {
    "quantity": "Quantity must be a whole number greater than 0.",
    "location": "Location must not be empty.",
    "reason": "A reason for the change is required.",
}
ADD_FIELD_MESSAGES = {
    "name": "Item name must not be empty.",
    "category": "A category is required for a new item.",
    **EDIT_FIELD_MESSAGES,
}
DELETE_REASON_REQUIRED = "A reason is required to delete an item."


class RowActionDispatcher:
    """
    Single delegated entry point for row actions of one table.

    Each render pass replaces the set of valid targets, so an action aimed
    at a row of an earlier pass is ignored instead of firing a stale handler.
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[[int], Awaitable[bool]]] = {}
        self._targets: Dict[int, tuple] = {}
        self.render_pass = 0

    def register(self, action: str, handler: Callable[[int], Awaitable[bool]]) -> None:
        self._handlers[action] = handler

    def bind(self, rows: Sequence[DisplayRow]) -> int:
        self.render_pass += 1
        self._targets = {
            row.row_id: row.actions
            for row in rows
            if row.row_id is not None and row.actions
        }
        return self.render_pass

    async def dispatch(self, action: str, row_id: int, render_pass: Optional[int] = None) -> bool:
        if render_pass is not None and render_pass != self.render_pass:
            logger.debug(
                "Ignoring action from a previous render pass",
                extra={"action": action, "row_id": row_id, "render_pass": render_pass}
            )
            return False
        if action not in self._targets.get(row_id, ()):
            return False
        handler = self._handlers.get(action)
        if handler is None:
            return False
        return await handler(row_id)


class TableController:
    """
    Query state, fetcher and renderer of one table.

    Subclasses provide _load and _render. The controller is the only place
    that mutates its QueryState.
    """

    name = "table"
    columns: Sequence[str] = ()

    def __init__(self, view, state: Optional[QueryState] = None):
        self.state = state or QueryState()
        self.view = view
        self.actions = RowActionDispatcher()
        self.records: Dict[int, object] = {}
        self._fetcher = Fetcher(
            self.name,
            self._load,
            view,
            on_success=self._present,
            on_failure=self._present_failure,
        )

    @property
    def loading(self) -> bool:
        return self._fetcher.in_flight

    async def _load(self, query: PageQuery) -> FetchResult:
        raise NotImplementedError

    def _render(self, rows: Sequence, search_term: str) -> List[DisplayRow]:
        raise NotImplementedError

    def _show(self, rows: List[DisplayRow]) -> None:
        render_pass = self.actions.bind(rows)
        self.view.render_rows(rows, render_pass)

    def _present(self, query: PageQuery, result: FetchResult) -> bool:
        clamped = self.state.apply_totals(result.total_items)
        self.view.update_pagination(describe_pagination(self.state))
        if clamped:
            logger.info(
                "Requested page is past the last page, clamping",
                extra={"table": self.name, "page": query.page, "total_pages": self.state.total_pages}
            )
            return True
        self.records = {row.id: row for row in result.rows}
        self._show(self._render(result.rows, query.search_term))
        return False

    def _present_failure(self, message: str) -> None:
        self.records = {}
        self._show([error_row(message, len(self.columns))])

    async def refresh(self) -> Optional[FetchResult]:
        """
        Fetch the current page. If the page no longer exists, fetch the
        last page instead, once.
        """
        result = await self._fetcher.fetch(self.state.query())
        if result is not None and result.clamped:
            result = await self._fetcher.fetch(self.state.query())
        return result

    async def activate(self) -> Optional[FetchResult]:
        return await self.refresh()

    async def set_page(self, page: int) -> Optional[FetchResult]:
        if not self.state.set_page(page):
            return None
        self.view.update_pagination(describe_pagination(self.state))
        return await self.refresh()

    async def next_page(self) -> Optional[FetchResult]:
        return await self.set_page(self.state.page + 1)

    async def previous_page(self) -> Optional[FetchResult]:
        return await self.set_page(self.state.page - 1)

    async def set_page_size(self, page_size: int) -> Optional[FetchResult]:
        self.state.set_page_size(page_size)
        self.view.update_pagination(describe_pagination(self.state))
        return await self.refresh()

    async def apply_search(self, search_term: str) -> Optional[FetchResult]:
        self.state.apply_search(search_term)
        return await self.refresh()

    async def dispatch(self, action: str, row_id: int, render_pass: Optional[int] = None) -> bool:
        return await self.actions.dispatch(action, row_id, render_pass)


class OperationLogTableController(TableController):
    name = "operation_logs"
    columns = LOG_COLUMNS

    def __init__(self, client: InventoryApiClient, view, state: Optional[QueryState] = None):
        self.client = client
        super().__init__(view, state)

    async def _load(self, query: PageQuery) -> FetchResult:
        page = await self.client.list_operation_logs(query.page, query.page_size, query.search_term)
        return FetchResult(
            rows=page.logs,
            total_items=page.total_items,
            total_pages=page.total_pages,
        )

    def _render(self, rows, search_term: str) -> List[DisplayRow]:
        return render_log_rows(rows, search_term)


class InventoryTableController(TableController):
    """
    Inventory table plus the add, edit and delete flows. Each flow refetches
    the current page after a successful change; rows are never patched in place.
    """

    name = "inventory"
    columns = INVENTORY_COLUMNS

    def __init__(
        self,
        client: InventoryApiClient,
        view,
        dialogs: Dialogs,
        state: Optional[QueryState] = None,
    ):
        self.client = client
        self.dialogs = dialogs
        super().__init__(view, state)
        self.actions.register("edit", self.edit_item)
        self.actions.register("delete", self.delete_item)

    async def _load(self, query: PageQuery) -> FetchResult:
        page = await self.client.list_inventory(query.page, query.page_size, query.search_term)
        return FetchResult(
            rows=page.items,
            total_items=page.total,
            total_pages=compute_total_pages(page.total, query.page_size),
        )

    def _render(self, rows, search_term: str) -> List[DisplayRow]:
        return render_inventory_rows(rows, search_term)

    @staticmethod
    def validate_edit(submission: EditSubmission) -> InventoryItemUpdate:
        """
        Raises:
            ValidationFailure: with a user-facing message for the first bad field
        """
        try:
            return InventoryItemUpdate.model_validate(submission.model_dump())
        except ValidationError as e:
            errors = e.errors()
            field = errors[0]["loc"][0] if errors and errors[0]["loc"] else None
            raise ValidationFailure(EDIT_FIELD_MESSAGES.get(field, "Invalid input.")) from e

    async def _item_for_edit(self, inventory_id: int) -> Optional[InventoryRow]:
        row = self.records.get(inventory_id)
        if row is not None:
            return row
        try:
            detail = await self.client.get_item(inventory_id)
        except ReportedFailure as e:
            await self.dialogs.alert(f"Could not load item {inventory_id}: {e.message}")
            return None
        except TransportFailure:
            await self.dialogs.alert(TRANSPORT_FAILURE_MESSAGE)
            return None
        return InventoryRow(
            id=detail.id,
            external_item_id=detail.external_item_id,
            name=detail.name,
            quantity=detail.quantity,
            location=detail.location,
        )

    async def edit_item(self, inventory_id: int) -> bool:
        """
        Run the edit flow for one item. Returns True if the item was updated.
        """
        with tracer.start_as_current_span("edit_inventory_item") as span:
            span.set_attribute("inventory.id", inventory_id)

            item = await self._item_for_edit(inventory_id)
            if item is None:
                return False

            answer = await self.dialogs.prompt_edit(item)
            if isinstance(answer, EditCancelled):
                return False

            try:
                update = self.validate_edit(answer)
            except ValidationFailure as e:
                span.set_attribute("error.type", "validation")
                await self.dialogs.alert(str(e))
                return False

            try:
                await self.client.update_item(inventory_id, update)
            except ReportedFailure as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "reported_failure")
                await self.dialogs.alert(f"Update failed: {e.message}")
                return False
            except TransportFailure:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "transport_failure")
                await self.dialogs.alert(TRANSPORT_FAILURE_MESSAGE)
                return False

            logger.info("Inventory item updated, refreshing", extra={"inventory_id": inventory_id})
            await self.refresh()
            return True

    async def delete_item(self, inventory_id: int) -> bool:
        """
        Run the delete flow for one item: reason, confirmation, request.
        Returns True if the item was deleted.
        """
        with tracer.start_as_current_span("delete_inventory_item") as span:
            span.set_attribute("inventory.id", inventory_id)

            answer = await self.dialogs.prompt_reason(f"Reason for deleting item {inventory_id}")
            if isinstance(answer, Cancelled):
                return False

            reason = answer.reason.strip()
            if not reason:
                await self.dialogs.alert(DELETE_REASON_REQUIRED)
                return False

            confirmed = await self.dialogs.confirm(
                f"Delete item {inventory_id}? This cannot be undone."
            )
            if not confirmed:
                return False

            try:
                await self.client.delete_item(inventory_id, reason)
            except ReportedFailure as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "reported_failure")
                await self.dialogs.alert(f"Delete failed: {e.message}")
                return False
            except TransportFailure:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "transport_failure")
                await self.dialogs.alert(TRANSPORT_FAILURE_MESSAGE)
                return False

            logger.info("Inventory item deleted, refreshing", extra={"inventory_id": inventory_id})
            await self.refresh()
            return True

    @staticmethod
    def validate_add(submission: AddSubmission, check: ItemCheck) -> AddItemRequest:
        """
        Build the add-item request for a catalog lookup result. A name that
        is not in the catalog yet becomes a new catalog entry.

        Raises:
            ValidationFailure: with a user-facing message for the first bad field
        """
        is_new_item = not check.exists
        item = {
            "name": submission.name,
            "category": submission.category,
            "grade": submission.grade,
            "effect": submission.effect,
            "description": submission.description,
            "note": submission.note,
        }
        if not is_new_item:
            item["id"] = check.item_id
        elif not submission.category.strip():
            raise ValidationFailure(ADD_FIELD_MESSAGES["category"])

        try:
            return AddItemRequest.model_validate({
                "isNewItem": is_new_item,
                "item": item,
                "quantity": submission.quantity,
                "location": submission.location,
                "reason": submission.reason,
            })
        except ValidationError as e:
            errors = e.errors()
            loc = errors[0]["loc"] if errors else ()
            field = loc[-1] if loc else None
            raise ValidationFailure(ADD_FIELD_MESSAGES.get(field, "Invalid input.")) from e

    async def add_item(self) -> bool:
        """
        Run the add flow: collect the values, check them, look the name up
        in the catalog and add the stock. Returns True if stock was added.
        """
        with tracer.start_as_current_span("add_inventory_item") as span:
            answer = await self.dialogs.prompt_add()
            if isinstance(answer, AddCancelled):
                return False

            name = answer.name.strip()
            try:
                if not name:
                    raise ValidationFailure(ADD_FIELD_MESSAGES["name"])
                self.validate_edit(
                    EditSubmission(quantity=answer.quantity, location=answer.location, reason=answer.reason)
                )
            except ValidationFailure as e:
                span.set_attribute("error.type", "validation")
                await self.dialogs.alert(str(e))
                return False

            try:
                check = await self.client.check_item(name)
                request = self.validate_add(answer, check)
                span.set_attribute("item.is_new", request.is_new_item)
                await self.client.add_item(request)
            except ValidationFailure as e:
                span.set_attribute("error.type", "validation")
                await self.dialogs.alert(str(e))
                return False
            except ReportedFailure as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "reported_failure")
                await self.dialogs.alert(f"Add failed: {e.message}")
                return False
            except TransportFailure:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "transport_failure")
                await self.dialogs.alert(TRANSPORT_FAILURE_MESSAGE)
                return False

            logger.info(
                "Inventory item added, refreshing",
                extra={"item_name": name, "is_new_item": request.is_new_item}
            )
            await self.refresh()
            return True
