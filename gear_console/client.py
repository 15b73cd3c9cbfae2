from typing import Any, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from gear_console.config import Settings
from gear_console.exceptions import ReportedFailure, TransportFailure
from gear_console.logging_config import get_child_logger, tracer
from gear_console.models import (
    AddItemRequest,
    CatalogItem,
    ConnectionStatus,
    InventoryItemDelete,
    InventoryItemDetail,
    InventoryItemUpdate,
    InventoryPage,
    ItemCheck,
    MutationResult,
    OperationLogPage,
)

# Create a child logger for this module
logger = get_child_logger("client")


class InventoryApiClient:
    """
    Thin async client for the inventory backend.

    Every call either returns a validated model or raises one of:
        ReportedFailure: the server answered with a well-formed failure body
        TransportFailure: network error, non-2xx status or undecodable body

    asyncio.CancelledError is never translated; a cancelled call simply
    propagates the cancellation to its awaiting task.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        return cls(settings.base_url, timeout=settings.timeout, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        with tracer.start_as_current_span("api_request") as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.route", path)

            logger.debug(
                f"Sending {method} {path}",
                extra={"method": method, "path": path, "params": params}
            )

            try:
                response = await self._http.request(method, path, params=params, json=json)
            except httpx.HTTPError as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", type(e).__name__)

                logger.warning(
                    "Transport error",
                    extra={"method": method, "path": path, "error_type": type(e).__name__}
                )
                raise TransportFailure(
                    f"Request {method} {path} failed: {e}",
                    original_exception=e,
                ) from e

            span.set_attribute("http.status_code", response.status_code)

            if response.is_error:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "http_status")

                logger.warning(
                    "Non-success HTTP status",
                    extra={"method": method, "path": path, "status_code": response.status_code}
                )
                raise TransportFailure(
                    f"Request {method} {path} returned HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                return response.json()
            except ValueError as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "decode_error")
                raise TransportFailure(
                    f"Response of {method} {path} is not valid JSON",
                    original_exception=e,
                    status_code=response.status_code,
                ) from e

    @staticmethod
    def _parse(model, body: Any, path: str):
        try:
            validate = model.validate_python if isinstance(model, TypeAdapter) else model.model_validate
            return validate(body)
        except ValidationError as e:
            logger.debug(f"Pydantic validation errors: {e.errors()}")
            raise TransportFailure(
                f"Response of {path} has an unexpected shape",
                original_exception=e,
            ) from e

    async def list_inventory(self, page: int, per_page: int, search: str = "") -> InventoryPage:
        """
        Retrieve one page of inventory rows.
        """
        path = "/api/inventory"
        body = await self._request(
            "GET", path, params={"page": page, "perPage": per_page, "search": search}
        )
        if isinstance(body, dict) and body.get("error"):
            raise ReportedFailure(str(body["error"]))

        result = self._parse(InventoryPage, body, path)
        logger.info(f"Retrieved {len(result.items)} inventory rows", extra={"count": len(result.items)})
        return result

    async def get_item(self, inventory_id: int) -> InventoryItemDetail:
        """
        Retrieve a single inventory record.

        Raises:
            ReportedFailure: If the server answers with an error body (e.g. unknown id)
        """
        path = f"/api/inventory/item/{inventory_id}"
        body = await self._request("GET", path)
        if isinstance(body, dict) and body.get("error"):
            raise ReportedFailure(str(body["error"]))
        return self._parse(InventoryItemDetail, body, path)

    async def update_item(self, inventory_id: int, update: InventoryItemUpdate) -> MutationResult:
        """
        Update quantity and location of an inventory record.

        Raises:
            ReportedFailure: If the server answers with success = false
        """
        path = f"/api/inventory/{inventory_id}"
        body = await self._request("PUT", path, json=update.model_dump())
        result = self._parse(MutationResult, body, path)
        if not result.success:
            raise ReportedFailure(result.failure_message)

        logger.info("Inventory item updated", extra={"inventory_id": inventory_id})
        return result

    async def delete_item(self, inventory_id: int, reason: str) -> MutationResult:
        """
        Delete an inventory record, recording the reason.

        Raises:
            ReportedFailure: If the server answers with success = false
        """
        path = f"/api/inventory/{inventory_id}"
        payload = InventoryItemDelete(reason=reason)
        body = await self._request("DELETE", path, json=payload.model_dump())
        result = self._parse(MutationResult, body, path)
        if not result.success:
            raise ReportedFailure(result.failure_message)

        logger.info("Inventory item deleted", extra={"inventory_id": inventory_id})
        return result

    async def list_operation_logs(self, page: int, per_page: int, search: str = "") -> OperationLogPage:
        """
        Retrieve one page of operation log entries.

        Raises:
            ReportedFailure: If the body status is anything other than "success"
        """
        path = "/api/operation_logs"
        body = await self._request(
            "GET", path, params={"page": page, "perPage": per_page, "search": search}
        )
        result = self._parse(OperationLogPage, body, path)
        if not result.succeeded:
            raise ReportedFailure(result.message or result.error or "Failed to load operation logs.")

        logger.info(f"Retrieved {len(result.logs)} operation logs", extra={"count": len(result.logs)})
        return result

    async def connection_status(self) -> ConnectionStatus:
        path = "/api/connection-status"
        body = await self._request("GET", path)
        return self._parse(ConnectionStatus, body, path)

    async def check_item(self, name: str) -> ItemCheck:
        """
        Look an item name up in the catalog.
        """
        path = "/api/check-item"
        body = await self._request("GET", path, params={"name": name})
        if isinstance(body, dict) and body.get("error"):
            raise ReportedFailure(str(body["error"]))
        return self._parse(ItemCheck, body, path)

    async def search_items(self, query: str) -> List[CatalogItem]:
        """
        Retrieve up to ten catalog items whose name contains query.
        """
        path = "/api/search-items"
        body = await self._request("GET", path, params={"q": query})
        if isinstance(body, dict) and body.get("error"):
            raise ReportedFailure(str(body["error"]))
        return self._parse(_CATALOG_ITEMS, body, path)

    async def add_item(self, request: AddItemRequest) -> MutationResult:
        """
        Add stock of a catalog item, creating the catalog entry first when
        request.is_new_item is set.

        Raises:
            ReportedFailure: If the server answers with success = false
        """
        path = "/api/add-item"
        body = await self._request(
            "POST", path, json=request.model_dump(by_alias=True, exclude_none=True)
        )
        result = self._parse(MutationResult, body, path)
        if not result.success:
            raise ReportedFailure(result.failure_message)

        logger.info("Inventory item added", extra={"item_name": request.item.name})
        return result


_CATALOG_ITEMS = TypeAdapter(List[CatalogItem])
