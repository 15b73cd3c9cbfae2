import unittest
from datetime import datetime, timedelta

import httpx

from gear_console.backend.app import create_app
from gear_console.backend.store import InventoryStore
from gear_console.client import InventoryApiClient
from gear_console.exceptions import ApplicationError, DatabaseError, ReportedFailure, TransportFailure
from gear_console.models import AddItemRequest, InventoryItemUpdate
from gear_console.table.controllers import InventoryTableController, OperationLogTableController
from gear_console.table.dialogs import AddSubmission, Confirmed
from gear_console.table.query_state import MAX_PAGE_SIZE, QueryState
from gear_console.table.renderer import RowKind

from tests.helpers import RecordingView, ScriptedDialogs


class SteppingClock:
    """Clock advancing one minute per reading, starting 2024-01-01 10:00."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, 10, 0, 0)

    def __call__(self):
        current = self.now
        self.now += timedelta(minutes=1)
        return current


class BackendTestCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = InventoryStore(clock=SteppingClock())
        self.store.add_item(1, "Widget", 5, "Shelf A", "initial stock")
        self.store.add_item(2, "Bolt", 40, "Bin 3", "initial stock")
        self.store.add_item(3, "Wide tape", 2, "Shelf B", "initial stock")
        self.app = create_app(self.store)
        self.client = InventoryApiClient(
            "http://testserver", transport=httpx.ASGITransport(app=self.app)
        )

    async def asyncTearDown(self):
        await self.client.aclose()


class TestInventoryEndpoints(BackendTestCase):

    async def test_pagination(self):
        page = await self.client.list_inventory(2, 2)
        self.assertEqual([item.id for item in page.items], [3])
        self.assertEqual(page.total, 3)
        self.assertEqual(page.total_pages, 2)
        self.assertEqual(page.per_page, 2)

    async def test_search_matches_name_and_location(self):
        page = await self.client.list_inventory(1, 10, "shelf")
        self.assertEqual([item.name for item in page.items], ["Widget", "Wide tape"])
        page = await self.client.list_inventory(1, 10, "BOLT")
        self.assertEqual(page.total, 1)

    async def test_paging_parameters_are_clamped(self):
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=self.app), base_url="http://testserver") as http:
            response = await http.get("/api/inventory", params={"page": "0", "perPage": "500"})
            body = response.json()
            self.assertEqual(body["page"], 1)
            self.assertEqual(body["perPage"], 100)

            response = await http.get("/api/inventory", params={"page": "abc"})
            self.assertEqual(response.json()["page"], 1)

    async def test_item_detail(self):
        detail = await self.client.get_item(2)
        self.assertEqual(detail.name, "Bolt")
        self.assertEqual(detail.external_item_id, 2)
        with self.assertRaises(ReportedFailure):
            await self.client.get_item(99)

    async def test_update_records_operation_log(self):
        await self.client.update_item(1, InventoryItemUpdate(quantity=9, location="Shelf C", reason="recount"))
        detail = await self.client.get_item(1)
        self.assertEqual((detail.quantity, detail.location), (9, "Shelf C"))

        logs = await self.client.list_operation_logs(1, 10)
        self.assertEqual(logs.logs[0].operation_type, "UPDATE")
        self.assertIn("recount", logs.logs[0].operation_note)
        self.assertEqual(logs.total_items, 4)

    async def test_invalid_update_is_reported(self):
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=self.app), base_url="http://testserver") as http:
            response = await http.put("/api/inventory/1", json={"quantity": 0, "location": "A", "reason": "x"})
            self.assertEqual(response.status_code, 200)
            self.assertFalse(response.json()["success"])

            response = await http.put("/api/inventory/abc", json={"quantity": 1, "location": "A", "reason": "x"})
            self.assertEqual(response.json(), {"success": False, "error": "Invalid inventory id"})

    async def test_delete_unknown_item_is_reported(self):
        with self.assertRaises(ReportedFailure):
            await self.client.delete_item(99, "gone")

    def test_only_store_and_application_errors_have_handlers(self):
        handlers = self.app.exception_handlers
        self.assertIn(DatabaseError, handlers)
        self.assertIn(ApplicationError, handlers)
        self.assertNotIn(ValueError, handlers)

    async def test_unreachable_database(self):
        self.store.connected = False
        with self.assertRaises(TransportFailure) as ctx:
            await self.client.list_inventory(1, 10)
        self.assertEqual(ctx.exception.status_code, 500)

        status = await self.client.connection_status()
        self.assertFalse(status.connected)
        self.assertEqual(status.error, "Unable to connect to the database")


class TestOperationLogEndpoint(BackendTestCase):

    async def test_newest_first_with_formatted_time(self):
        logs = await self.client.list_operation_logs(1, 2)
        self.assertEqual([log.item_name for log in logs.logs], ["Wide tape", "Bolt"])
        self.assertEqual(logs.logs[0].operation_time, "2024-01-01 10:05:00")
        self.assertEqual(logs.total_pages, 2)

    async def test_search_matches_note(self):
        await self.client.delete_item(2, "rusted through")
        logs = await self.client.list_operation_logs(1, 10, "RUSTED")
        self.assertEqual([(log.operation_type, log.item_name) for log in logs.logs], [("DELETE", "Bolt")])


class TestControllersAgainstBackend(BackendTestCase):

    async def test_deleting_last_row_of_last_page_lands_on_previous_page(self):
        view = RecordingView()
        dialogs = ScriptedDialogs(reason_answer=Confirmed(reason="damaged"))
        controller = InventoryTableController(self.client, view, dialogs, QueryState(page_size=2))
        await controller.refresh()
        await controller.next_page()
        self.assertEqual([row.row_id for row in view.last_rows], [3])

        self.assertTrue(await controller.delete_item(3))

        self.assertEqual(controller.state.page, 1)
        self.assertEqual([row.row_id for row in view.last_rows], [1, 2])
        self.assertEqual(view.paginations[-1].caption, "Page 1 of 1 (2 records)")

    async def test_log_table_highlights_search(self):
        view = RecordingView()
        controller = OperationLogTableController(self.client, view)
        await controller.apply_search("wid")
        rows = view.last_rows
        self.assertEqual(len(rows), 2)
        self.assertTrue(all(row.kind is RowKind.DATA for row in rows))
        self.assertEqual(rows[0].cells[2].emphasized, ["Wid"])



class TestPagingThroughLargeTable(unittest.IsolatedAsyncioTestCase):

    async def test_every_row_is_reachable_at_the_largest_page_size(self):
        store = InventoryStore(clock=SteppingClock())
        for n in range(1, 251):
            store.add_item(n, f"Item {n}", 1, "Bay")
        client = InventoryApiClient("http://testserver", transport=httpx.ASGITransport(app=create_app(store)))
        self.addAsyncCleanup(client.aclose)

        view = RecordingView()
        controller = InventoryTableController(client, view, ScriptedDialogs(), QueryState(page_size=MAX_PAGE_SIZE))
        seen = []
        result = await controller.refresh()
        while result is not None:
            seen.extend(row.id for row in result.rows)
            result = await controller.next_page()

        self.assertEqual(seen, list(range(1, 251)))
        self.assertEqual(controller.state.total_pages, 3)
        self.assertEqual(view.paginations[-1].caption, "Page 3 of 3 (250 records)")

class CatalogTestCase(BackendTestCase):

    def setUp(self):
        super().setUp()
        self.rope = self.store.add_catalog_item("Climbing rope", "Tools", grade="A", reason="new supplier")
        self.store.add_catalog_item("Rope ladder", "Tools", grade="B")
        self.store.add_catalog_item("Lantern", "Light")
        self.http = httpx.AsyncClient(transport=httpx.ASGITransport(app=self.app), base_url="http://testserver")

    async def asyncTearDown(self):
        await self.http.aclose()
        await super().asyncTearDown()


class TestCatalogEndpoints(CatalogTestCase):

    async def test_check_item(self):
        check = await self.client.check_item("climbing ROPE")
        self.assertTrue(check.exists)
        self.assertEqual(check.item_id, self.rope.id)

        response = await self.http.get("/api/check-item", params={"name": "Tent"})
        self.assertEqual(response.json(), {"exists": False, "itemId": -1})

    async def test_missing_parameters_are_bad_requests(self):
        response = await self.http.get("/api/check-item")
        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.json())

        response = await self.http.get("/api/search-items")
        self.assertEqual(response.status_code, 400)

    async def test_search_items_ordered_by_name(self):
        items = await self.client.search_items("rope")
        self.assertEqual([item.name for item in items], ["Climbing rope", "Rope ladder"])
        self.assertEqual(items[0].category, "Tools")
        self.assertEqual(items[0].grade, "A")

    async def test_search_items_returns_at_most_ten(self):
        for n in range(12):
            self.store.add_catalog_item(f"Peg {n:02d}", "Camp")
        items = await self.client.search_items("peg")
        self.assertEqual(len(items), 10)
        self.assertEqual(items[0].name, "Peg 00")

    async def test_add_stock_of_existing_item(self):
        request = AddItemRequest(
            is_new_item=False,
            item={"id": self.rope.id, "name": "Climbing rope"},
            quantity=4,
            location="Wall",
            reason="delivery",
        )
        result = await self.client.add_item(request)
        self.assertTrue(result.success)

        page = await self.client.list_inventory(1, 10, "climbing")
        self.assertEqual([(item.name, item.quantity, item.location) for item in page.items], [("Climbing rope", 4, "Wall")])
        self.assertEqual(page.items[0].external_item_id, self.rope.id)

        logs = await self.client.list_operation_logs(1, 1)
        self.assertEqual(logs.logs[0].operation_type, "ADD")
        self.assertEqual(logs.logs[0].operation_note, "quantity: 4, location: Wall | reason: delivery")

    async def test_add_new_item_registers_it_in_the_catalog(self):
        response = await self.http.post("/api/add-item", json={
            "isNewItem": True,
            "item": {"name": "Tent", "category": "Camp", "grade": "S", "effect": "",
                     "description": "Two person", "note": ""},
            "quantity": 2,
            "location": "Shelf D",
            "reason": "first order",
        })
        self.assertEqual(response.json(), {"success": True})

        check = await self.client.check_item("Tent")
        self.assertTrue(check.exists)

        logs = await self.client.list_operation_logs(1, 2, "tent")
        self.assertEqual(
            [log.operation_note for log in logs.logs],
            [
                "quantity: 2, location: Shelf D | reason: first order",
                "category: Camp, grade: S | reason: first order",
            ],
        )

    async def test_new_item_with_taken_name_is_reported(self):
        request = AddItemRequest(
            is_new_item=True,
            item={"name": "Lantern", "category": "Light"},
            quantity=1,
            location="A",
            reason="dup",
        )
        with self.assertRaises(ReportedFailure):
            await self.client.add_item(request)
        page = await self.client.list_inventory(1, 10, "lantern")
        self.assertEqual(page.total, 0)

    async def test_unknown_catalog_id_is_reported(self):
        response = await self.http.post("/api/add-item", json={
            "isNewItem": False, "item": {"id": 999, "name": "Ghost"},
            "quantity": 1, "location": "A", "reason": "x",
        })
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["success"])
        self.assertIn("message", response.json())

    async def test_malformed_add_request_is_bad_request(self):
        response = await self.http.post("/api/add-item", json={
            "isNewItem": True, "item": {"name": "Tent", "category": "Camp"},
            "quantity": 0, "location": "A", "reason": "x",
        })
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertTrue(response.json()["message"].startswith("quantity"))

    async def test_unreachable_database(self):
        self.store.connected = False
        response = await self.http.get("/api/check-item", params={"name": "Tent"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Unable to connect to the database"})


class TestAddFlowAgainstBackend(CatalogTestCase):

    async def test_new_item_is_added_and_table_refetched(self):
        view = RecordingView()
        dialogs = ScriptedDialogs(add_answer=AddSubmission(
            name="Tent", quantity="2", location="Shelf D", reason="first order", category="Camp",
        ))
        controller = InventoryTableController(self.client, view, dialogs)
        await controller.refresh()

        self.assertTrue(await controller.add_item())

        self.assertEqual(dialogs.alerts, [])
        self.assertEqual(view.last_rows[-1].cells[2].text, "Tent")
        self.assertEqual(view.paginations[-1].caption, "Page 1 of 1 (4 records)")
        self.assertTrue((await self.client.check_item("Tent")).exists)


if __name__ == "__main__":
    unittest.main()
