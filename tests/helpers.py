"""
Shared fakes for the table and client tests.
"""

import json

import httpx

from gear_console.client import InventoryApiClient
from gear_console.table.dialogs import AddCancelled, Cancelled, EditCancelled

BASE_URL = "http://inventory.test"


class RecordingView:
    """TableView and ConnectionView that records every call."""

    def __init__(self):
        self.loading = False
        self.show_calls = 0
        self.hide_calls = 0
        self.renders = []
        self.paginations = []
        self.connections = []

    def show_loading(self):
        self.show_calls += 1
        self.loading = True

    def hide_loading(self):
        self.hide_calls += 1
        self.loading = False

    def render_rows(self, rows, render_pass):
        self.renders.append((list(rows), render_pass))

    def update_pagination(self, pagination):
        self.paginations.append(pagination)

    def show_connection(self, status):
        self.connections.append(status)

    @property
    def last_rows(self):
        return self.renders[-1][0]


class ScriptedDialogs:
    """Dialogs answering with preset results and recording what was shown."""

    def __init__(self, edit_answer=None, reason_answer=None, confirm_answer=True, add_answer=None):
        self.edit_answer = edit_answer or EditCancelled()
        self.add_answer = add_answer or AddCancelled()
        self.add_prompts = 0
        self.reason_answer = reason_answer or Cancelled()
        self.confirm_answer = confirm_answer
        self.edit_prompts = []
        self.reason_prompts = []
        self.confirm_prompts = []
        self.alerts = []

    async def prompt_edit(self, item):
        self.edit_prompts.append(item)
        return self.edit_answer

    async def prompt_add(self):
        self.add_prompts += 1
        return self.add_answer

    async def prompt_reason(self, title):
        self.reason_prompts.append(title)
        return self.reason_answer

    async def confirm(self, message):
        self.confirm_prompts.append(message)
        return self.confirm_answer

    async def alert(self, message):
        self.alerts.append(message)


class FakeBackend:
    """
    httpx.MockTransport handler answering from a route table and keeping
    every request it saw.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get((request.method, request.url.path))
        if answer is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if callable(answer):
            answer = answer(request)
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    def matching(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def client(self) -> InventoryApiClient:
        return InventoryApiClient(BASE_URL, transport=httpx.MockTransport(self))


def request_json(request: httpx.Request):
    return json.loads(request.content)


def inventory_item(inventory_id, name="Widget", quantity=5, location="A1"):
    return {
        "id": inventory_id,
        "item_id": 100 + inventory_id,
        "item_name": name,
        "quantity": quantity,
        "location": location,
        "stored_time": "2024-01-01 09:00:00",
        "last_updated": "2024-01-02 09:00:00",
    }
