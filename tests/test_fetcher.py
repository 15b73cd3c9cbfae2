import asyncio
import unittest

from gear_console.exceptions import ReportedFailure, TransportFailure
from gear_console.table.fetcher import Fetcher, FetchResult, TRANSPORT_FAILURE_MESSAGE
from gear_console.table.query_state import PageQuery

from tests.helpers import RecordingView


class GatedLoader:
    """Loader whose requests complete only when the test releases them."""

    def __init__(self):
        self.started = {}
        self.gates = {}
        self.outcomes = {}

    def prepare(self, page, outcome=None):
        self.started[page] = asyncio.Event()
        self.gates[page] = asyncio.Event()
        self.outcomes[page] = outcome

    async def __call__(self, query: PageQuery) -> FetchResult:
        self.started[query.page].set()
        await self.gates[query.page].wait()
        outcome = self.outcomes[query.page]
        if isinstance(outcome, Exception):
            raise outcome
        return FetchResult(rows=[f"row-{query.page}"], total_items=1)


class TestFetcher(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.view = RecordingView()
        self.loader = GatedLoader()
        self.successes = []
        self.failures = []
        self.fetcher = Fetcher(
            "test",
            self.loader,
            self.view,
            on_success=lambda query, result: self.successes.append((query.page, result.rows)) or False,
            on_failure=self.failures.append,
        )

    def query(self, page):
        return PageQuery(page=page, page_size=10)

    async def test_success_shows_and_clears_loading_once(self):
        self.loader.prepare(1)
        self.loader.gates[1].set()
        result = await self.fetcher.fetch(self.query(1))
        self.assertEqual(result.rows, ["row-1"])
        self.assertEqual(self.successes, [(1, ["row-1"])])
        self.assertEqual((self.view.show_calls, self.view.hide_calls), (1, 1))
        self.assertFalse(self.fetcher.in_flight)

    async def test_newer_request_supersedes_older_one(self):
        self.loader.prepare(1)
        self.loader.prepare(2)

        first = asyncio.create_task(self.fetcher.fetch(self.query(1)))
        await self.loader.started[1].wait()
        second = asyncio.create_task(self.fetcher.fetch(self.query(2)))
        await self.loader.started[2].wait()

        self.loader.gates[2].set()
        self.loader.gates[1].set()

        self.assertIsNone(await first)
        self.assertEqual((await second).rows, ["row-2"])
        self.assertEqual(self.successes, [(2, ["row-2"])])
        self.assertEqual(self.failures, [])
        self.assertEqual(self.view.show_calls, 2)
        self.assertEqual(self.view.hide_calls, 1)

    async def test_reported_failure_uses_server_message(self):
        self.loader.prepare(1, ReportedFailure("database busy"))
        self.loader.gates[1].set()
        self.assertIsNone(await self.fetcher.fetch(self.query(1)))
        self.assertEqual(self.failures, ["database busy"])
        self.assertEqual(self.view.hide_calls, 1)

    async def test_transport_failure_uses_generic_message(self):
        self.loader.prepare(1, TransportFailure("connection refused"))
        self.loader.gates[1].set()
        self.assertIsNone(await self.fetcher.fetch(self.query(1)))
        self.assertEqual(self.failures, [TRANSPORT_FAILURE_MESSAGE])
        self.assertEqual(self.successes, [])
        self.assertEqual(self.view.hide_calls, 1)

    async def test_cancelling_the_caller_still_clears_loading(self):
        self.loader.prepare(1)
        task = asyncio.create_task(self.fetcher.fetch(self.query(1)))
        await self.loader.started[1].wait()
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertEqual(self.view.hide_calls, 1)
        self.assertEqual(self.successes, [])
        self.assertFalse(self.fetcher.in_flight)


if __name__ == "__main__":
    unittest.main()
