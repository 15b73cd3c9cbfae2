import asyncio
from typing import Any, Awaitable, Callable, List, Optional

from pydantic import BaseModel, Field

from gear_console.exceptions import ReportedFailure, TransportFailure
from gear_console.logging_config import get_child_logger, tracer
from gear_console.table.query_state import PageQuery

# Create a child logger for this module
logger = get_child_logger("table.fetcher")

TRANSPORT_FAILURE_MESSAGE = "Failed to load data, please try again."


class FetchResult(BaseModel):
    """
    Rows and totals of one successful list request.

    clamped is set when the requested page turned out to be beyond the
    last page; the rows then belong to no valid page.
    """
    rows: List[Any] = []
    total_items: int = Field(default=0, ge=0)
    total_pages: int = Field(default=1, ge=1)
    clamped: bool = False


class Fetcher:
    """
    Runs the list requests of one table controller, one at a time.

    Starting a request cancels the previous unsettled one. Only the newest
    request may touch the view: a superseded request neither renders nor
    toggles the loading indicator.

    Args:
        name: table name, used for logging and span names
        load: coroutine function turning a PageQuery into a FetchResult
        view: receives show_loading / hide_loading
        on_success: called with (query, result); returns True if the page was clamped
        on_failure: called with the message of the inline error row
    """

    def __init__(
        self,
        name: str,
        load: Callable[[PageQuery], Awaitable[FetchResult]],
        view,
        on_success: Callable[[PageQuery, FetchResult], bool],
        on_failure: Callable[[str], None],
    ):
        self.name = name
        self._load = load
        self._view = view
        self._on_success = on_success
        self._on_failure = on_failure
        self._session: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._session is not None and not self._session.done()

    async def fetch(self, query: PageQuery) -> Optional[FetchResult]:
        """
        Issue a request for query and wait for it.

        Returns the result on success, None on failure or when a newer
        request superseded this one.
        """
        previous = self._session
        if previous is not None and not previous.done():
            logger.debug(
                "Cancelling superseded request",
                extra={"table": self.name, "page": query.page}
            )
            previous.cancel()

        session = asyncio.ensure_future(self._run(query))
        self._session = session
        try:
            return await session
        except asyncio.CancelledError:
            if session.cancelled() and self._session is not session:
                return None
            raise
        finally:
            if self._session is session and session.done():
                self._session = None

    async def _run(self, query: PageQuery) -> Optional[FetchResult]:
        with tracer.start_as_current_span(f"fetch_{self.name}") as span:
            span.set_attribute("page", query.page)
            span.set_attribute("page_size", query.page_size)
            span.set_attribute("has_search_term", bool(query.search_term))

            self._view.show_loading()
            try:
                result = await self._load(query)
            except asyncio.CancelledError:
                span.set_attribute("cancelled", True)
                # cancelled by the caller rather than by a newer request
                if self._session is asyncio.current_task():
                    self._view.hide_loading()
                raise
            except ReportedFailure as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "reported_failure")

                logger.warning(
                    "Server reported a failure",
                    extra={"table": self.name, "error": e.message}
                )
                self._on_failure(e.message)
                self._view.hide_loading()
                return None
            except TransportFailure as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", "transport_failure")

                logger.error(
                    f"Error fetching {self.name} data: {e}",
                    extra={"table": self.name, "status_code": e.status_code}
                )
                self._on_failure(TRANSPORT_FAILURE_MESSAGE)
                self._view.hide_loading()
                return None

            result.clamped = self._on_success(query, result)
            span.set_attribute("rows.count", len(result.rows))
            self._view.hide_loading()
            return result
