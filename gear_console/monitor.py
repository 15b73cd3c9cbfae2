import asyncio
import contextlib
from typing import Optional

from gear_console.client import InventoryApiClient
from gear_console.exceptions import TransportFailure
from gear_console.logging_config import get_child_logger
from gear_console.models import ConnectionStatus
from gear_console.models.connection import DISCONNECTED

logger = get_child_logger("monitor")


class ConnectionMonitor:
    """
    Polls the backend connection status on a fixed interval and on demand.
    """

    def __init__(self, client: InventoryApiClient, view, interval: float = 30.0):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.client = client
        self.view = view
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check_now(self) -> ConnectionStatus:
        try:
            status = await self.client.connection_status()
        except TransportFailure as e:
            logger.warning("Connection check failed", extra={"error": str(e)})
            status = ConnectionStatus(status=DISCONNECTED, error=str(e))
        self.view.show_connection(status)
        return status

    async def _poll(self) -> None:
        while True:
            await self.check_now()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._poll())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
