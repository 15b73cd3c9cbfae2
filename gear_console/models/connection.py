from pydantic import BaseModel, ConfigDict
from typing import Optional

CONNECTED = "connected"
DISCONNECTED = "disconnected"


class ConnectionStatus(BaseModel):
    """
    Body of GET /api/connection-status.
    """
    status: str
    message: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def connected(self) -> bool:
        return self.status == CONNECTED
