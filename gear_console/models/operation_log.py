from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

SUCCESS_STATUS = "success"


class LogRow(BaseModel):
    """
    One entry of the operation log table.
    """
    id: int
    operation_type: str = ""
    item_name: str = ""
    operation_note: str = ""
    operation_time: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class OperationLogPage(BaseModel):
    """
    Response body of GET /api/operation_logs. Any status other than
    "success" is a failure reported by the server.
    """
    status: str = ""
    logs: List[LogRow] = []
    total_items: int = Field(default=0, ge=0, alias="totalItems")
    total_pages: int = Field(default=1, ge=1, alias="totalPages")
    page: Optional[int] = None
    per_page: Optional[int] = Field(default=None, alias="perPage")
    message: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS and self.error is None
