from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List


class InventoryRow(BaseModel):
    """
    One row of the inventory table, as listed by GET /api/inventory.
    Wire names follow the backend; Python names describe the field.
    """
    id: int
    external_item_id: int = Field(..., alias="item_id")
    name: Optional[str] = Field(default=None, alias="item_name")
    quantity: int
    location: str
    stored_at: Optional[str] = Field(default=None, alias="stored_time")
    updated_at: Optional[str] = Field(default=None, alias="last_updated")

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )


class InventoryPage(BaseModel):
    """
    Response body of the inventory listing endpoint.
    """
    items: List[InventoryRow] = []
    total: int = Field(default=0, ge=0)
    page: Optional[int] = None
    per_page: Optional[int] = Field(default=None, alias="perPage")
    total_pages: Optional[int] = Field(default=None, alias="totalPages")
    error: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )


class InventoryItemDetail(BaseModel):
    """
    Single item returned by GET /api/inventory/item/{id}.
    """
    id: int = Field(..., alias="inventory_id")
    external_item_id: int = Field(..., alias="item_id")
    name: Optional[str] = Field(default=None, alias="item_name")
    quantity: int
    location: str

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )


class InventoryItemUpdate(BaseModel):
    """
    Body of PUT /api/inventory/{id}. Validated locally before submission.
    """
    quantity: int = Field(..., gt=0)
    location: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True
    )


class InventoryItemDelete(BaseModel):
    """
    Body of DELETE /api/inventory/{id}.
    """
    reason: str = Field(..., min_length=1)

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True
    )


class MutationResult(BaseModel):
    """
    Outcome body of the add, update and delete endpoints.
    """
    success: bool = False
    message: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def failure_message(self) -> str:
        return self.error or self.message or "The operation did not succeed."
