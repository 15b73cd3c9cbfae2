from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional


class CatalogItem(BaseModel):
    """
    An entry of the item catalog, as returned by GET /api/search-items.
    """
    id: int
    name: str
    category: str = ""
    grade: str = ""
    effect: str = ""
    description: Optional[str] = ""

    model_config = ConfigDict(extra="ignore")


class ItemCheck(BaseModel):
    """
    Body of GET /api/check-item. item_id is -1 when the name is unknown.
    """
    exists: bool
    item_id: int = Field(default=-1, alias="itemId")

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )


class NewItemDetails(BaseModel):
    """
    The "item" part of an add-item request: a catalog id for a known item,
    or the catalog fields of a new one.
    """
    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    category: str = ""
    grade: str = ""
    effect: str = ""
    description: str = ""
    note: str = ""

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True
    )


class AddItemRequest(BaseModel):
    """
    Body of POST /api/add-item.
    """
    is_new_item: bool = Field(..., alias="isNewItem")
    item: NewItemDetails
    quantity: int = Field(..., gt=0)
    location: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True
    )

    @model_validator(mode="after")
    def _check_item_reference(self):
        if self.is_new_item and not self.item.category:
            raise ValueError("item.category is required for a new item")
        if not self.is_new_item and self.item.id is None:
            raise ValueError("item.id is required for an existing item")
        return self
