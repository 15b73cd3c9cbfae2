import sys
from typing import Dict, Optional, Protocol, TextIO, Union

from pydantic import BaseModel, ConfigDict

from gear_console.logging_config import get_child_logger
from gear_console.models import InventoryRow

logger = get_child_logger("table.dialogs")


class Confirmed(BaseModel):
    reason: str

    model_config = ConfigDict(frozen=True)


class Cancelled(BaseModel):
    model_config = ConfigDict(frozen=True)


class EditSubmission(BaseModel):
    """
    Raw values collected by the edit dialog; validated by the controller.
    """
    quantity: Union[int, str]
    location: str
    reason: str

    model_config = ConfigDict(frozen=True)


class EditCancelled(BaseModel):
    model_config = ConfigDict(frozen=True)


class AddSubmission(BaseModel):
    """
    Raw values collected by the add dialog. The catalog fields are only
    used when the name is not in the catalog yet.
    """
    name: str
    quantity: Union[int, str]
    location: str
    reason: str
    category: str = ""
    grade: str = ""
    effect: str = ""
    description: str = ""
    note: str = ""

    model_config = ConfigDict(frozen=True)


class AddCancelled(BaseModel):
    model_config = ConfigDict(frozen=True)


ReasonResult = Union[Confirmed, Cancelled]
EditResult = Union[EditSubmission, EditCancelled]
AddResult = Union[AddSubmission, AddCancelled]


class Dialogs(Protocol):
    """
    User interaction needed by the add, edit and delete flows.
    """

    async def prompt_edit(self, item: InventoryRow) -> EditResult:
        ...

    async def prompt_add(self) -> AddResult:
        ...

    async def prompt_reason(self, title: str) -> ReasonResult:
        ...

    async def confirm(self, message: str) -> bool:
        ...

    async def alert(self, message: str) -> None:
        ...


class PresetDialogs:
    """
    Non-interactive dialogs answering with values fixed up front, as given
    on the command line. Missing answers cancel the dialog.
    """

    def __init__(
        self,
        quantity: Optional[Union[int, str]] = None,
        location: Optional[str] = None,
        reason: Optional[str] = None,
        assume_yes: bool = False,
        item_name: Optional[str] = None,
        item_details: Optional[Dict[str, str]] = None,
        stream: Optional[TextIO] = None,
    ):
        self.quantity = quantity
        self.location = location
        self.reason = reason
        self.assume_yes = assume_yes
        self.item_name = item_name
        self.item_details = item_details or {}
        self.stream = stream or sys.stderr

    async def prompt_edit(self, item: InventoryRow) -> EditResult:
        if self.reason is None:
            return EditCancelled()
        return EditSubmission(
            quantity=item.quantity if self.quantity is None else self.quantity,
            location=item.location if self.location is None else self.location,
            reason=self.reason,
        )

    async def prompt_add(self) -> AddResult:
        if None in (self.item_name, self.quantity, self.location, self.reason):
            return AddCancelled()
        return AddSubmission(
            name=self.item_name,
            quantity=self.quantity,
            location=self.location,
            reason=self.reason,
            **self.item_details,
        )

    async def prompt_reason(self, title: str) -> ReasonResult:
        if self.reason is None:
            return Cancelled()
        return Confirmed(reason=self.reason)

    async def confirm(self, message: str) -> bool:
        if not self.assume_yes:
            logger.info("Confirmation declined", extra={"prompt": message})
        return self.assume_yes

    async def alert(self, message: str) -> None:
        print(message, file=self.stream)
