import html
import re
from datetime import datetime, tzinfo
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from gear_console.models import InventoryRow, LogRow

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"
MISSING_VALUE = "N/A"

INVENTORY_COLUMNS = (
    "ID", "Item ID", "Name", "Quantity", "Location", "Stored", "Last updated", "Actions",
)
LOG_COLUMNS = ("ID", "Operation", "Item", "Note", "Time")

INVENTORY_ACTIONS = ("edit", "delete")

EMPTY_MESSAGE = "No records found"
EMPTY_SEARCH_MESSAGE = "No records found matching '{term}'"


class RowKind(str, Enum):
    """
    DATA: a record of the current page
    EMPTY: placeholder shown when the page has no records
    ERROR: inline error shown when the fetch failed
    """

    DATA = "data"
    EMPTY = "empty"
    ERROR = "error"


class Segment(BaseModel):
    text: str
    emphasized: bool = False

    model_config = ConfigDict(frozen=True)


class Cell(BaseModel):
    """
    A table cell as a sequence of text segments; emphasized segments are
    search matches.
    """

    segments: Tuple[Segment, ...]

    model_config = ConfigDict(frozen=True)

    @classmethod
    def plain(cls, value) -> "Cell":
        return cls(segments=(Segment(text=str(value)),))

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)

    @property
    def emphasized(self) -> List[str]:
        return [segment.text for segment in self.segments if segment.emphasized]

    def markup(self) -> str:
        """HTML fragment with search matches wrapped in <mark>."""
        parts = []
        for segment in self.segments:
            escaped = html.escape(segment.text)
            parts.append(f"<mark>{escaped}</mark>" if segment.emphasized else escaped)
        return "".join(parts)


class DisplayRow(BaseModel):
    kind: RowKind = RowKind.DATA
    cells: Tuple[Cell, ...]
    row_id: Optional[int] = None
    actions: Tuple[str, ...] = ()
    colspan: int = 1
    centered: bool = False

    model_config = ConfigDict(frozen=True)


def format_timestamp(value: Optional[str], tz: Optional[tzinfo] = None) -> str:
    """
    Format a server timestamp as YYYY/MM/DD HH:MM:SS.

    Missing values render as N/A and unparseable values are returned
    unchanged. Timezone-aware values are converted to tz (local time when
    tz is None); naive values are shown as given.
    """
    if value is None or str(value).strip() == "":
        return MISSING_VALUE
    try:
        parsed = datetime.fromisoformat(str(value).strip())
    except ValueError:
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return parsed.strftime(TIMESTAMP_FORMAT)


def highlight(text: str, search_term: str) -> Tuple[Segment, ...]:
    """
    Split text into segments, emphasizing case-insensitive literal matches
    of search_term. Matches never overlap.
    """
    if not search_term or not text:
        return (Segment(text=text or ""),)

    pattern = re.compile(re.escape(search_term), re.IGNORECASE)
    segments = []
    position = 0
    for match in pattern.finditer(text):
        if match.start() > position:
            segments.append(Segment(text=text[position:match.start()]))
        segments.append(Segment(text=match.group(), emphasized=True))
        position = match.end()
    if position < len(text):
        segments.append(Segment(text=text[position:]))
    return tuple(segments)


def empty_row(search_term: str, columns: int) -> DisplayRow:
    message = EMPTY_SEARCH_MESSAGE.format(term=search_term) if search_term else EMPTY_MESSAGE
    return DisplayRow(
        kind=RowKind.EMPTY,
        cells=(Cell.plain(message),),
        colspan=columns,
        centered=True,
    )


def error_row(message: str, columns: int) -> DisplayRow:
    return DisplayRow(
        kind=RowKind.ERROR,
        cells=(Cell.plain(message),),
        colspan=columns,
        centered=True,
    )


def render_inventory_rows(
    rows: Sequence[InventoryRow], search_term: str = "", tz: Optional[tzinfo] = None
) -> List[DisplayRow]:
    if not rows:
        return [empty_row(search_term, len(INVENTORY_COLUMNS))]

    return [
        DisplayRow(
            cells=(
                Cell.plain(row.id),
                Cell.plain(row.external_item_id),
                Cell.plain(row.name or MISSING_VALUE),
                Cell.plain(row.quantity),
                Cell.plain(row.location),
                Cell.plain(format_timestamp(row.stored_at, tz)),
                Cell.plain(format_timestamp(row.updated_at, tz)),
            ),
            row_id=row.id,
            actions=INVENTORY_ACTIONS,
        )
        for row in rows
    ]


def render_log_rows(
    rows: Sequence[LogRow], search_term: str = "", tz: Optional[tzinfo] = None
) -> List[DisplayRow]:
    if not rows:
        return [empty_row(search_term, len(LOG_COLUMNS))]

    return [
        DisplayRow(
            cells=(
                Cell.plain(row.id),
                Cell.plain(row.operation_type),
                Cell(segments=highlight(row.item_name, search_term)),
                Cell(segments=highlight(row.operation_note, search_term)),
                Cell.plain(format_timestamp(row.operation_time, tz)),
            ),
            row_id=row.id,
        )
        for row in rows
    ]
