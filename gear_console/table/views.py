import sys
from typing import Optional, Protocol, Sequence, TextIO

from gear_console.models import ConnectionStatus
from gear_console.table.pagination import PaginationView
from gear_console.table.renderer import DisplayRow, RowKind


class TableView(Protocol):
    """
    Presentation side of one table. Loading state is per table.
    """

    def show_loading(self) -> None:
        ...

    def hide_loading(self) -> None:
        ...

    def render_rows(self, rows: Sequence[DisplayRow], render_pass: int) -> None:
        ...

    def update_pagination(self, pagination: PaginationView) -> None:
        ...


class ConnectionView(Protocol):
    def show_connection(self, status: ConnectionStatus) -> None:
        ...


class TextTableView:
    """
    Plain-text table written to a stream, used by the command line.
    """

    def __init__(self, headers: Sequence[str], stream: Optional[TextIO] = None):
        self.headers = tuple(headers)
        self.stream = stream or sys.stdout
        self.loading = False
        self.render_pass = 0
        self.pagination: Optional[PaginationView] = None

    def show_loading(self) -> None:
        self.loading = True

    def hide_loading(self) -> None:
        self.loading = False

    def render_rows(self, rows: Sequence[DisplayRow], render_pass: int) -> None:
        self.render_pass = render_pass
        print(" | ".join(self.headers), file=self.stream)
        for row in rows:
            if row.kind is RowKind.DATA:
                cells = [cell.text for cell in row.cells]
                if row.actions:
                    cells.append("/".join(row.actions))
                print(" | ".join(cells), file=self.stream)
            else:
                print(row.cells[0].text, file=self.stream)

    def update_pagination(self, pagination: PaginationView) -> None:
        self.pagination = pagination

    def show_connection(self, status: ConnectionStatus) -> None:
        if status.connected:
            print(f"connected {status.message or ''}".rstrip(), file=self.stream)
        else:
            print(f"disconnected: {status.error or 'unknown error'}", file=self.stream)
