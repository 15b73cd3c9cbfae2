from pydantic import BaseModel, ConfigDict

from gear_console.table.query_state import QueryState

CAPTION_TEMPLATE = "Page {page} of {total_pages} ({total_items} records)"


class PaginationView(BaseModel):
    caption: str
    prev_enabled: bool
    next_enabled: bool

    model_config = ConfigDict(frozen=True)


def describe_pagination(state: QueryState) -> PaginationView:
    """Derive the pagination bar from the query state."""
    return PaginationView(
        caption=CAPTION_TEMPLATE.format(
            page=state.page,
            total_pages=state.total_pages,
            total_items=state.total_items,
        ),
        prev_enabled=state.page > 1,
        next_enabled=state.page < state.total_pages,
    )
