import math

from pydantic import BaseModel, ConfigDict, Field

from gear_console.config import MAX_PAGE_SIZE


def compute_total_pages(total_items: int, page_size: int) -> int:
    """Number of pages needed for total_items; never less than one."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(max(total_items, 0) / page_size))


class PageQuery(BaseModel):
    """
    Immutable snapshot of the parameters of one list request.
    """
    page: int = Field(..., ge=1)
    page_size: int = Field(..., gt=0, le=MAX_PAGE_SIZE)
    search_term: str = ""

    model_config = ConfigDict(frozen=True)


class QueryState(BaseModel):
    """
    Page, page size, search term and totals of one table controller.

    Mutators return True when the caller should refetch.
    """
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, gt=0, le=MAX_PAGE_SIZE)
    search_term: str = ""
    total_items: int = Field(default=0, ge=0)
    total_pages: int = Field(default=1, ge=1)

    model_config = ConfigDict(validate_assignment=True)

    def query(self) -> PageQuery:
        return PageQuery(page=self.page, page_size=self.page_size, search_term=self.search_term)

    def set_page(self, page: int) -> bool:
        clamped = min(max(page, 1), self.total_pages)
        if clamped == self.page:
            return False
        self.page = clamped
        return True

    def next_page(self) -> bool:
        return self.set_page(self.page + 1)

    def previous_page(self) -> bool:
        return self.set_page(self.page - 1)

    def set_page_size(self, page_size: int) -> bool:
        if not 0 < page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        self.page_size = page_size
        self.page = 1
        # totals are stale until the next fetch; keep total_pages consistent
        self.total_pages = compute_total_pages(self.total_items, page_size)
        return True

    def apply_search(self, search_term: str) -> bool:
        self.search_term = search_term
        self.page = 1
        return True

    def apply_totals(self, total_items: int) -> bool:
        """
        Record the totals reported by a successful fetch.

        Returns True when the current page was beyond the new last page and
        had to be clamped.
        """
        self.total_items = max(total_items, 0)
        self.total_pages = compute_total_pages(self.total_items, self.page_size)
        if self.page > self.total_pages:
            self.page = self.total_pages
            return True
        return False
