"""Browse session: the presentation state around the pure query pipeline.

The session owns FilterCriteria, SortCriteria and PageState and changes them
only through explicit user actions. Every read goes through `view()`, which
recomputes the page from scratch.
"""

from typing import Optional, Sequence

from ..query.models import FilterCriteria, PageState, QueryResult, SortCriteria
from ..query.pipeline import apply
from ..records.models import CutoffRecord


def parse_rank_input(text: Optional[str]) -> Optional[int]:
    """Parse a rank box value. Blank means unset."""
    if text is None or not text.strip():
        return None
    try:
        rank = int(text.strip())
    except ValueError as e:
        raise ValueError(f"Rank must be a whole number, got {text!r}") from e
    if rank < 1:
        raise ValueError(f"Rank must be at least 1, got {rank}")
    return rank


def parse_percentile_input(text: Optional[str]) -> Optional[float]:
    """Parse a percentile box value. Blank means unset."""
    if text is None or not text.strip():
        return None
    try:
        percentile = float(text.strip())
    except ValueError as e:
        raise ValueError(f"Percentile must be a number, got {text!r}") from e
    # NaN fails both comparisons
    if not 0 <= percentile <= 100:
        raise ValueError(f"Percentile must be between 0 and 100, got {text.strip()}")
    return percentile


class BrowseSession:
    """Holds one loaded dataset and the user's current query state."""

    def __init__(
        self,
        records: Sequence[CutoffRecord],
        sort: Optional[SortCriteria] = None,
    ):
        self.records = tuple(records)
        self.filters = FilterCriteria()
        self.sort = sort or SortCriteria()
        self.page = PageState()

    # Filters

    def _update_filters(self, **changes) -> None:
        self.filters = FilterCriteria(**{**self.filters.model_dump(), **changes})
        self.page = PageState()

    def set_rank_threshold(self, rank: Optional[int]) -> None:
        self._update_filters(rank_threshold=rank)

    def set_percentile_threshold(self, percentile: Optional[float]) -> None:
        self._update_filters(percentile_threshold=percentile)

    def set_search_text(self, text: Optional[str]) -> None:
        self._update_filters(search_text=text or None)

    def clear_filters(self) -> None:
        self.filters = FilterCriteria()
        self.page = PageState()

    @property
    def has_active_filters(self) -> bool:
        return self.filters.is_active

    # Sorting

    def toggle_sort(self, field: str) -> None:
        """Same field flips the order; a new field starts ascending. Always back to page 1."""
        if field == self.sort.field:
            order = "desc" if self.sort.order == "asc" else "asc"
        else:
            order = "asc"
        self.sort = SortCriteria(field=field, order=order)
        self.page = PageState()

    # Paging

    def total_pages(self) -> int:
        return self.view().total_pages

    def go_to_page(self, page_number: int) -> None:
        last_page = max(self.total_pages(), 1)
        self.page = PageState(page_number=min(max(page_number, 1), last_page))

    def next_page(self) -> None:
        self.go_to_page(self.page.page_number + 1)

    def previous_page(self) -> None:
        self.go_to_page(self.page.page_number - 1)

    def view(self) -> QueryResult:
        return apply(self.records, self.filters, self.sort, self.page)
