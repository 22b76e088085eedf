"""Cutoffs API: canonical query surface for cutoff data."""

from typing import Optional, Sequence

from ..query.models import FilterCriteria, PageState, QueryResult, SortCriteria
from ..query.pipeline import apply
from ..records.models import CutoffRecord


def build_filters(
    rank: Optional[int] = None,
    percentile: Optional[float] = None,
    search: Optional[str] = None,
) -> FilterCriteria:
    """Build FilterCriteria, treating blank search text as unset."""
    search_text = search if search and search.strip() else None
    return FilterCriteria(rank_threshold=rank, percentile_threshold=percentile, search_text=search_text)


def query_cutoffs(
    records: Sequence[CutoffRecord],
    rank: Optional[int] = None,
    percentile: Optional[float] = None,
    search: Optional[str] = None,
    sort_field: str = "rank",
    sort_order: str = "asc",
    page: int = 1,
) -> QueryResult:
    """
    Query cutoff records with optional filters.

    Args:
        records: Full dataset
        rank: Keep rows with rank >= this (OR-combined with percentile)
        percentile: Keep rows with percentile <= this (OR-combined with rank)
        search: Case-insensitive institute/course substring
        sort_field: "rank" or "percentile"
        sort_order: "asc" or "desc"
        page: 1-based page number (not clamped)

    Returns:
        QueryResult for the requested page
    """
    return apply(
        records,
        build_filters(rank=rank, percentile=percentile, search=search),
        SortCriteria(field=sort_field, order=sort_order),
        PageState(page_number=page),
    )


def summarize(result: QueryResult) -> str:
    """One-line result summary for display."""
    if result.is_empty:
        return "No results found"
    return f"Showing {len(result.visible)} of {result.total_matches}"


def page_label(result: QueryResult) -> str:
    return f"Page {result.page_number} of {max(result.total_pages, 1)}"
