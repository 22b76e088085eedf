"""Query pipeline: threshold filter -> text search -> sort -> paginate.

Pure and deterministic. The same inputs always produce the same page, and the
input sequence is never modified, so it is safe to recompute on every change.
"""

import math
from typing import List, Optional, Sequence

from cutoffs.query.models import (
    PAGE_SIZE,
    SORTABLE_FIELDS,
    FilterCriteria,
    PageState,
    QueryResult,
    SortCriteria,
)
from cutoffs.records.models import CutoffRecord


def passes_thresholds(record: CutoffRecord, filters: FilterCriteria) -> bool:
    """
    Inclusive OR across whichever thresholds are set.

    A record is kept if percentile <= percentile_threshold, OR rank >= rank_threshold.
    With no thresholds set every record passes.
    """
    if not filters.has_thresholds:
        return True

    matches = False
    if filters.percentile_threshold is not None:
        matches = matches or record.percentile <= filters.percentile_threshold
    if filters.rank_threshold is not None:
        matches = matches or record.rank >= filters.rank_threshold
    return matches


def matches_search(record: CutoffRecord, term: str) -> bool:
    """Case-insensitive substring match on institute or course name. `term` is pre-lowered."""
    if not term:
        return True
    institute = (record.institute_name or "").lower()
    course = (record.course_name or "").lower()
    return term in institute or term in course


def sort_records(records: Sequence[CutoffRecord], sort: SortCriteria) -> List[CutoffRecord]:
    """Stable numeric sort. Unknown fields keep the incoming order."""
    if sort.field not in SORTABLE_FIELDS:
        return list(records)
    # reverse=True keeps equal keys in their original relative order
    return sorted(records, key=lambda r: getattr(r, sort.field), reverse=sort.order == "desc")


def count_pages(total_matches: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total_matches / page_size) if total_matches > 0 else 0


def paginate(records: Sequence[CutoffRecord], page: PageState) -> List[CutoffRecord]:
    """Slice one 1-based page. Pages past the end are empty; no clamping here."""
    start = (page.page_number - 1) * page.page_size
    return list(records[start:start + page.page_size])


def filter_records(records: Sequence[CutoffRecord], filters: FilterCriteria) -> List[CutoffRecord]:
    """Stage 1 then stage 2, in dataset order."""
    filtered = [r for r in records if passes_thresholds(r, filters)]
    term = filters.search_term
    if term:
        filtered = [r for r in filtered if matches_search(r, term)]
    return filtered


def apply(
    records: Sequence[CutoffRecord],
    filters: Optional[FilterCriteria] = None,
    sort: Optional[SortCriteria] = None,
    page: Optional[PageState] = None,
) -> QueryResult:
    """
    Run the full pipeline over the in-memory dataset.

    Args:
        records: Full dataset in load order
        filters: Threshold and search criteria (default: none)
        sort: Sort field and order (default: rank ascending)
        page: Page number and size (default: page 1 of 20)

    Returns:
        QueryResult with the visible page, total match count, and total pages
    """
    filters = filters or FilterCriteria()
    sort = sort or SortCriteria()
    page = page or PageState()

    matched = sort_records(filter_records(records, filters), sort)
    total_matches = len(matched)

    return QueryResult(
        visible=paginate(matched, page),
        total_matches=total_matches,
        total_pages=count_pages(total_matches, page.page_size),
        page_number=page.page_number,
        page_size=page.page_size,
    )
