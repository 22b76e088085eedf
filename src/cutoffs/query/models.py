"""Query inputs and outputs for the cutoff pipeline."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from cutoffs.records.models import CutoffRecord

PAGE_SIZE = 20

SORTABLE_FIELDS = ("rank", "percentile")


class FilterCriteria(BaseModel):
    """User filters. Unset fields do not filter."""

    model_config = ConfigDict(frozen=True)

    rank_threshold: Optional[int] = Field(default=None, ge=1, description="Keep rows with rank >= this")
    percentile_threshold: Optional[float] = Field(
        default=None, ge=0, le=100, allow_inf_nan=False, description="Keep rows with percentile <= this"
    )
    search_text: Optional[str] = Field(default=None, description="Institute/course substring")

    @property
    def has_thresholds(self) -> bool:
        return self.rank_threshold is not None or self.percentile_threshold is not None

    @property
    def search_term(self) -> str:
        """Normalized search term; empty string means no search."""
        return (self.search_text or "").strip().lower()

    @property
    def is_active(self) -> bool:
        return self.has_thresholds or bool(self.search_text)


class SortCriteria(BaseModel):
    """Sort key and direction. Fields outside SORTABLE_FIELDS leave order unchanged."""

    model_config = ConfigDict(frozen=True)

    field: str = "rank"
    order: Literal["asc", "desc"] = "asc"


class PageState(BaseModel):
    """1-based page number with a fixed page size."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(default=1, ge=1)
    page_size: int = Field(default=PAGE_SIZE, ge=1)


class QueryResult(BaseModel):
    """One rendered page of the filtered, sorted dataset."""

    visible: List[CutoffRecord]
    total_matches: int
    total_pages: int
    page_number: int
    page_size: int = PAGE_SIZE

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def is_empty(self) -> bool:
        return self.total_matches == 0
