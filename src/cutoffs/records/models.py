"""Cutoff record model and the load-boundary parser."""

from typing import Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cutoffs.errors import MalformedPayload
from cutoffs.utils.logging import get_logger

logger = get_logger(__name__)

# Inbound key for each field, exactly as the dataset spells it.
FIELD_ALIASES = {
    "rank": "Rank",
    "percentile": "Percentile",
    "choice_code": "Choice Code",
    "institute_name": "Institute Name",
    "course_name": "Course Name",
    "category": "Type",
}


class CutoffRecord(BaseModel):
    """One admissions cutoff row. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rank: int = Field(..., alias="Rank", ge=1, description="Dataset-assigned merit rank")
    percentile: float = Field(
        ..., alias="Percentile", ge=0, le=100, allow_inf_nan=False, description="Closing percentile, 0-100"
    )
    choice_code: str = Field(default="", alias="Choice Code")
    institute_name: str = Field(default="", alias="Institute Name")
    course_name: str = Field(default="", alias="Course Name")
    category: str = Field(default="", alias="Type")

    @field_validator("choice_code", "institute_name", "course_name", "category", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    def to_source_dict(self) -> dict:
        """Dump using the dataset's own key names."""
        return self.model_dump(by_alias=True)


def parse_records(payload: Any) -> Tuple[List[CutoffRecord], int]:
    """
    Validate a decoded JSON payload into records.

    Args:
        payload: Decoded JSON body from a candidate source

    Returns:
        (records in payload order, number of skipped malformed rows)

    Raises:
        MalformedPayload: If payload is not a JSON array
    """
    if not isinstance(payload, list):
        raise MalformedPayload(f"Expected a JSON array of records, got {type(payload).__name__}")

    records: List[CutoffRecord] = []
    skipped = 0
    for index, row in enumerate(payload):
        if not isinstance(row, dict):
            skipped += 1
            logger.warning(f"Skipping row {index}: expected an object, got {type(row).__name__}")
            continue
        try:
            records.append(CutoffRecord.model_validate(row))
        except ValidationError as e:
            skipped += 1
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
            logger.warning(f"Skipping malformed row {index} (bad fields: {fields})")

    if skipped:
        logger.warning(f"Skipped {skipped} of {len(payload)} rows")
    return records, skipped
