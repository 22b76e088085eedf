"""Export API: structured export of a query result."""

import csv
import json
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path

from ..query.models import QueryResult
from ..records.models import FIELD_ALIASES

CSV_COLUMNS = [
    "rank",
    "percentile",
    "choice_code",
    "institute_name",
    "course_name",
    "category",
]


def export_view(
    result: QueryResult,
    format: str = "json",
    out: Path | None = None,
) -> str:
    """
    Export the visible page of a query result.

    Args:
        result: QueryResult from the pipeline
        format: Export format ("json" or "csv")
        out: Output file path (if None, returns as string)

    Returns:
        Exported data as string (if out is None) or a confirmation after writing to file
    """
    if format == "json":
        export_data = {
            "export_schema_version": "1",
            "exported_at_utc": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "total_matches": result.total_matches,
            "total_pages": result.total_pages,
            "page_number": result.page_number,
            "data": [record.to_source_dict() for record in result.visible],
        }
        output = json.dumps(export_data, indent=2, sort_keys=True)
        if out:
            out.write_text(output, encoding="utf-8")
            return f"Exported to {out}"
        return output
    elif format == "csv":
        # CSV: stable column order, dataset header names
        output_buffer = StringIO()
        writer = csv.writer(output_buffer)
        writer.writerow([FIELD_ALIASES[col] for col in CSV_COLUMNS])
        for record in result.visible:
            writer.writerow([getattr(record, col) for col in CSV_COLUMNS])

        output = output_buffer.getvalue()
        if out:
            out.write_text(output, encoding="utf-8", newline="")
            return f"Exported to {out}"
        return output
    else:
        raise ValueError(f"Unsupported format: {format}")
