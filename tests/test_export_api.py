"""Tests for export of query results."""

import csv
import json
from io import StringIO

import pytest

from cutoffs.api.cutoffs_api import query_cutoffs
from cutoffs.api.export import export_view


def test_export_json_wraps_page(sample_records):
    result = query_cutoffs(sample_records, search="pune")

    output = export_view(result, format="json")
    data = json.loads(output)

    assert data["export_schema_version"] == "1"
    assert data["exported_at_utc"].endswith("Z")
    assert data["total_matches"] == 2
    assert data["total_pages"] == 1
    assert data["page_number"] == 1
    assert [row["Rank"] for row in data["data"]] == [1200, 5300]
    assert data["data"][0]["Institute Name"] == "College of Engineering, Pune"


def test_export_csv_has_stable_columns(sample_records):
    result = query_cutoffs(sample_records, sort_field="percentile", sort_order="desc")

    output = export_view(result, format="csv")
    rows = list(csv.reader(StringIO(output)))

    assert rows[0] == ["Rank", "Percentile", "Choice Code", "Institute Name", "Course Name", "Type"]
    assert len(rows) == 6
    assert rows[1][0] == "15"
    assert rows[1][3] == "Veermata Jijabai Technological Institute"


def test_export_csv_escapes_commas(sample_records):
    result = query_cutoffs(sample_records, search="karad")
    rows = list(csv.reader(StringIO(export_view(result, format="csv"))))
    assert rows[1][3] == "Government College of Engineering, Karad"


def test_export_writes_file(sample_records, tmp_path):
    out = tmp_path / "page.json"
    message = export_view(query_cutoffs(sample_records), format="json", out=out)

    assert message == f"Exported to {out}"
    assert len(json.loads(out.read_text(encoding="utf-8"))["data"]) == 5


def test_export_rejects_unknown_format(sample_records):
    with pytest.raises(ValueError, match="Unsupported format"):
        export_view(query_cutoffs(sample_records), format="xml")
