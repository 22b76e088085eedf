"""CLI behavior tests."""

import csv
import json

import pytest

import cutoffs.cli as cli
from cutoffs.errors import SourceUnavailable
from cutoffs.retrieval.loader import FetchAttempt


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *_args, **_kwargs: None)


@pytest.fixture
def dataset_file(tmp_path, raw_rows):
    rows = raw_rows + [
        {
            "Rank": 7300,
            "Percentile": 94.4,
            "Choice Code": "0600619110",
            "Institute Name": "Pune Institute of Computer Technology",
            "Course Name": "Computer Engineering",
            "Type": "GOPENS",
        }
    ]
    path = tmp_path / "cutoffs.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


def test_browse_prints_page_and_summary(dataset_file, capsys):
    cli.main(["browse", "--file", str(dataset_file), "--search", "pune"])

    out = capsys.readouterr().out
    assert "College of Engineering, Pune" in out
    assert "Pune Institute of Computer Technology" in out
    assert "Amravati" not in out
    assert "Showing 2 of 2" in out
    assert "Page 1 of 1" in out


def test_browse_rank_threshold_and_sort(dataset_file, capsys):
    cli.main(["browse", "--file", str(dataset_file), "--rank", "10", "--sort", "percentile", "--order", "desc"])

    out = capsys.readouterr().out
    assert out.index("Pune Institute of Computer Technology") < out.index("Amravati")
    assert "Showing 2 of 2" in out


def test_browse_no_results(dataset_file, capsys):
    cli.main(["browse", "--file", str(dataset_file), "--search", "atlantis"])
    assert "No results found" in capsys.readouterr().out


def test_browse_clamps_page(dataset_file, capsys):
    cli.main(["browse", "--file", str(dataset_file), "--page", "99"])
    assert "Page 1 of 1" in capsys.readouterr().out


def test_browse_exits_when_sources_unavailable(monkeypatch, capsys):
    attempts = [
        FetchAttempt(source_id="local-api", fetched_at_utc="2025-01-01T00:00:00Z", status="FAILURE", error="refused"),
    ]

    def _fail(_args, _app_config):
        raise SourceUnavailable(attempts)

    monkeypatch.setattr(cli, "_load_dataset", _fail)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["browse"])

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "All data sources failed. Please try again later." in err
    assert "local-api: refused" in err


def test_export_csv_to_file(dataset_file, tmp_path, capsys):
    out_path = tmp_path / "page.csv"

    cli.main(["export", "--file", str(dataset_file), "--format", "csv", "--out", str(out_path)])

    assert f"Exported to {out_path}" in capsys.readouterr().out
    with out_path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][0] == "Rank"
    assert [row[0] for row in rows[1:]] == ["1", "2", "7300", "50000"]


def test_export_json_to_stdout(dataset_file, capsys):
    cli.main(["export", "--file", str(dataset_file), "--percentile", "50"])

    data = json.loads(capsys.readouterr().out)
    assert [row["Rank"] for row in data["data"]] == [50000]


def test_sources_list(monkeypatch, sources_config, capsys):
    monkeypatch.setattr(cli, "load_sources_config", lambda _path=None: sources_config)

    cli.main(["sources", "list"])

    out = capsys.readouterr().out
    assert out.index("local-api") < out.index("allorigins") < out.index("corsproxy") < out.index("direct")
    assert "https://data.example.com/cutoffs.json" in out


def test_sources_test_prints_attempt(monkeypatch, sources_config, capsys):
    monkeypatch.setattr(cli, "load_sources_config", lambda _path=None: sources_config)

    class FakeLoader:
        def __init__(self, _config):
            pass

        def load_one(self, source_id):
            attempt = FetchAttempt(
                source_id=source_id,
                fetched_at_utc="2025-01-01T00:00:00Z",
                status="FAILURE",
                status_code=403,
                error="403 Forbidden",
                duration_seconds=0.25,
            )
            return attempt, []

    monkeypatch.setattr(cli, "DatasetLoader", FakeLoader)

    cli.main(["sources", "test", "corsproxy"])

    out = capsys.readouterr().out
    assert "Fetch Results for corsproxy:" in out
    assert "Status: FAILURE" in out
    assert "HTTP Status: 403" in out
    assert "Error: 403 Forbidden" in out


def test_no_command_prints_help(capsys):
    cli.main([])
    assert "usage: cutoffs" in capsys.readouterr().out


@pytest.mark.parametrize(
    "flag, value, message",
    [
        ("--rank", "0", "Rank must be at least 1"),
        ("--rank", "-5", "Rank must be at least 1"),
        ("--rank", "12.5", "Rank must be a whole number"),
        ("--percentile", "150", "Percentile must be between 0 and 100"),
        ("--percentile", "nan", "Percentile must be between 0 and 100"),
        ("--percentile", "high", "Percentile must be a number"),
    ],
)
@pytest.mark.parametrize("command", ["browse", "export"])
def test_invalid_thresholds_exit_with_usage_error(dataset_file, capsys, command, flag, value, message):
    with pytest.raises(SystemExit) as exc_info:
        cli.main([command, "--file", str(dataset_file), flag, value])

    assert exc_info.value.code == 2
    err = capsys.readouterr().err
    assert message in err
    assert "Traceback" not in err


def test_boundary_thresholds_are_accepted(dataset_file, capsys):
    cli.main(["browse", "--file", str(dataset_file), "--rank", "1", "--percentile", "100"])
    assert "Showing 4 of 4" in capsys.readouterr().out
