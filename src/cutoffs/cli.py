"""CLI entrypoint for the cutoff explorer."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from cutoffs.api.cutoffs_api import page_label, summarize
from cutoffs.api.export import export_view
from cutoffs.api.session import BrowseSession, parse_percentile_input, parse_rank_input
from cutoffs.config.loader import DEFAULT_SOURCES_PATH, get_all_sources, load_config, load_sources_config
from cutoffs.errors import SourceUnavailable
from cutoffs.query.models import SORTABLE_FIELDS, SortCriteria
from cutoffs.records.models import CutoffRecord
from cutoffs.retrieval.loader import DatasetLoader, LoadResult, load_from_file, load_with_retry
from cutoffs.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _load_app_config() -> Dict[str, Any]:
    """App config is optional; fall back to built-in defaults when absent."""
    try:
        return load_config()
    except FileNotFoundError:
        logger.debug("No app config found, using defaults")
        return {"default_sort": {"field": "rank", "order": "asc"}}


def _sources_path(app_config: Dict[str, Any]) -> Path:
    raw = app_config.get("sources_path")
    return Path(raw) if raw else DEFAULT_SOURCES_PATH


def _load_dataset(args: argparse.Namespace, app_config: Dict[str, Any]) -> LoadResult:
    if getattr(args, "file", None):
        return load_from_file(args.file)
    loader = DatasetLoader(load_sources_config(_sources_path(app_config)))
    return load_with_retry(loader, retries=getattr(args, "retries", 0) or 0)


def _build_session(records, args: argparse.Namespace, app_config: Dict[str, Any]) -> BrowseSession:
    default_sort = app_config.get("default_sort") or {}
    sort = SortCriteria(
        field=args.sort or default_sort.get("field", "rank"),
        order=args.order or default_sort.get("order", "asc"),
    )
    session = BrowseSession(records, sort=sort)
    session.set_rank_threshold(args.rank)
    session.set_percentile_threshold(args.percentile)
    session.set_search_text(args.search)
    session.go_to_page(args.page)
    return session


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def _render_table(records: List[CutoffRecord]) -> None:
    print(f"{'Rank':>8} {'Percentile':>11}  {'Choice Code':<12} {'Institute':<48} {'Course':<30} {'Type':<10}")
    print("-" * 126)
    for record in records:
        print(
            f"{record.rank:>8} {record.percentile:>11.4f}  {record.choice_code:<12} "
            f"{_truncate(record.institute_name, 48):<48} {_truncate(record.course_name, 30):<30} "
            f"{_truncate(record.category, 10):<10}"
        )


def _report_unavailable(error: SourceUnavailable) -> None:
    print(f"Error: {error.message}", file=sys.stderr)
    for attempt in error.attempts:
        print(f"  {attempt.source_id}: {attempt.error}", file=sys.stderr)
    print("Run the command again (or pass --retries N) to retry from the first source.", file=sys.stderr)


def cmd_sources_list(args: argparse.Namespace) -> None:
    """List configured candidate sources in priority order."""
    try:
        sources_config = load_sources_config(_sources_path(_load_app_config()))
    except FileNotFoundError as e:
        logger.error(f"Sources config not found: {e}")
        print("Error: Sources config file not found. Create config/sources.yaml")
        return

    all_sources = get_all_sources(sources_config)
    if not all_sources:
        print("No sources configured.")
        return

    print(f"{'#':<4} {'ID':<20} {'Type':<12} {'Enabled':<10} {'URL':<60}")
    print("-" * 106)
    for source in all_sources:
        enabled = "Yes" if source.get("enabled", True) else "No"
        url = source.get("url") or source.get("path") or source.get("dataset_url") or ""
        print(f"{source['priority'] + 1:<4} {source['id']:<20} {source['type']:<12} {enabled:<10} {url:<60}")


def cmd_sources_test(args: argparse.Namespace) -> None:
    """Test a single candidate source by fetching it."""
    loader = DatasetLoader(load_sources_config(_sources_path(_load_app_config())))
    attempt, _records = loader.load_one(args.source_id)

    print(f"\nFetch Results for {args.source_id}:")
    print(f"  Status: {attempt.status}")
    if attempt.status_code:
        print(f"  HTTP Status: {attempt.status_code}")
    if attempt.duration_seconds:
        print(f"  Duration: {attempt.duration_seconds:.2f}s")
    print(f"  Records: {attempt.record_count}")
    if attempt.status == "FAILURE":
        print(f"  Error: {attempt.error}")


def cmd_browse(args: argparse.Namespace) -> None:
    """Load the dataset and print one page of the filtered, sorted view."""
    app_config = _load_app_config()
    try:
        loaded = _load_dataset(args, app_config)
    except SourceUnavailable as e:
        _report_unavailable(e)
        sys.exit(1)

    session = _build_session(loaded.records, args, app_config)
    result = session.view()

    if result.is_empty:
        print(summarize(result))
        return

    _render_table(result.visible)
    print()
    print(summarize(result))
    print(page_label(result))
    if loaded.skipped_records:
        print(f"({loaded.skipped_records} malformed rows skipped from {loaded.source_id})")


def cmd_export(args: argparse.Namespace) -> None:
    """Export one page of the filtered, sorted view as JSON or CSV."""
    app_config = _load_app_config()
    try:
        loaded = _load_dataset(args, app_config)
    except SourceUnavailable as e:
        _report_unavailable(e)
        sys.exit(1)

    result = _build_session(loaded.records, args, app_config).view()
    out = Path(args.out) if args.out else None
    print(export_view(result, format=args.format, out=out))


def _argument_type(parse):
    """Wrap an input parser so argparse reports its message and exits 2."""

    def _convert(text: str):
        try:
            return parse(text)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e)) from e

    _convert.__name__ = parse.__name__
    return _convert


def _add_query_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--rank", type=_argument_type(parse_rank_input), default=None, help="Show rows with rank >= this"
    )
    parser.add_argument(
        "--percentile",
        type=_argument_type(parse_percentile_input),
        default=None,
        help="Show rows with percentile <= this (0-100)",
    )
    parser.add_argument("--search", type=str, default=None, help="Institute or course name contains")
    parser.add_argument("--sort", choices=SORTABLE_FIELDS, default=None, help="Sort field (default: rank)")
    parser.add_argument("--order", choices=("asc", "desc"), default=None, help="Sort order (default: asc)")
    parser.add_argument("--page", type=int, default=1, help="Page number (1-based, clamped)")
    parser.add_argument("--file", type=str, default=None, help="Read the dataset from a local JSON file")
    parser.add_argument("--retries", type=int, default=0, help="Re-run the source chain this many times on failure")


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="cutoffs",
        description="Browse admissions cutoff ranks and percentiles",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # sources commands
    sources_parser = subparsers.add_parser("sources", help="Candidate source commands")
    sources_subparsers = sources_parser.add_subparsers(dest="sources_command", help="Sources subcommands")
    sources_list_parser = sources_subparsers.add_parser("list", help="List candidate sources in priority order")
    sources_list_parser.set_defaults(func=cmd_sources_list)
    sources_test_parser = sources_subparsers.add_parser("test", help="Fetch a single candidate source")
    sources_test_parser.add_argument("source_id", help="Source ID to test")
    sources_test_parser.set_defaults(func=cmd_sources_test)

    # browse command
    browse_parser = subparsers.add_parser("browse", help="Print a filtered, sorted page of cutoffs")
    _add_query_arguments(browse_parser)
    browse_parser.set_defaults(func=cmd_browse)

    # export command
    export_parser = subparsers.add_parser("export", help="Export a filtered, sorted page of cutoffs")
    _add_query_arguments(export_parser)
    export_parser.add_argument("--format", choices=("json", "csv"), default="json", help="Export format")
    export_parser.add_argument("--out", type=str, default=None, help="Write to this file instead of stdout")
    export_parser.set_defaults(func=cmd_export)

    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if not getattr(args, "func", None):
        parser.print_help()
        return

    try:
        args.func(args)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
