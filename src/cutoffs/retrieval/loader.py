"""Dataset loader: tries candidate sources in priority order until one yields records."""

import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from cutoffs.config.loader import get_all_sources, get_enabled_sources, load_sources_config
from cutoffs.errors import LoadError, SourceUnavailable
from cutoffs.records.models import CutoffRecord, parse_records
from cutoffs.retrieval.adapters import create_adapter
from cutoffs.utils.logging import get_logger

logger = get_logger(__name__)


class FetchAttempt(BaseModel):
    """Outcome of trying one candidate source."""

    source_id: str
    fetched_at_utc: str  # ISO 8601
    status: str  # SUCCESS | FAILURE
    status_code: Optional[int] = None
    error: Optional[str] = None
    duration_seconds: Optional[float] = None
    record_count: int = 0
    bytes_downloaded: int = 0


class LoadResult(BaseModel):
    """The full dataset plus where it came from."""

    model_config = ConfigDict(frozen=True)

    records: Tuple[CutoffRecord, ...]
    source_id: str
    loaded_at_utc: str
    attempts: List[FetchAttempt] = Field(default_factory=list)
    skipped_records: int = 0


class DatasetLoader:
    """Loads the dataset from the first candidate source that succeeds."""

    def __init__(self, sources_config: Optional[Dict] = None):
        """
        Initialize loader.

        Args:
            sources_config: Optional sources config dict. If None, loads from default path.
        """
        if sources_config is None:
            sources_config = load_sources_config()

        self.config = sources_config
        self.defaults = sources_config.get("defaults", {})

    def _try_source(self, source: Dict) -> Tuple[FetchAttempt, List[CutoffRecord], int]:
        """Fetch and parse one candidate. Never raises for load failures."""
        source_id = source["id"]
        fetched_at_utc = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        start_time = time.monotonic()
        status_code = None
        bytes_downloaded = 0

        try:
            adapter = create_adapter(source, self.defaults)
            response = adapter.fetch()
            status_code = response.status_code
            bytes_downloaded = response.bytes_downloaded
            records, skipped = parse_records(response.payload)
        except (LoadError, ValueError) as e:
            status_code = getattr(e, "status_code", None) or status_code
            attempt = FetchAttempt(
                source_id=source_id,
                fetched_at_utc=fetched_at_utc,
                status="FAILURE",
                status_code=status_code,
                error=str(e),
                duration_seconds=time.monotonic() - start_time,
                bytes_downloaded=bytes_downloaded,
            )
            return attempt, [], 0

        attempt = FetchAttempt(
            source_id=source_id,
            fetched_at_utc=fetched_at_utc,
            status="SUCCESS",
            status_code=status_code,
            duration_seconds=time.monotonic() - start_time,
            record_count=len(records),
            bytes_downloaded=bytes_downloaded,
        )
        return attempt, records, skipped

    def load(self) -> LoadResult:
        """
        Try every enabled candidate in order and return the first valid dataset.

        Each call starts again from the first candidate, so calling it after a
        failure is a full retry.

        Returns:
            LoadResult with the records of the winning source

        Raises:
            SourceUnavailable: If every candidate failed
        """
        sources = get_enabled_sources(self.config)
        logger.info(f"Loading dataset from {len(sources)} candidate sources")

        attempts: List[FetchAttempt] = []
        for source in sources:
            logger.info(f"Trying source {source['id']} ({source.get('type', 'endpoint')})")
            attempt, records, skipped = self._try_source(source)
            attempts.append(attempt)

            if attempt.status == "SUCCESS":
                logger.info(f"Loaded {len(records)} records from {attempt.source_id}")
                return LoadResult(
                    records=tuple(records),
                    source_id=attempt.source_id,
                    loaded_at_utc=attempt.fetched_at_utc,
                    attempts=attempts,
                    skipped_records=skipped,
                )

            logger.warning(f"Source {attempt.source_id} failed: {attempt.error}")

        logger.error(f"All {len(attempts)} data sources failed")
        raise SourceUnavailable(attempts)

    def load_one(self, source_id: str) -> Tuple[FetchAttempt, List[CutoffRecord]]:
        """
        Fetch from a single candidate by ID, ignoring priority and the enabled flag.

        Returns:
            (attempt diagnostics, parsed records; empty on failure)

        Raises:
            ValueError: If source_id not found in config
        """
        source = None
        for candidate in get_all_sources(self.config):
            if candidate["id"] == source_id:
                source = candidate
                break

        if source is None:
            raise ValueError(f"Source '{source_id}' not found in configuration")

        attempt, records, _skipped = self._try_source(source)
        if attempt.status == "FAILURE":
            logger.error(f"Failed to fetch from {source_id}: {attempt.error}")
        return attempt, records


def load_with_retry(loader: DatasetLoader, retries: int = 0, delay_seconds: float = 0.0) -> LoadResult:
    """
    Run the whole fallback chain, re-running it from the first candidate up to
    `retries` more times when every candidate fails.
    """
    retry_count = 0
    while True:
        try:
            return loader.load()
        except SourceUnavailable:
            if retry_count >= retries:
                raise
            retry_count += 1
            logger.info(f"Retrying dataset load ({retry_count}/{retries})")
            if delay_seconds > 0:
                time.sleep(delay_seconds)


def load_from_file(path: str) -> LoadResult:
    """Load the dataset from a single static JSON file."""
    config = {
        "version": 1,
        "sources": [{"id": "file", "type": "file", "path": str(path)}],
    }
    return DatasetLoader(config).load()
