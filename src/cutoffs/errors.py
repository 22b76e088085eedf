"""Error taxonomy for dataset loading."""

from typing import List, Optional


class CutoffsError(Exception):
    """Base class for all cutoff explorer errors."""


class LoadError(CutoffsError):
    """Loading the dataset failed."""


class SourceFetchError(LoadError):
    """A single candidate source failed (status, transport, or payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedPayload(SourceFetchError):
    """A candidate answered, but the body is not a JSON array of records."""


class SourceUnavailable(LoadError):
    """Every candidate source failed. Terminal for the session until retried."""

    DEFAULT_MESSAGE = "All data sources failed. Please try again later."

    def __init__(self, attempts: Optional[List] = None, message: Optional[str] = None):
        self.attempts = list(attempts or [])
        self.message = message or self.DEFAULT_MESSAGE
        super().__init__(self._render())

    def _render(self) -> str:
        lines = [self.message]
        for attempt in self.attempts:
            lines.append(f"  {attempt.source_id}: {attempt.error}")
        return "\n".join(lines)
