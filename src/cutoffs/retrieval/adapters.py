"""Source adapters for fetching the cutoff dataset from candidate sources."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from pydantic import BaseModel

from cutoffs.errors import MalformedPayload, SourceFetchError


class AdapterFetchResponse(BaseModel):
    """Decoded payload with diagnostics for loader consumption."""

    payload: Any
    status_code: Optional[int] = None
    bytes_downloaded: int = 0


class SourceAdapter(ABC):
    """Abstract base class for source adapters."""

    def __init__(self, source_config: Dict, defaults: Dict):
        self.source_config = source_config
        self.defaults = defaults
        self.source_id = source_config["id"]
        self.url = source_config.get("url")
        self.dataset_url = source_config.get("dataset_url")
        self.timeout = source_config.get("timeout_seconds") or defaults.get("timeout_seconds", 20)
        self.user_agent = source_config.get("user_agent") or defaults.get("user_agent", "cutoff-explorer/0.1")

    @abstractmethod
    def fetch(self) -> AdapterFetchResponse:
        """
        Fetch the raw dataset payload from the source.

        Returns:
            AdapterFetchResponse with the decoded JSON body

        Raises:
            SourceFetchError: On non-success status, transport error, or undecodable body
        """
        pass

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    def _get(self, url: str) -> requests.Response:
        try:
            response = requests.get(url, headers=self._get_headers(), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            status_code = None
            if getattr(e, "response", None) is not None:
                status_code = e.response.status_code
            raise SourceFetchError(f"Failed to fetch {url}: {e}", status_code=status_code) from e
        return response

    def _decode_json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayload(
                f"Response from {response.url or self.source_id} is not valid JSON: {e}",
                status_code=response.status_code,
            ) from e

    def _proxied_url(self) -> str:
        if not self.url:
            raise ValueError(f"Source '{self.source_id}' needs a proxy prefix in 'url'")
        if not self.dataset_url:
            raise ValueError(f"Source '{self.source_id}' needs a 'dataset_url' to proxy")
        return self.url + quote(self.dataset_url, safe="")


class EndpointAdapter(SourceAdapter):
    """Adapter for an endpoint that serves the JSON array directly."""

    def fetch(self) -> AdapterFetchResponse:
        target = self.url or self.dataset_url
        if not target:
            raise ValueError(f"Source '{self.source_id}' has neither 'url' nor 'dataset_url'")
        response = self._get(target)
        return AdapterFetchResponse(
            payload=self._decode_json(response),
            status_code=response.status_code,
            bytes_downloaded=len(response.content or b""),
        )


class ProxyAdapter(SourceAdapter):
    """Adapter for a pass-through proxy: prefix + encoded dataset URL, raw body returned."""

    def fetch(self) -> AdapterFetchResponse:
        response = self._get(self._proxied_url())
        return AdapterFetchResponse(
            payload=self._decode_json(response),
            status_code=response.status_code,
            bytes_downloaded=len(response.content or b""),
        )


class AllOriginsAdapter(SourceAdapter):
    """Adapter for allorigins-style proxies that wrap the body in a 'contents' string."""

    def fetch(self) -> AdapterFetchResponse:
        response = self._get(self._proxied_url())
        envelope = self._decode_json(response)
        if not isinstance(envelope, dict) or "contents" not in envelope:
            raise MalformedPayload(
                f"Proxy response from {self.source_id} has no 'contents' field",
                status_code=response.status_code,
            )
        contents = envelope["contents"]
        if not isinstance(contents, str):
            raise MalformedPayload(
                f"Proxy 'contents' from {self.source_id} is not a string",
                status_code=response.status_code,
            )
        try:
            payload = json.loads(contents)
        except json.JSONDecodeError as e:
            raise MalformedPayload(
                f"Proxy 'contents' from {self.source_id} is not valid JSON: {e}",
                status_code=response.status_code,
            ) from e
        return AdapterFetchResponse(
            payload=payload,
            status_code=response.status_code,
            bytes_downloaded=len(response.content or b""),
        )


class FileAdapter(SourceAdapter):
    """Adapter for a static JSON file on disk."""

    def fetch(self) -> AdapterFetchResponse:
        raw_path = self.source_config.get("path")
        if not raw_path:
            raise ValueError(f"Source '{self.source_id}' needs a 'path'")
        path = Path(raw_path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise SourceFetchError(f"Failed to read {path}: {e}") from e
        try:
            payload = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedPayload(f"File {path} is not valid JSON: {e}") from e
        return AdapterFetchResponse(payload=payload, bytes_downloaded=len(data))


def create_adapter(source_config: Dict, defaults: Dict) -> SourceAdapter:
    """
    Factory function to create appropriate adapter based on source type.

    Args:
        source_config: Source configuration dict
        defaults: Default configuration values

    Returns:
        SourceAdapter instance
    """
    source_type = source_config.get("type", "endpoint")

    if source_type == "endpoint":
        return EndpointAdapter(source_config, defaults)
    elif source_type == "proxy":
        return ProxyAdapter(source_config, defaults)
    elif source_type == "allorigins":
        return AllOriginsAdapter(source_config, defaults)
    elif source_type == "file":
        return FileAdapter(source_config, defaults)
    else:
        raise ValueError(f"Unknown source type: {source_type}")
