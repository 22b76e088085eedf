from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List

import yaml

DEFAULT_CONFIG_PATH = Path("cutoffs.config.yaml")
DEFAULT_SOURCES_PATH = Path("config/sources.yaml")

ALLOWED_SOURCE_TYPES = ("endpoint", "proxy", "allorigins", "file")

BASE_SOURCE_DEFAULTS: Dict[str, Any] = {
    "enabled": True,
    "timeout_seconds": 20,
    "user_agent": "cutoff-explorer/0.1",
}


def _normalize_source_entry(
    source: Dict[str, Any],
    position: int,
    global_defaults: Dict[str, Any],
    dataset_url: str | None,
) -> Dict[str, Any]:
    """
    Normalize a single source entry so the loader and CLI consume the same schema.
    """
    normalized = deepcopy(source)
    normalized["priority"] = position
    normalized.setdefault("enabled", global_defaults.get("enabled", True))
    normalized.setdefault("timeout_seconds", global_defaults.get("timeout_seconds"))
    normalized.setdefault("user_agent", global_defaults.get("user_agent"))
    normalized.setdefault("url", None)
    normalized.setdefault("path", None)
    normalized["dataset_url"] = normalized.get("dataset_url") or dataset_url
    return normalized


def load_config(path: Path | None = None) -> Dict[str, Any]:
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")

    default_sort = config.get("default_sort") or {}
    if not isinstance(default_sort, dict):
        raise ValueError("Config 'default_sort' must be a dictionary if provided")
    config["default_sort"] = {
        "field": default_sort.get("field", "rank"),
        "order": default_sort.get("order", "asc"),
    }
    return config


def load_sources_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load the candidate sources configuration from YAML file.

    Args:
        path: Optional path to sources.yaml file. Defaults to config/sources.yaml

    Returns:
        Dictionary with sources configuration

    Raises:
        FileNotFoundError: If sources config file doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_SOURCES_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Sources config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    validate_sources_config(config)
    return config


def validate_sources_config(config: Any) -> None:
    """Raise ValueError if the sources config does not have the expected shape."""
    if not isinstance(config, dict):
        raise ValueError("Sources config must be a dictionary")
    if "version" not in config:
        raise ValueError("Sources config must have 'version' field")
    if "sources" not in config:
        raise ValueError("Sources config must have 'sources' field")

    defaults = config.get("defaults")
    if defaults is not None and not isinstance(defaults, dict):
        raise ValueError("Sources config 'defaults' must be a dictionary if provided")

    sources = config["sources"]
    if not isinstance(sources, list):
        raise ValueError("Sources config 'sources' must be a list")
    seen_ids = set()
    for source in sources:
        if not isinstance(source, dict):
            raise ValueError("Each source must be a dictionary")
        for field in ("id", "type"):
            if field not in source:
                raise ValueError(f"Source missing required field: {field}")
        if source["type"] not in ALLOWED_SOURCE_TYPES:
            raise ValueError(f"Source '{source['id']}' has unknown type: {source['type']}")
        if source["id"] in seen_ids:
            raise ValueError(f"Duplicate source id: {source['id']}")
        seen_ids.add(source["id"])


def get_all_sources(config: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
    """
    Get all candidate sources from config, in priority order.

    Args:
        config: Optional sources config dict. If None, loads from default path.

    Returns:
        List of normalized source dictionaries (first entry is tried first)
    """
    if config is None:
        config = load_sources_config()

    defaults = {**BASE_SOURCE_DEFAULTS, **(config.get("defaults") or {})}
    dataset_url = config.get("dataset_url")

    return [
        _normalize_source_entry(source, position, defaults, dataset_url)
        for position, source in enumerate(config.get("sources", []))
    ]


def get_enabled_sources(config: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
    """Enabled sources only, priority order preserved."""
    return [source for source in get_all_sources(config) if source.get("enabled", True)]
