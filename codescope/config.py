"""Configuration loading for codescope (.codescope.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigurationError
from .models import SCOPES

CONFIG_FILENAME = ".codescope.yml"

DEFAULT_MAX_DEPTH = 10
DEFAULT_WORKERS = 10
DEFAULT_GIT_TIMEOUT = 30.0
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024


@dataclass
class CollectionSettings:
    """Source tree traversal limits."""

    max_depth: int = DEFAULT_MAX_DEPTH
    workers: int = DEFAULT_WORKERS
    skip_dirs: List[str] = field(default_factory=list)
    extra_extensions: List[str] = field(default_factory=list)


@dataclass
class HistorySettings:
    """Bounds applied to the `git log` invocation."""

    timeout: float = DEFAULT_GIT_TIMEOUT
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES


@dataclass
class ExtractionSettings:
    include_private: bool = True


@dataclass
class Settings:
    """Represents the settings defined in .codescope.yml."""

    root: Path
    scope: str = "full"
    collection: CollectionSettings = field(default_factory=CollectionSettings)
    history: HistorySettings = field(default_factory=HistorySettings)
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)


def load_settings(config_path: Path) -> Settings:
    """Load settings from disk, falling back to defaults when the file is absent."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return Settings(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    scope = _as_str(data.get("scope")) or "full"
    if scope not in SCOPES:
        raise ConfigurationError(
            f"Invalid scope '{scope}' in {CONFIG_FILENAME}; expected one of {', '.join(SCOPES)}"
        )

    collection = CollectionSettings()
    collection_data = _as_dict(data.get("collection"))
    if collection_data:
        collection.max_depth = _positive_int(collection_data.get("max_depth"), DEFAULT_MAX_DEPTH)
        collection.workers = _positive_int(collection_data.get("workers"), DEFAULT_WORKERS)
        collection.skip_dirs = _as_str_list(collection_data.get("skip_dirs"))
        collection.extra_extensions = [
            ext if ext.startswith(".") else f".{ext}"
            for ext in (item.lower() for item in _as_str_list(collection_data.get("extra_extensions")))
        ]

    history = HistorySettings()
    history_data = _as_dict(data.get("history"))
    if history_data:
        timeout = _as_float(history_data.get("timeout"))
        if timeout is not None and timeout > 0:
            history.timeout = timeout
        history.max_output_bytes = _positive_int(
            history_data.get("max_output_bytes"), DEFAULT_MAX_OUTPUT_BYTES
        )

    extraction = ExtractionSettings()
    extraction_data = _as_dict(data.get("extraction"))
    if extraction_data:
        include_private = _as_bool(extraction_data.get("include_private"))
        if include_private is not None:
            extraction.include_private = include_private

    return Settings(
        root=root,
        scope=scope,
        collection=collection,
        history=history,
        extraction=extraction,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _positive_int(value: Any, default: int) -> int:
    parsed = _as_int(value)
    if parsed is None or parsed <= 0:
        return default
    return parsed


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
