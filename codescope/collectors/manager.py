"""Registry that runs collectors for a scope and merges their output."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, List

from ..errors import CollectionError, ConfigurationError
from ..logging import get_logger
from ..models import RawProjectData
from .base import Collector

_KNOWN_KEYS = {"files", "commits", "dependencies", "branches", "contributors", "metadata"}


class CollectorManager:
    """Holds the collector registry for one engine instance.

    Collectors can be registered until the first collection runs; after that
    the registry is fixed so concurrent analyses see the same collector set.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self._collectors: Dict[str, Collector] = {}
        self._locked = False
        self._lock = threading.Lock()
        self.logger = get_logger("collectors.manager")

    def register(self, name: str, collector: Collector) -> None:
        if not isinstance(collector, Collector):
            raise TypeError(f"Collector '{name}' must implement the Collector interface")
        with self._lock:
            if self._locked:
                raise ConfigurationError(
                    f"Cannot register collector '{name}' after collection has started"
                )
            self._collectors[name] = collector

    def get(self, name: str) -> Collector | None:
        return self._collectors.get(name)

    def names(self) -> List[str]:
        return list(self._collectors)

    def validate_root(self) -> None:
        if not self.root.exists():
            raise CollectionError(f"Project path not found: {self.root}")
        if not self.root.is_dir():
            raise CollectionError(f"Project path is not a directory: {self.root}")

    def collect(self, scope: str) -> RawProjectData:
        """Run every registered collector in registration order."""
        with self._lock:
            self._locked = True
        self.validate_root()

        data = RawProjectData()
        for name, collector in self._collectors.items():
            try:
                output = collector.collect(scope)
            except Exception as exc:
                # A single collector failing degrades to missing data for that collector.
                self.logger.warning("Collector '%s' failed: %s", name, exc)
                data.collector_metadata[name] = {"error": str(exc), "scope": scope}
                continue
            if not isinstance(output, dict):
                raise CollectionError(f"Collector '{name}' returned {type(output).__name__}, expected dict")
            _merge(data, name, output)
        return data


def _merge(data: RawProjectData, name: str, output: Dict[str, Any]) -> None:
    data.files.extend(output.get("files") or [])
    data.commits.extend(output.get("commits") or [])
    data.dependencies.extend(output.get("dependencies") or [])
    if output.get("branches"):
        data.branches = dict(output["branches"])
    if output.get("contributors"):
        data.contributors.update(output["contributors"])
    data.collector_metadata[name] = dict(output.get("metadata") or {})
    for key, value in output.items():
        if key not in _KNOWN_KEYS:
            data.extras[key] = value


__all__ = ["CollectorManager"]
