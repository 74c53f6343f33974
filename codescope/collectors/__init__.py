"""Data collectors and the manager that merges their output."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from ..config import Settings
from .base import Collector
from .dependencies import DependencyCollector
from .history import HistoryCollector
from .manager import CollectorManager
from .source import SourceCollector


def build_collector_manager(
    root: Path,
    settings: Settings,
    *,
    git_runner: Callable[..., str] | None = None,
) -> CollectorManager:
    """Return a manager pre-loaded with the source, history and dependency collectors."""
    manager = CollectorManager(root)
    manager.register(
        "source",
        SourceCollector(
            root,
            max_depth=settings.collection.max_depth,
            workers=settings.collection.workers,
            skip_dirs=settings.collection.skip_dirs,
            extra_extensions=settings.collection.extra_extensions,
        ),
    )
    manager.register(
        "history",
        HistoryCollector(
            root,
            runner=git_runner,
            timeout=settings.history.timeout,
            max_output_bytes=settings.history.max_output_bytes,
        ),
    )
    manager.register("dependencies", DependencyCollector(root))
    return manager


__all__ = [
    "Collector",
    "CollectorManager",
    "DependencyCollector",
    "HistoryCollector",
    "SourceCollector",
    "build_collector_manager",
]
