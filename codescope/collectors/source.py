"""Source tree walking and per-file snapshotting."""

from __future__ import annotations

import hashlib
import os
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple, TypeVar

from ..config import DEFAULT_MAX_DEPTH, DEFAULT_WORKERS
from ..logging import get_logger
from ..models import SourceFile
from .base import Collector

T = TypeVar("T")
R = TypeVar("R")

SKIPPED_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        ".hg",
        ".svn",
        "dist",
        "build",
        "target",
        "vendor",
        "__pycache__",
        ".venv",
        "venv",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
        ".next",
        "coverage",
    }
)

TEST_DIRS = frozenset({"test", "tests", "__tests__", "spec"})

LANGUAGE_BY_SUFFIX = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".hpp": "cpp",
}

# Module scope only looks at the root and its immediate subdirectories.
_MODULE_DEPTH = 1


def detect_language(path: str) -> str:
    suffix = os.path.splitext(path)[1].lower()
    return LANGUAGE_BY_SUFFIX.get(suffix, "unknown")


def process_in_batches(
    func: Callable[[T], R], items: Sequence[T], workers: int
) -> Tuple[List[R], List[Tuple[T, Exception]]]:
    """Run ``func`` over ``items`` with a fixed worker count, batch by batch.

    A failing item is reported in the second list and never cancels its
    siblings. Results keep the input order.
    """
    results: List[R] = []
    failures: List[Tuple[T, Exception]] = []
    if not items:
        return results, failures

    workers = max(1, workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        for start in range(0, len(items), workers):
            batch = items[start : start + workers]
            futures = [(item, pool.submit(func, item)) for item in batch]
            for item, future in futures:
                try:
                    results.append(future.result())
                except (OSError, ValueError) as exc:
                    failures.append((item, exc))
    return results, failures


class SourceCollector(Collector):
    """Walks the project tree and snapshots every supported source file."""

    def __init__(
        self,
        root: Path,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        workers: int = DEFAULT_WORKERS,
        skip_dirs: Iterable[str] = (),
        extra_extensions: Iterable[str] = (),
    ) -> None:
        self.root = Path(root)
        self.max_depth = max_depth
        self.workers = workers
        self.skip_dirs = SKIPPED_DIRS.union(skip_dirs)
        self.extensions = frozenset(LANGUAGE_BY_SUFFIX).union(
            ext.lower() for ext in extra_extensions
        )
        self.logger = get_logger("collectors.source")

    def collect(self, scope: str) -> Dict[str, Any]:
        started = time.perf_counter()
        paths = sorted(self._iter_paths(scope))
        files, failures = process_in_batches(self._read_file, paths, self.workers)
        for rel_path, exc in failures:
            self.logger.warning("Skipping unreadable file %s: %s", rel_path, exc)

        files.sort(key=lambda item: item.path)
        self.logger.debug("Collected %d files for scope '%s'", len(files), scope)
        return {
            "files": files,
            "metadata": {
                "total_files": len(files),
                "failed_files": [
                    {"path": rel_path, "error": str(exc)} for rel_path, exc in failures
                ],
                "collection_time_ms": int((time.perf_counter() - started) * 1000),
                "scope": scope,
                "supported_extensions": sorted(self.extensions),
            },
        }

    def _iter_paths(self, scope: str) -> Iterable[str]:
        depth_limit = min(self.max_depth, _MODULE_DEPTH) if scope == "module" else self.max_depth
        excluded = self.skip_dirs.union(TEST_DIRS) if scope == "incremental" else self.skip_dirs

        def _on_error(exc: OSError) -> None:
            self.logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc)

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_on_error):
            current = Path(dirpath)
            rel_dir = current.relative_to(self.root).as_posix() if current != self.root else ""
            depth = len(rel_dir.split("/")) if rel_dir else 0

            if depth >= depth_limit:
                dirnames[:] = []
            else:
                dirnames[:] = sorted(name for name in dirnames if name not in excluded)

            for filename in filenames:
                if os.path.splitext(filename)[1].lower() not in self.extensions:
                    continue
                yield f"{rel_dir}/{filename}" if rel_dir else filename

    def _read_file(self, rel_path: str) -> SourceFile:
        path = self.root / rel_path
        raw = path.read_bytes()
        stat_result = path.stat()
        return SourceFile(
            path=rel_path,
            content=raw.decode("utf-8", errors="replace"),
            language=detect_language(rel_path),
            size=stat_result.st_size,
            modified=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
            hash=hashlib.sha256(raw).hexdigest(),
        )


__all__ = [
    "LANGUAGE_BY_SUFFIX",
    "SKIPPED_DIRS",
    "SourceCollector",
    "detect_language",
    "process_in_batches",
]
