"""Base class and shared helpers for operation analyzers."""

from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping

from ..extractors import ExtractorOptions, extract_file_symbols
from ..models import AnalysisConfig, RawProjectData, SourceFile, Symbol

TEST_MARKERS = (".test.", ".spec.", "_test.", "test_")
TEST_DIR_NAMES = frozenset({"test", "tests", "__tests__", "spec"})
CALLABLE_KINDS = frozenset({"function", "method", "constructor"})


class Analyzer(ABC):
    """Contract for analyzers that turn collected project data into one payload."""

    name: str = ""

    def __init__(self, options: ExtractorOptions | None = None) -> None:
        self.options = options or ExtractorOptions()

    @abstractmethod
    def analyze(self, data: RawProjectData, config: AnalysisConfig) -> Dict[str, Any]:
        """Return the operation payload; raise AnalysisError on unusable input."""


def collect_symbols(
    files: Iterable[SourceFile], options: ExtractorOptions | None = None
) -> Dict[str, List[Symbol]]:
    return {source.path: extract_file_symbols(source, options) for source in files}


def is_test_path(path: str) -> bool:
    lowered = path.lower()
    name = posixpath.basename(lowered)
    if any(marker in name for marker in TEST_MARKERS):
        return True
    return any(part in TEST_DIR_NAMES for part in lowered.split("/")[:-1])


def language_breakdown(files: Iterable[SourceFile]) -> Dict[str, int]:
    counts = Counter(source.language for source in files)
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def int_param(params: Mapping[str, Any], key: str, default: int) -> int:
    value = params.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


__all__ = [
    "Analyzer",
    "CALLABLE_KINDS",
    "clamp",
    "collect_symbols",
    "int_param",
    "is_test_path",
    "language_breakdown",
    "percent",
]
