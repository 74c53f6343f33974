"""Operation analyzers and the registry the engine dispatches through."""

from __future__ import annotations

from typing import Callable, Dict

from ..extractors import ExtractorOptions
from .architecture import ArchitectureAnalyzer
from .base import Analyzer
from .dependencies import DependenciesAnalyzer
from .health import HealthAnalyzer
from .insights import InsightsAnalyzer
from .metrics import MetricsAnalyzer
from .quality import QualityAnalyzer

_BUILTIN_FACTORIES: dict[str, Callable[[ExtractorOptions], Analyzer]] = {
    "architecture": ArchitectureAnalyzer,
    "quality": QualityAnalyzer,
    "dependencies": DependenciesAnalyzer,
    "metrics": MetricsAnalyzer,
    "health": HealthAnalyzer,
    "insights": InsightsAnalyzer,
}


def build_analyzers(options: ExtractorOptions | None = None) -> Dict[str, Analyzer]:
    """Return operation name -> analyzer for the six built-in operations."""
    options = options or ExtractorOptions()
    return {name: factory(options) for name, factory in _BUILTIN_FACTORIES.items()}


__all__ = [
    "Analyzer",
    "ArchitectureAnalyzer",
    "DependenciesAnalyzer",
    "HealthAnalyzer",
    "InsightsAnalyzer",
    "MetricsAnalyzer",
    "QualityAnalyzer",
    "build_analyzers",
]
