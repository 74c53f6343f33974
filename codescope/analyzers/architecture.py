"""Architecture operation: layers, import graph, patterns, violations and health."""

from __future__ import annotations

from typing import Any, Dict

from ..architecture import (
    DependencyGraphBuilder,
    LayerClassifier,
    PatternDetector,
    find_violations,
    recommend,
    score_health,
    summarize,
)
from ..extractors import ExtractorOptions
from ..models import AnalysisConfig, RawProjectData
from .base import Analyzer, language_breakdown


class ArchitectureAnalyzer(Analyzer):
    name = "architecture"

    def __init__(
        self,
        options: ExtractorOptions | None = None,
        *,
        classifier: LayerClassifier | None = None,
        detector: PatternDetector | None = None,
    ) -> None:
        super().__init__(options)
        self.classifier = classifier or LayerClassifier()
        self.detector = detector or PatternDetector()

    def analyze(self, data: RawProjectData, config: AnalysisConfig) -> Dict[str, Any]:
        files = data.files
        layers = self.classifier.group(files)
        graph = DependencyGraphBuilder(self.classifier).build(files, data.dependencies)
        violations = find_violations(graph)
        health = score_health(layers, graph, violations)

        return {
            "overview": {
                "total_files": len(files),
                "languages": language_breakdown(files),
                "layer_counts": {layer: len(paths) for layer, paths in layers.items()},
            },
            "layers": {
                layer: {"files": sorted(paths), "count": len(paths)}
                for layer, paths in layers.items()
            },
            "dependency_graph": graph.to_dict(),
            "graph_summary": summarize(graph),
            "patterns": self.detector.detect_patterns(files, layers, graph),
            "violations": [violation.to_dict() for violation in violations],
            "health": health,
            "recommendations": recommend(layers, violations),
        }


__all__ = ["ArchitectureAnalyzer"]
