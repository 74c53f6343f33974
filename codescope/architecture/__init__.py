"""Layer classification, dependency graph, pattern detection and health scoring."""

from .graph import DependencyGraphBuilder, coupling_strength, detect_cycles, summarize
from .health import Violation, find_violations, letter_grade, recommend, score_health
from .layers import DEFAULT_RULES, LayerClassifier, LayerRule
from .patterns import DEFAULT_PATTERNS, PatternDefinition, PatternDetector

__all__ = [
    "DEFAULT_PATTERNS",
    "DEFAULT_RULES",
    "DependencyGraphBuilder",
    "LayerClassifier",
    "LayerRule",
    "PatternDefinition",
    "PatternDetector",
    "Violation",
    "coupling_strength",
    "detect_cycles",
    "find_violations",
    "letter_grade",
    "recommend",
    "score_health",
    "summarize",
]
