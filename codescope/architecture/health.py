"""Layer-direction violations, architecture health score and recommendations."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..models import DependencyGraph

SEVERITY_PENALTY = {"low": 5, "medium": 10, "high": 20, "critical": 30}
CYCLE_PENALTY = 15
UNIDENTIFIED_PENALTY = 20

GRADE_THRESHOLDS: Sequence[Tuple[float, str]] = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))

# (from layer, to layer) -> severity and advice for dependencies pointing the wrong way.
_DIRECTION_RULES = {
    ("business", "presentation"): (
        "medium",
        "Move presentation logic to the appropriate layer or inject it through an interface",
    ),
    ("data", "presentation"): (
        "high",
        "Route data access through a repository or service layer",
    ),
}


@dataclass
class Violation:
    type: str
    severity: str
    description: str
    locations: List[str] = field(default_factory=list)
    recommendation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def letter_grade(score: float, thresholds: Sequence[Tuple[float, str]] = GRADE_THRESHOLDS) -> str:
    for minimum, grade in thresholds:
        if score >= minimum:
            return grade
    return "F"


def find_violations(graph: DependencyGraph) -> List[Violation]:
    violations: List[Violation] = []
    for edge in graph.edges:
        source_layer = graph.nodes[edge.source].layer
        target_layer = graph.nodes[edge.target].layer
        rule = _DIRECTION_RULES.get((source_layer, target_layer))
        if rule is None:
            continue
        severity, advice = rule
        violations.append(
            Violation(
                type="dependency_direction",
                severity=severity,
                description=(
                    f"{source_layer.capitalize()} layer ({edge.source}) depends on "
                    f"{target_layer} layer ({edge.target})"
                ),
                locations=[edge.source, edge.target],
                recommendation=advice,
            )
        )
    for cycle in graph.cycles:
        violations.append(
            Violation(
                type="circular_dependency",
                severity="high",
                description=cycle.description,
                locations=list(cycle.nodes),
                recommendation="Break the cycle by introducing an interface or mediator",
            )
        )
    return violations


def _unidentified_ratio(layers: Mapping[str, Sequence[str]]) -> float:
    identified = sum(len(paths) for layer, paths in layers.items() if layer != "unidentified")
    return len(layers.get("unidentified", ())) / max(identified, 1)


def score_health(
    layers: Mapping[str, Sequence[str]],
    graph: DependencyGraph,
    violations: Sequence[Violation],
) -> Dict[str, Any]:
    """Score 0..100: violation penalties, a further per-cycle penalty, and unlayered files."""
    ratio = _unidentified_ratio(layers)
    score = 100.0
    score -= sum(SEVERITY_PENALTY.get(violation.severity, 0) for violation in violations)
    score -= len(graph.cycles) * CYCLE_PENALTY
    score -= ratio * UNIDENTIFIED_PENALTY
    score = max(0.0, min(100.0, score))

    unidentified = len(layers.get("unidentified", ()))
    return {
        "score": round(score, 1),
        "grade": letter_grade(score),
        "factors": [
            {
                "factor": "Layer Separation",
                "score": round(max(0.0, 100 - ratio * 100), 1),
                "description": f"{unidentified} files not assigned to a layer",
            },
            {
                "factor": "Dependency Violations",
                "score": max(0, 100 - len(violations) * 10),
                "description": f"{len(violations)} architectural violations detected",
            },
            {
                "factor": "Circular Dependencies",
                "score": max(0, 100 - len(graph.cycles) * 20),
                "description": f"{len(graph.cycles)} circular dependencies found",
            },
        ],
    }


def recommend(
    layers: Mapping[str, Sequence[str]], violations: Sequence[Violation]
) -> List[Dict[str, Any]]:
    recommendations: List[Dict[str, Any]] = []
    for violation in violations:
        recommendations.append(
            {
                "type": "violation_fix",
                "priority": {"critical": "urgent", "high": "high"}.get(violation.severity, "medium"),
                "title": f"Fix {violation.type.replace('_', ' ')} violation",
                "description": violation.description,
                "effort": "medium",
                "impact": "high",
            }
        )

    total = sum(len(paths) for paths in layers.values())
    ratio = len(layers.get("unidentified", ())) / max(total, 1)
    if ratio > 0.3:
        recommendations.append(
            {
                "type": "pattern_adoption",
                "priority": "high",
                "title": "Improve Layer Organization",
                "description": (
                    f"{round(ratio * 100)}% of files are not assigned to a layer. "
                    "Consider adopting a clear architectural pattern."
                ),
                "effort": "high",
                "impact": "medium",
            }
        )

    if layers.get("presentation") and not layers.get("business"):
        recommendations.append(
            {
                "type": "pattern_adoption",
                "priority": "medium",
                "title": "Consider Layered Architecture",
                "description": "Presentation files exist but no business layer was found.",
                "effort": "high",
                "impact": "high",
            }
        )
    return recommendations


__all__ = [
    "GRADE_THRESHOLDS",
    "Violation",
    "find_violations",
    "letter_grade",
    "recommend",
    "score_health",
]
