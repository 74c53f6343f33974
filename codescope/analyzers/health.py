"""Health operation: weighted project health across eight dimensions."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence

from ..architecture import letter_grade
from ..collectors.history import contributor_stats
from ..extractors import ExtractorOptions
from ..models import AnalysisConfig, GitCommit, RawProjectData, SourceFile
from .architecture import ArchitectureAnalyzer
from .base import Analyzer, clamp, is_test_path
from .dependencies import DependenciesAnalyzer
from .metrics import commits_per_week, fix_ratio
from .quality import MAINTAINABILITY_CEILING, QualityAnalyzer

WEIGHTS = {
    "architecture": 0.25,
    "quality": 0.2,
    "maintainability": 0.2,
    "testing": 0.1,
    "documentation": 0.1,
    "dependencies": 0.05,
    "activity": 0.05,
    "collaboration": 0.05,
}

TARGET_TEST_RATIO = 0.3
TARGET_COMMITS_PER_WEEK = 7.0
TARGET_CONTRIBUTORS = 3
MIN_TREND_COMMITS = 4

_COMMENT = re.compile(r"(?:^|\s)(?:#|//|/\*)|\"\"\"", re.M)

_RISK_TEXT = {
    "architecture": (
        "Weak layering or circular dependencies make changes ripple",
        "Plan an architecture review and break dependency cycles",
    ),
    "quality": (
        "Complex or duplicated code raises defect rates",
        "Refactor hotspots and add automated quality checks",
    ),
    "maintainability": (
        "Low maintainability index slows every change",
        "Reduce function complexity and extract shared code",
    ),
    "testing": (
        "Few test files increases regression risk",
        "Add unit tests around the most changed modules",
    ),
    "documentation": (
        "Sparse comments make onboarding and review harder",
        "Document public interfaces and non-obvious modules",
    ),
    "dependencies": (
        "Unused or unpinned dependencies widen the maintenance surface",
        "Remove unused packages and pin versions",
    ),
    "activity": (
        "Low commit activity suggests stalled development",
        "Confirm ownership and plan regular maintenance",
    ),
    "collaboration": (
        "Knowledge concentrated in few contributors",
        "Spread ownership through reviews and pairing",
    ),
}


def testing_score(files: Sequence[SourceFile]) -> float:
    if not files:
        return 0.0
    ratio = sum(1 for source in files if is_test_path(source.path)) / len(files)
    return round(clamp(ratio / TARGET_TEST_RATIO * 100), 1)


def documentation_score(files: Sequence[SourceFile]) -> float:
    if not files:
        return 0.0
    documented = sum(1 for source in files if _COMMENT.search(source.content))
    return round(documented / len(files) * 100, 1)


def activity_score(commits: Sequence[GitCommit]) -> float:
    return round(clamp(commits_per_week(commits) / TARGET_COMMITS_PER_WEEK * 100), 1)


def collaboration_score(commits: Sequence[GitCommit]) -> float:
    return round(clamp(len(contributor_stats(commits)) / TARGET_CONTRIBUTORS * 100), 1)


def dependency_score(unused: int, unpinned: int) -> float:
    return float(clamp(100 - 10 * unused - 5 * unpinned))


def weighted_score(dimensions: Dict[str, float]) -> float:
    return round(sum(dimensions[name] * weight for name, weight in WEIGHTS.items()), 1)


def activity_trend(commits: Sequence[GitCommit]) -> Dict[str, Any]:
    """Compare the first and second half of the commit window."""
    if len(commits) < MIN_TREND_COMMITS:
        return {"direction": "insufficient_data", "first_half": {}, "second_half": {}}
    ordered = sorted(commits, key=lambda commit: commit.date)
    midpoint = ordered[0].date + (ordered[-1].date - ordered[0].date) / 2
    first = [commit for commit in ordered if commit.date <= midpoint]
    second = [commit for commit in ordered if commit.date > midpoint]

    if len(second) > len(first) * 1.2:
        direction = "improving"
    elif len(second) < len(first) * 0.8:
        direction = "declining"
    else:
        direction = "stable"
    return {
        "direction": direction,
        "first_half": {"commits": len(first), "fix_ratio": fix_ratio(first)},
        "second_half": {"commits": len(second), "fix_ratio": fix_ratio(second)},
    }


class HealthAnalyzer(Analyzer):
    name = "health"

    def __init__(self, options: ExtractorOptions | None = None) -> None:
        super().__init__(options)
        self.architecture = ArchitectureAnalyzer(self.options)
        self.quality = QualityAnalyzer(self.options)
        self.dependencies = DependenciesAnalyzer(self.options)

    def analyze(self, data: RawProjectData, config: AnalysisConfig) -> Dict[str, Any]:
        architecture = self.architecture.analyze(data, config)
        quality = self.quality.analyze(data, config)
        dependencies = self.dependencies.analyze(data, config)

        dimensions = {
            "architecture": float(architecture["health"]["score"]),
            "quality": float(quality["overall_score"]),
            "maintainability": round(
                quality["maintainability"]["index"] / MAINTAINABILITY_CEILING * 100, 1
            ),
            "testing": testing_score(data.files),
            "documentation": documentation_score(data.files),
            "dependencies": dependency_score(
                len(dependencies["unused"]), len(dependencies["unpinned"])
            ),
            "activity": activity_score(data.commits),
            "collaboration": collaboration_score(data.commits),
        }
        score = weighted_score(dimensions)
        risks = self._risks(dimensions)
        return {
            "overall": {"score": score, "grade": letter_grade(score)},
            "dimensions": dimensions,
            "weights": dict(WEIGHTS),
            "risks": risks,
            "benchmarks": self._benchmarks(score, dimensions),
            "roadmap": self._roadmap(dimensions, risks),
            "trend": activity_trend(data.commits),
        }

    @staticmethod
    def _risks(dimensions: Dict[str, float]) -> List[Dict[str, Any]]:
        risks = []
        for name, value in dimensions.items():
            if value >= 60:
                continue
            description, mitigation = _RISK_TEXT[name]
            risks.append(
                {
                    "category": name,
                    "level": "high" if value < 40 else "medium",
                    "score": value,
                    "description": description,
                    "mitigation": mitigation,
                }
            )
        risks.sort(key=lambda risk: (risk["score"], risk["category"]))
        return risks

    @staticmethod
    def _benchmarks(score: float, dimensions: Dict[str, float]) -> Dict[str, Any]:
        if score >= 80:
            standing, percentile = "above_average", 75
        elif score >= 60:
            standing, percentile = "average", 50
        else:
            standing, percentile = "below_average", 25
        return {
            "standing": standing,
            "percentile_rank": percentile,
            "strengths": [name for name, value in dimensions.items() if value >= 80],
            "weaknesses": [name for name, value in dimensions.items() if value < 60],
        }

    @staticmethod
    def _roadmap(dimensions: Dict[str, float], risks: List[Dict[str, Any]]) -> Dict[str, Any]:
        immediate = [
            {"action": risk["mitigation"], "category": risk["category"], "timeline": "1-2 weeks"}
            for risk in risks
            if risk["level"] == "high"
        ]
        short_term = [
            f"Raise {name} from {value:.0f} to at least 70"
            for name, value in sorted(dimensions.items(), key=lambda item: item[1])
            if value < 70
        ]
        return {
            "immediate_actions": immediate,
            "short_term_goals": short_term,
            "long_term_vision": [
                "Keep every health dimension at 80 or above",
                "Track health on each release to catch regressions early",
            ],
        }


__all__ = [
    "HealthAnalyzer",
    "WEIGHTS",
    "activity_trend",
    "testing_score",
    "weighted_score",
]
