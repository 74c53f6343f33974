"""Insights operation: cross-cutting patterns, anomalies, predictions and project knowledge."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence, Set

from ..architecture import LayerClassifier, PatternDetector
from ..collectors.history import contributor_stats
from ..extractors import extract_file_dependencies
from ..models import AnalysisConfig, GitCommit, RawProjectData, SourceFile
from .base import CALLABLE_KINDS, Analyzer, collect_symbols, is_test_path, language_breakdown
from .health import activity_trend

LARGE_FILE_BYTES = 500 * 1024
LARGE_COMMIT_LINES = 1000
SMALL_FILE_LINES = 50
COMPLEX_AVERAGE = 10
MIN_PREDICTION_COMMITS = 10
COMMIT_SAMPLE = 50

_CONVENTIONAL = re.compile(r"^(?:feat|fix|docs|style|refactor|perf|test|build|ci|chore|revert)(?:\([^)]*\))?!?:")
_COMMENT = re.compile(r"//|/\*|^\s*#", re.M)

# Dependency or import name -> framework label.
FRAMEWORKS = {
    "react": "React",
    "vue": "Vue",
    "@angular/core": "Angular",
    "next": "Next.js",
    "express": "Express",
    "django": "Django",
    "flask": "Flask",
    "fastapi": "FastAPI",
    "github.com/gin-gonic/gin": "Gin",
    "github.com/labstack/echo/v4": "Echo",
}
_FRAMEWORK_PREFIXES = {"org.springframework": "Spring"}


def commit_style(commits: Sequence[GitCommit]) -> Dict[str, Any]:
    if not commits:
        return {"style": "unknown", "conventional": False, "detailed": False}
    messages = [commit.message for commit in commits[:COMMIT_SAMPLE]]
    conventional = sum(1 for message in messages if _CONVENTIONAL.match(message)) > len(messages) * 0.5
    detailed = sum(1 for message in messages if len(message) > 50) > len(messages) * 0.3
    if conventional and detailed:
        style = "conventional and detailed"
    elif conventional:
        style = "conventional"
    elif detailed:
        style = "detailed"
    else:
        style = "informal"
    return {"style": style, "conventional": conventional, "detailed": detailed}


def detect_frameworks(names: Set[str]) -> List[str]:
    found = {FRAMEWORKS[name] for name in names if name in FRAMEWORKS}
    for prefix, label in _FRAMEWORK_PREFIXES.items():
        if any(name.startswith(prefix) for name in names):
            found.add(label)
    return sorted(found)


def confidence_score(data: RawProjectData) -> float:
    score = 0.5
    if data.files:
        score += 0.2
    if data.dependencies:
        score += 0.1
    if data.commits:
        score += 0.2
    return round(min(1.0, score), 2)


def ownership_balance(commits: Sequence[GitCommit]) -> float:
    """1.0 when every contributor has the same commit count, towards 0 as it skews."""
    counts = [entry["commits"] for entry in contributor_stats(commits).values()]
    if len(counts) < 2:
        return 0.0
    mean = sum(counts) / len(counts)
    variance = sum((count - mean) ** 2 for count in counts) / len(counts)
    return round(max(0.0, 1 - variance / (mean * mean)), 3)


class InsightsAnalyzer(Analyzer):
    name = "insights"

    def analyze(self, data: RawProjectData, config: AnalysisConfig) -> Dict[str, Any]:
        files = data.files
        commits = data.commits
        symbols = collect_symbols(files, self.options)
        complexities = [
            symbol.complexity
            for found in symbols.values()
            for symbol in found
            if symbol.kind in CALLABLE_KINDS
        ]
        average_complexity = sum(complexities) / len(complexities) if complexities else 0.0
        test_ratio = sum(1 for source in files if is_test_path(source.path)) / len(files) if files else 0.0
        layers = LayerClassifier().group(files)
        style = commit_style(commits)

        return {
            "patterns": self._patterns(files, commits, layers, test_ratio, style),
            "anomalies": self._anomalies(files, commits),
            "predictions": self._predictions(commits, average_complexity),
            "recommendations": self._recommendations(layers, commits, test_ratio),
            "knowledge": self._knowledge(data, style),
            "confidence": confidence_score(data),
        }

    @staticmethod
    def _patterns(
        files: Sequence[SourceFile],
        commits: Sequence[GitCommit],
        layers: Dict[str, List[str]],
        test_ratio: float,
        style: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        patterns: List[Dict[str, Any]] = []
        detected = PatternDetector().detect_patterns(files, layers)
        for category in ("architectural", "design"):
            for entry in detected.get(category, []):
                patterns.append(
                    {
                        "pattern": entry["name"],
                        "category": "architecture",
                        "confidence": entry["confidence"],
                        "evidence": entry["evidence"],
                    }
                )

        if files and test_ratio >= 0.3:
            patterns.append(
                {
                    "pattern": "Test-Driven Development",
                    "category": "process",
                    "confidence": round(min(1.0, test_ratio * 2), 2),
                    "evidence": f"{test_ratio * 100:.1f}% of files are tests",
                }
            )
        if style["conventional"]:
            patterns.append(
                {
                    "pattern": "Conventional Commits",
                    "category": "process",
                    "confidence": 0.8,
                    "evidence": "Most recent commit messages follow the type(scope): subject form",
                }
            )
        balance = ownership_balance(commits)
        if balance > 0.6:
            patterns.append(
                {
                    "pattern": "Shared Ownership",
                    "category": "process",
                    "confidence": balance,
                    "evidence": f"{len(contributor_stats(commits))} contributors with balanced commit counts",
                }
            )

        if files:
            score = 0.0
            evidence = []
            if sum(1 for source in files if source.line_count < SMALL_FILE_LINES) > len(files) * 0.5:
                score += 0.3
                evidence.append("mostly small files")
            commented = sum(1 for source in files if _COMMENT.search(source.content))
            if len(files) * 0.2 < commented < len(files) * 0.8:
                score += 0.4
                evidence.append("balanced commenting")
            identified = sum(len(paths) for layer, paths in layers.items() if layer != "unidentified")
            if identified > len(files) * 0.5:
                score += 0.3
                evidence.append("files map onto architectural layers")
            if score >= 0.6:
                patterns.append(
                    {
                        "pattern": "Clean Code Practices",
                        "category": "quality",
                        "confidence": round(score, 2),
                        "evidence": ", ".join(evidence),
                    }
                )
        return patterns

    @staticmethod
    def _anomalies(files: Sequence[SourceFile], commits: Sequence[GitCommit]) -> List[Dict[str, Any]]:
        anomalies: List[Dict[str, Any]] = []
        for source in files:
            if source.size > LARGE_FILE_BYTES:
                anomalies.append(
                    {
                        "anomaly": "Large File",
                        "location": source.path,
                        "severity": "medium",
                        "description": f"File is {source.size / 1024:.1f}KB",
                        "recommendation": "Split the file into smaller, focused modules",
                    }
                )
        for commit in commits:
            if commit.lines_changed > LARGE_COMMIT_LINES:
                anomalies.append(
                    {
                        "anomaly": "Large Commit",
                        "location": commit.hash[:8],
                        "severity": "low",
                        "description": f"Commit changes {commit.lines_changed} lines",
                        "recommendation": "Break large changes into smaller commits",
                    }
                )
        return anomalies

    @staticmethod
    def _predictions(commits: Sequence[GitCommit], average_complexity: float) -> List[Dict[str, Any]]:
        increasing = average_complexity > COMPLEX_AVERAGE
        predictions = [
            {
                "prediction": f"Code complexity will {'increase' if increasing else 'remain stable'}",
                "timeline": "3 months",
                "confidence": 0.6,
                "basis": f"Average function complexity {average_complexity:.1f}",
                "impact": "medium" if increasing else "low",
            }
        ]
        if len(commits) >= MIN_PREDICTION_COMMITS:
            trend = activity_trend(commits)
            predictions.append(
                {
                    "prediction": f"Development velocity is {trend['direction']}",
                    "timeline": "2 months",
                    "confidence": 0.5,
                    "basis": (
                        f"{trend['first_half']['commits']} commits in the first half of the window, "
                        f"{trend['second_half']['commits']} in the second"
                    ),
                    "impact": "high" if trend["direction"] == "declining" else "low",
                }
            )
        return predictions

    @staticmethod
    def _recommendations(
        layers: Dict[str, List[str]], commits: Sequence[GitCommit], test_ratio: float
    ) -> List[Dict[str, Any]]:
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        if not all(layers.get(layer) for layer in ("presentation", "business", "data")):
            grouped.setdefault("Architecture", []).append(
                {
                    "title": "Consider Layered Architecture",
                    "description": "Separate presentation, business and data concerns into distinct modules",
                    "priority": "medium",
                    "effort": "high",
                }
            )
        if test_ratio < 0.3:
            grouped.setdefault("Code Quality", []).append(
                {
                    "title": "Increase Test Coverage",
                    "description": f"Only {test_ratio * 100:.0f}% of files are tests",
                    "priority": "high",
                    "effort": "medium",
                }
            )
        if commits and commit_style(commits)["style"] == "informal":
            grouped.setdefault("Development Process", []).append(
                {
                    "title": "Adopt a Commit Message Convention",
                    "description": "Structured messages make history easier to search and changelogs easier to build",
                    "priority": "low",
                    "effort": "low",
                }
            )
        return [{"category": name, "recommendations": items} for name, items in grouped.items()]

    @staticmethod
    def _knowledge(data: RawProjectData, style: Dict[str, Any]) -> Dict[str, Any]:
        languages = language_breakdown(data.files)
        names: Set[str] = {dependency.name.lower() for dependency in data.dependencies}
        for source in data.files:
            names.update(target.lower() for target in extract_file_dependencies(source))
        return {
            "primary_language": next(iter(languages), "unknown"),
            "languages": languages,
            "frameworks": detect_frameworks(names),
            "commit_style": style,
        }


__all__ = [
    "InsightsAnalyzer",
    "commit_style",
    "confidence_score",
    "detect_frameworks",
    "ownership_balance",
]
