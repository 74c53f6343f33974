"""Quality operation: complexity, duplication, textual issues and maintainability."""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, Dict, List, Sequence

from ..architecture import letter_grade
from ..models import AnalysisConfig, RawProjectData, SourceFile, Symbol
from .base import CALLABLE_KINDS, Analyzer, clamp, collect_symbols, int_param, percent

MAX_LINE_LENGTH = 120
MAX_BLANK_RUN = 2
MIN_DUPLICATE_LENGTH = 10
COMPLEXITY_THRESHOLD = 10
CRITICAL_COMPLEXITY = 20
DEFAULT_HOTSPOT_LIMIT = 20

MAINTAINABILITY_CEILING = 171.0
MAINTAINABILITY_GRADES = ((131, "A"), (101, "B"), (71, "C"), (51, "D"))

_TODO = re.compile(r"\b(?:TODO|FIXME)\b")
_DEBUG_PRINTS = {
    "python": re.compile(r"^[ \t]*print\(", re.M),
    "javascript": re.compile(r"\bconsole\.(?:log|debug)\("),
    "typescript": re.compile(r"\bconsole\.(?:log|debug)\("),
    "go": re.compile(r"\bfmt\.Print(?:ln|f)?\("),
    "java": re.compile(r"\bSystem\.(?:out|err)\.print(?:ln|f)?\("),
}
_WHITESPACE = re.compile(r"\s+")


def file_complexity(symbols: Sequence[Symbol]) -> Dict[str, Any]:
    functions = [symbol for symbol in symbols if symbol.kind in CALLABLE_KINDS]
    total = sum(symbol.complexity for symbol in functions)
    return {
        "total": total,
        "average": round(total / len(functions), 2) if functions else 0.0,
        "max": max((symbol.complexity for symbol in functions), default=0),
        "functions": len(functions),
    }


def duplicated_lines(content: str) -> int:
    """Count repeats of normalized lines that are long enough to be meaningful."""
    seen: Counter = Counter()
    duplicates = 0
    for line in content.split("\n"):
        normalized = _WHITESPACE.sub(" ", line.strip())
        if len(normalized) < MIN_DUPLICATE_LENGTH:
            continue
        if seen[normalized]:
            duplicates += 1
        seen[normalized] += 1
    return duplicates


def find_issues(source: SourceFile) -> List[Dict[str, Any]]:
    content = source.content
    lines = content.split("\n")
    issues: List[Dict[str, Any]] = []

    todos = len(_TODO.findall(content))
    if todos:
        issues.append({"type": "todo", "count": todos, "message": f"{todos} TODO/FIXME markers"})

    pattern = _DEBUG_PRINTS.get(source.language)
    prints = len(pattern.findall(content)) if pattern else 0
    if prints:
        issues.append(
            {"type": "debug_print", "count": prints, "message": f"{prints} debug print statements"}
        )

    long_lines = sum(1 for line in lines if len(line) > MAX_LINE_LENGTH)
    if long_lines:
        issues.append(
            {
                "type": "long_line",
                "count": long_lines,
                "message": f"{long_lines} lines exceed {MAX_LINE_LENGTH} characters",
            }
        )

    runs = 0
    blank = 0
    for line in lines:
        if line.strip():
            blank = 0
            continue
        blank += 1
        if blank == MAX_BLANK_RUN + 1:
            runs += 1
    if runs:
        issues.append(
            {
                "type": "blank_lines",
                "count": runs,
                "message": f"{runs} runs of more than {MAX_BLANK_RUN} consecutive blank lines",
            }
        )
    return issues


def maintainability_index(average_complexity: float, duplication_percentage: float) -> float:
    index = MAINTAINABILITY_CEILING - 0.2 * average_complexity - 0.5 * duplication_percentage
    return round(clamp(index, 0.0, MAINTAINABILITY_CEILING), 2)


class QualityAnalyzer(Analyzer):
    name = "quality"

    def analyze(self, data: RawProjectData, config: AnalysisConfig) -> Dict[str, Any]:
        symbols = collect_symbols(data.files, self.options)
        results: Dict[str, Dict[str, Any]] = {}
        for source in data.files:
            results[source.path] = {
                "language": source.language,
                "lines": source.line_count,
                "complexity": file_complexity(symbols[source.path]),
                "duplicated_lines": duplicated_lines(source.content),
                "issues": find_issues(source),
            }

        complexity = self._complexity_summary(symbols, results)
        total_lines = sum(result["lines"] for result in results.values())
        total_duplicated = sum(result["duplicated_lines"] for result in results.values())
        duplication = {
            "duplicated_lines": total_duplicated,
            "total_lines": total_lines,
            "percentage": percent(total_duplicated, total_lines),
        }

        index = maintainability_index(complexity["average"], duplication["percentage"])
        maintainability = {
            "index": index,
            "grade": letter_grade(index, MAINTAINABILITY_GRADES),
            "factors": {
                "complexity_impact": round(max(0.0, 100 - complexity["average"] * 2), 2),
                "duplication_impact": round(max(0.0, 100 - duplication["percentage"]), 2),
            },
        }

        issue_totals: Counter = Counter()
        for result in results.values():
            for issue in result["issues"]:
                issue_totals[issue["type"]] += issue["count"]

        limit = int_param(config.params, "hotspot_limit", DEFAULT_HOTSPOT_LIMIT)
        score = 100 - complexity["average"] - duplication["percentage"] * 0.5
        score += index / MAINTAINABILITY_CEILING * 20
        return {
            "files": results,
            "complexity": complexity,
            "duplication": duplication,
            "issues": dict(sorted(issue_totals.items())),
            "maintainability": maintainability,
            "hotspots": self._hotspots(results, limit),
            "overall_score": round(clamp(score), 1),
            "recommendations": self._recommendations(results, complexity, duplication, issue_totals),
        }

    @staticmethod
    def _complexity_summary(
        symbols: Dict[str, List[Symbol]], results: Dict[str, Dict[str, Any]]
    ) -> Dict[str, Any]:
        values = [
            symbol.complexity
            for found in symbols.values()
            for symbol in found
            if symbol.kind in CALLABLE_KINDS
        ]
        return {
            "total": sum(values),
            "average": round(sum(values) / len(values), 2) if values else 0.0,
            "max": max(values, default=0),
            "functions": len(values),
            "files_above_threshold": sum(
                1 for result in results.values() if result["complexity"]["max"] > COMPLEXITY_THRESHOLD
            ),
        }

    @staticmethod
    def _hotspots(results: Dict[str, Dict[str, Any]], limit: int) -> List[Dict[str, Any]]:
        ranked = []
        for path, result in results.items():
            score = result["complexity"]["total"] * result["lines"]
            if not score:
                continue
            ranked.append(
                {
                    "file": path,
                    "complexity": result["complexity"]["total"],
                    "lines": result["lines"],
                    "score": score,
                    "issues": [issue["message"] for issue in result["issues"]],
                }
            )
        ranked.sort(key=lambda item: (-item["score"], item["file"]))
        return ranked[:limit]

    @staticmethod
    def _recommendations(
        results: Dict[str, Dict[str, Any]],
        complexity: Dict[str, Any],
        duplication: Dict[str, Any],
        issue_totals: Counter,
    ) -> List[Dict[str, Any]]:
        recommendations: List[Dict[str, Any]] = []
        above = complexity["files_above_threshold"]
        if above:
            recommendations.append(
                {
                    "category": "complexity",
                    "title": f"Refactor {above} files with high complexity",
                    "description": (
                        f"{above} files contain functions with complexity above {COMPLEXITY_THRESHOLD}."
                    ),
                    "actions": [
                        "Extract methods from complex functions",
                        "Split functions that handle several responsibilities",
                    ],
                    "priority": "high",
                }
            )

        if duplication["percentage"] > 20:
            recommendations.append(
                {
                    "category": "duplication",
                    "title": f"Reduce code duplication ({duplication['percentage']:.1f}%)",
                    "description": "Repeated lines suggest logic that belongs in shared helpers.",
                    "actions": ["Extract duplicate code into shared functions or classes"],
                    "priority": "medium",
                }
            )

        critical = [
            path
            for path, result in results.items()
            if result["complexity"]["max"] > CRITICAL_COMPLEXITY
            or (result["lines"] and result["duplicated_lines"] > result["lines"] * 0.5)
        ]
        if critical:
            recommendations.append(
                {
                    "category": "hotspot",
                    "title": f"Address {len(critical)} critical quality hotspots",
                    "description": "These files combine very complex functions or heavy duplication.",
                    "actions": ["Prioritize refactoring of hotspot files", "Schedule focused reviews"],
                    "priority": "urgent",
                    "files": sorted(critical),
                }
            )

        if issue_totals.get("todo"):
            recommendations.append(
                {
                    "category": "maintenance",
                    "title": f"Resolve {issue_totals['todo']} TODO/FIXME markers",
                    "description": "Outstanding markers point at unfinished work.",
                    "actions": ["Convert markers into tracked issues or resolve them"],
                    "priority": "low",
                }
            )
        return recommendations


__all__ = [
    "QualityAnalyzer",
    "duplicated_lines",
    "file_complexity",
    "find_issues",
    "maintainability_index",
]
