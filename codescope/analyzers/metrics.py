"""Metrics operation: velocity, productivity and stability from history, plus codebase size."""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, Dict, List, Sequence

from ..collectors.history import contributor_stats
from ..models import AnalysisConfig, GitCommit, RawProjectData
from .base import Analyzer, collect_symbols, int_param, is_test_path, language_breakdown, percent

DEFAULT_TOP = 10

FIX_PATTERN = re.compile(r"\b(?:fix(?:es|ed)?|bug|hotfix)\b", re.IGNORECASE)
REVERT_PATTERN = re.compile(r"\brevert\b", re.IGNORECASE)
REFACTOR_PATTERN = re.compile(r"\b(?:refactor|cleanup|clean up)\b", re.IGNORECASE)


def span_days(commits: Sequence[GitCommit]) -> float:
    """Days between the oldest and newest commit, never less than one."""
    if not commits:
        return 1.0
    dates = [commit.date for commit in commits]
    return max((max(dates) - min(dates)).total_seconds() / 86400, 1.0)


def commits_per_week(commits: Sequence[GitCommit]) -> float:
    if not commits:
        return 0.0
    return round(len(commits) / span_days(commits) * 7, 2)


def fix_ratio(commits: Sequence[GitCommit]) -> float:
    if not commits:
        return 0.0
    return round(sum(1 for commit in commits if FIX_PATTERN.search(commit.message)) / len(commits), 3)


class MetricsAnalyzer(Analyzer):
    name = "metrics"

    def analyze(self, data: RawProjectData, config: AnalysisConfig) -> Dict[str, Any]:
        commits = data.commits
        top = int_param(config.params, "top", DEFAULT_TOP)
        codebase = self._codebase(data)

        velocity = self._velocity(commits)
        productivity = self._productivity(commits, top)
        stability = self._stability(commits, codebase["lines"], top)
        return {
            "time_range": self._time_range(commits),
            "velocity": velocity,
            "productivity": productivity,
            "stability": stability,
            "codebase": codebase,
            "insights": self._insights(commits, velocity, productivity, stability),
        }

    @staticmethod
    def _time_range(commits: Sequence[GitCommit]) -> Dict[str, Any] | None:
        if not commits:
            return None
        dates = [commit.date for commit in commits]
        return {
            "start": min(dates).isoformat(),
            "end": max(dates).isoformat(),
            "days": round(span_days(commits), 1),
        }

    @staticmethod
    def _velocity(commits: Sequence[GitCommit]) -> Dict[str, Any]:
        added = sum(commit.insertions for commit in commits)
        removed = sum(commit.deletions for commit in commits)
        sizes = [commit.lines_changed for commit in commits]
        return {
            "total_commits": len(commits),
            "commits_per_week": commits_per_week(commits),
            "active_days": len({commit.date.date() for commit in commits}),
            "lines_added": added,
            "lines_removed": removed,
            "net_change": added - removed,
            "average_commit_size": round(sum(sizes) / len(sizes), 1) if sizes else 0.0,
            "largest_commit": max(sizes, default=0),
        }

    @staticmethod
    def _productivity(commits: Sequence[GitCommit], top: int) -> Dict[str, Any]:
        stats = contributor_stats(commits)
        return {
            "active_contributors": len(stats),
            "commits_per_contributor": round(len(commits) / len(stats), 2) if stats else 0.0,
            "top_contributors": list(stats.values())[:top],
        }

    @staticmethod
    def _stability(commits: Sequence[GitCommit], codebase_lines: int, top: int) -> Dict[str, Any]:
        total = len(commits)
        changed = sum(commit.lines_changed for commit in commits)
        file_changes: Counter = Counter()
        for commit in commits:
            file_changes.update(commit.files)
        return {
            "fix_ratio": fix_ratio(commits),
            "revert_rate": percent(sum(1 for c in commits if REVERT_PATTERN.search(c.message)), total),
            "refactoring_rate": percent(
                sum(1 for c in commits if REFACTOR_PATTERN.search(c.message)), total
            ),
            "churn": percent(changed, codebase_lines),
            "most_changed_files": [
                {"file": path, "changes": count}
                for path, count in sorted(file_changes.items(), key=lambda item: (-item[1], item[0]))[:top]
            ],
        }

    def _codebase(self, data: RawProjectData) -> Dict[str, Any]:
        symbols = collect_symbols(data.files, self.options)
        kinds: Counter = Counter(symbol.kind for found in symbols.values() for symbol in found)
        return {
            "files": len(data.files),
            "lines": sum(source.line_count for source in data.files),
            "bytes": sum(source.size for source in data.files),
            "test_files": sum(1 for source in data.files if is_test_path(source.path)),
            "symbols": dict(sorted(kinds.items())),
            "languages": language_breakdown(data.files),
        }

    @staticmethod
    def _insights(
        commits: Sequence[GitCommit],
        velocity: Dict[str, Any],
        productivity: Dict[str, Any],
        stability: Dict[str, Any],
    ) -> List[str]:
        if not commits:
            return ["No commit history available; velocity and stability metrics are empty"]
        insights: List[str] = []
        if velocity["commits_per_week"] > 70:
            insights.append("Very high commit frequency; check that commits stay meaningful")
        elif velocity["commits_per_week"] < 7:
            insights.append("Fewer than one commit per day on average; changes may be batched")
        if productivity["active_contributors"] == 1:
            insights.append("All commits come from a single contributor (bus factor of one)")
        if stability["fix_ratio"] > 0.4:
            insights.append("More than 40% of commits are fixes, which points at stability problems")
        if stability["revert_rate"] > 10:
            insights.append("High revert rate suggests gaps in review or testing")
        if velocity["largest_commit"] > 1000:
            insights.append("Some commits change more than 1000 lines; prefer smaller changes")
        if not insights:
            insights.append("Development metrics are within normal ranges")
        return insights


__all__ = ["MetricsAnalyzer", "commits_per_week", "fix_ratio", "span_days"]
