"""Tests for the metrics operation."""

from __future__ import annotations

from codescope.analyzers import MetricsAnalyzer
from codescope.analyzers.metrics import commits_per_week, fix_ratio, span_days
from codescope.models import AnalysisConfig, RawProjectData
from tests._fixtures.repo_builder import make_commit, make_source

BOB = {"author": "Bob", "email": "bob@example.com"}


def _commits():
    return [
        make_commit("c1", "feat: add api", day=1, files=["a.py", "b.py"], insertions=100),
        make_commit("c2", "fix: bug in api", day=2, files=["a.py"], insertions=10, deletions=5),
        make_commit("c3", 'Revert "feat: add api"', day=8, files=["a.py"], deletions=100, **BOB),
        make_commit("c4", "refactor: split module", day=8, files=["c.py"], insertions=20, deletions=21, **BOB),
    ]


def _data() -> RawProjectData:
    return RawProjectData(
        files=[
            make_source("src/a.py", "def a():\n    return 1\n"),
            make_source("tests/test_a.py", "def test_a():\n    assert True\n"),
        ],
        commits=_commits(),
    )


def test_velocity_and_time_range() -> None:
    payload = MetricsAnalyzer().analyze(_data(), AnalysisConfig("metrics"))

    assert payload["time_range"] == {
        "start": "2024-01-01T12:00:00+00:00",
        "end": "2024-01-08T12:00:00+00:00",
        "days": 7.0,
    }
    assert payload["velocity"] == {
        "total_commits": 4,
        "commits_per_week": 4.0,
        "active_days": 3,
        "lines_added": 130,
        "lines_removed": 126,
        "net_change": 4,
        "average_commit_size": 64.0,
        "largest_commit": 100,
    }


def test_productivity_and_stability_respect_top() -> None:
    payload = MetricsAnalyzer().analyze(_data(), AnalysisConfig("metrics", params={"top": 1}))

    productivity = payload["productivity"]
    assert productivity["active_contributors"] == 2
    assert productivity["commits_per_contributor"] == 2.0
    assert [entry["name"] for entry in productivity["top_contributors"]] == ["Ada"]

    stability = payload["stability"]
    assert stability["fix_ratio"] == 0.25
    assert stability["revert_rate"] == 25.0
    assert stability["refactoring_rate"] == 25.0
    assert stability["churn"] == 6400.0
    assert stability["most_changed_files"] == [{"file": "a.py", "changes": 3}]


def test_codebase_and_insights() -> None:
    payload = MetricsAnalyzer().analyze(_data(), AnalysisConfig("metrics"))

    codebase = payload["codebase"]
    assert codebase["files"] == 2
    assert codebase["lines"] == 4
    assert codebase["test_files"] == 1
    assert codebase["symbols"] == {"function": 2}
    assert codebase["languages"] == {"python": 2}

    assert payload["insights"] == [
        "Fewer than one commit per day on average; changes may be batched",
        "High revert rate suggests gaps in review or testing",
    ]


def test_no_history() -> None:
    payload = MetricsAnalyzer().analyze(RawProjectData(), AnalysisConfig("metrics"))

    assert payload["time_range"] is None
    assert payload["velocity"]["commits_per_week"] == 0.0
    assert payload["productivity"]["active_contributors"] == 0
    assert payload["stability"]["churn"] == 0.0
    assert payload["insights"] == ["No commit history available; velocity and stability metrics are empty"]


def test_helpers() -> None:
    commits = _commits()

    assert span_days([]) == 1.0
    assert span_days(commits[:1]) == 1.0
    assert span_days(commits) == 7.0
    assert commits_per_week(commits[:2]) == 14.0
    assert fix_ratio(commits) == 0.25
    assert fix_ratio([make_commit("x", "prefix fixture names")]) == 0.0
