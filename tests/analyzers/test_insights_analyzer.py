"""Tests for the insights operation."""

from __future__ import annotations

from codescope.analyzers import InsightsAnalyzer
from codescope.analyzers.insights import commit_style, detect_frameworks, ownership_balance
from codescope.models import AnalysisConfig, DependencyInfo, RawProjectData
from tests._fixtures.repo_builder import make_commit, make_source

BOB = {"author": "Bob", "email": "bob@example.com"}


def _files():
    return [
        make_source("src/pages/home.tsx", "import React from 'react';\n// page\nexport const Home = () => null;\n"),
        make_source("src/services/api.ts", "import axios from 'axios';\nexport function get() {\n  return 1;\n}\n"),
        make_source("src/models/user.ts", "export interface User {}\n"),
        make_source("tests/api.test.ts", "// spec\ntest('x', () => {});\n"),
    ]


def _commits():
    commits = []
    for index in range(10):
        extra = {} if index % 2 == 0 else BOB
        sha = "abcdef1234567" if index == 3 else f"c{index:02d}"
        insertions = 1500 if index == 3 else 10
        commits.append(
            make_commit(sha, f"feat: change {index}", day=index + 1, insertions=insertions, **extra)
        )
    return commits


def _analyze(data: RawProjectData):
    return InsightsAnalyzer().analyze(data, AnalysisConfig("insights"))


def test_patterns_span_architecture_process_and_quality() -> None:
    payload = _analyze(RawProjectData(files=_files(), commits=_commits()))

    found = {(pattern["pattern"], pattern["category"]) for pattern in payload["patterns"]}
    assert found == {
        ("Layered Architecture", "architecture"),
        ("Conventional Commits", "process"),
        ("Shared Ownership", "process"),
        ("Clean Code Practices", "quality"),
    }


def test_anomalies_flag_large_commits_and_files() -> None:
    files = _files() + [make_source("data/blob.py", "x" * (500 * 1024 + 1))]

    payload = _analyze(RawProjectData(files=files, commits=_commits()))

    assert [(item["anomaly"], item["location"]) for item in payload["anomalies"]] == [
        ("Large File", "data/blob.py"),
        ("Large Commit", "abcdef12"),
    ]


def test_predictions_recommendations_and_knowledge() -> None:
    payload = _analyze(RawProjectData(files=_files(), commits=_commits()))

    assert [item["prediction"] for item in payload["predictions"]] == [
        "Code complexity will remain stable",
        "Development velocity is stable",
    ]
    assert [group["category"] for group in payload["recommendations"]] == ["Code Quality"]
    assert payload["recommendations"][0]["recommendations"][0]["title"] == "Increase Test Coverage"

    knowledge = payload["knowledge"]
    assert knowledge["primary_language"] == "typescript"
    assert knowledge["languages"] == {"typescript": 4}
    assert knowledge["frameworks"] == ["React"]
    assert knowledge["commit_style"]["style"] == "conventional"
    assert payload["confidence"] == 0.9


def test_sparse_project() -> None:
    payload = _analyze(RawProjectData(files=[make_source("main.py", "print(1)\n")]))

    assert payload["patterns"] == []
    assert len(payload["predictions"]) == 1
    assert [group["category"] for group in payload["recommendations"]] == ["Architecture", "Code Quality"]
    assert payload["knowledge"]["commit_style"]["style"] == "unknown"
    assert payload["confidence"] == 0.7


def test_informal_history_gets_a_process_recommendation() -> None:
    commits = [make_commit(f"c{index}", "stuff", day=index + 1) for index in range(3)]

    payload = _analyze(RawProjectData(files=_files(), commits=commits))

    assert "Development Process" in [group["category"] for group in payload["recommendations"]]


def test_commit_style() -> None:
    detailed = "fix(parser): handle nested brackets in parameter lists without recursion"

    assert commit_style([make_commit("a", detailed)])["style"] == "conventional and detailed"
    assert commit_style([make_commit("a", "Handle nested brackets in parameter lists without any recursion")])[
        "style"
    ] == "detailed"
    assert commit_style([make_commit("a", "wip")])["style"] == "informal"


def test_detect_frameworks() -> None:
    names = {"django", "github.com/gin-gonic/gin", "org.springframework.boot:spring-boot-starter-web", "left-pad"}

    assert detect_frameworks(names) == ["Django", "Gin", "Spring"]


def test_framework_detection_uses_declared_dependencies() -> None:
    data = RawProjectData(
        files=[make_source("main.py", "x = 1\n")],
        dependencies=[DependencyInfo(name="FastAPI", version="0.110", type="runtime", source="python")],
    )

    assert _analyze(data)["knowledge"]["frameworks"] == ["FastAPI"]


def test_ownership_balance() -> None:
    even = [make_commit("a", "x"), make_commit("b", "x", **BOB)]
    skewed = [make_commit(f"a{index}", "x") for index in range(9)] + [make_commit("b", "x", **BOB)]

    assert ownership_balance(even) == 1.0
    assert ownership_balance(skewed) == 0.36
    assert ownership_balance(even[:1]) == 0.0
