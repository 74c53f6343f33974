"""Tests for the dependencies operation."""

from __future__ import annotations

from codescope.analyzers import DependenciesAnalyzer
from codescope.analyzers.dependencies import find_unused, is_imported
from codescope.models import AnalysisConfig, DependencyInfo, RawProjectData
from tests._fixtures.repo_builder import make_source


def _dep(name, version="1.0", type_="runtime", source="python"):
    return DependencyInfo(name=name, version=version, type=type_, source=source)


def _project() -> RawProjectData:
    return RawProjectData(
        files=[
            make_source("app/main.py", "import yaml\nimport requests.adapters\nfrom .util import x\n"),
            make_source("app/util.py", "import requests\n"),
            make_source("web/index.ts", "import React from 'react';\nimport { x } from '@scope/pkg/sub';\n"),
        ],
        dependencies=[
            _dep("PyYAML", "6.0"),
            _dep("requests", ">=2"),
            _dep("flask", "*"),
            _dep("pytest", "", type_="dev"),
            _dep("react", "^18.0.0", source="npm"),
            _dep("@scope/pkg", "latest", source="npm"),
            _dep("lodash", "^4", source="npm"),
            _dep("serde", "1", source="cargo"),
        ],
    )


def test_unused_and_unpinned() -> None:
    payload = DependenciesAnalyzer().analyze(_project(), AnalysisConfig("dependencies"))

    assert payload["unused"] == ["flask", "lodash"]
    assert payload["unpinned"] == ["@scope/pkg", "flask", "pytest"]
    assert payload["unchecked"] == ["serde"]
    assert [item["type"] for item in payload["recommendations"]] == ["removal", "version_pin"]


def test_summary_and_usage() -> None:
    payload = DependenciesAnalyzer().analyze(_project(), AnalysisConfig("dependencies"))

    assert payload["summary"] == {
        "total": 8,
        "by_type": {"dev": 1, "runtime": 7},
        "by_source": {"cargo": 1, "npm": 3, "python": 4},
    }
    assert payload["declared"][0] == {"name": "serde", "version": "1", "type": "runtime", "source": "cargo"}
    assert payload["external"][0] == {"module": "@scope/pkg/sub", "files": 1}
    assert {entry["module"] for entry in payload["external"]} == {
        "yaml",
        "requests.adapters",
        "requests",
        "react",
        "@scope/pkg/sub",
    }
    assert payload["internal"]["edges"] == 1


def test_is_imported_per_ecosystem() -> None:
    imports = {
        "python": {"dateutil.parser"},
        "javascript": {"node:fs"},
        "go": {"github.com/gin-gonic/gin/binding"},
        "java": {"org.springframework.boot"},
    }

    assert is_imported(_dep("python-dateutil"), imports)
    assert is_imported(_dep("fs", source="npm"), imports)
    assert is_imported(_dep("github.com/gin-gonic/gin", source="go"), imports)
    assert is_imported(_dep("org.springframework.boot:spring-boot-starter", source="maven"), imports)
    assert not is_imported(_dep("github.com/gin-gonic/ginx", source="go"), imports)
    assert is_imported(_dep("anything", source="cargo"), imports)


def test_dev_dependencies_are_never_unused() -> None:
    assert find_unused([_dep("pytest", type_="dev"), _dep("black")], {}) == ["black"]


def test_large_runtime_footprint_is_flagged() -> None:
    data = RawProjectData(dependencies=[_dep(f"pkg{index}", source="cargo") for index in range(51)])

    payload = DependenciesAnalyzer().analyze(data, AnalysisConfig("dependencies"))

    assert [item["type"] for item in payload["recommendations"]] == ["footprint"]
