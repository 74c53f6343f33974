"""Tests for the architecture operation payload."""

from __future__ import annotations

from codescope.analyzers import ArchitectureAnalyzer
from codescope.models import AnalysisConfig, RawProjectData
from tests._fixtures.repo_builder import make_source


def _project() -> RawProjectData:
    return RawProjectData(
        files=[
            make_source("src/pages/home.tsx", "import { load } from '../services/loader';\n"),
            make_source("src/services/loader.ts", "import { render } from '../pages/home';\n"),
            make_source("src/models/user.ts", "export interface User { id: string }\n"),
            make_source("scripts/build.py", "print('building')\n"),
        ]
    )


def test_payload_sections() -> None:
    payload = ArchitectureAnalyzer().analyze(_project(), AnalysisConfig("architecture"))

    assert set(payload) == {
        "overview",
        "layers",
        "dependency_graph",
        "graph_summary",
        "patterns",
        "violations",
        "health",
        "recommendations",
    }
    assert payload["overview"]["total_files"] == 4
    assert payload["overview"]["languages"] == {"typescript": 3, "python": 1}
    assert payload["overview"]["layer_counts"] == {
        "presentation": 1,
        "business": 1,
        "data": 1,
        "infrastructure": 0,
        "unidentified": 1,
    }
    assert payload["layers"]["business"] == {"files": ["src/services/loader.ts"], "count": 1}


def test_violations_and_health_follow_the_graph() -> None:
    payload = ArchitectureAnalyzer().analyze(_project(), AnalysisConfig("architecture"))

    graph = payload["dependency_graph"]
    assert {(edge["from"], edge["to"]) for edge in graph["edges"]} == {
        ("src/pages/home.tsx", "src/services/loader.ts"),
        ("src/services/loader.ts", "src/pages/home.tsx"),
    }
    assert len(graph["cycles"]) == 1

    assert [(v["type"], v["severity"]) for v in payload["violations"]] == [
        ("dependency_direction", "medium"),
        ("circular_dependency", "high"),
    ]
    # 100 - 10 (medium) - 20 (cycle violation) - 15 (cycle) - 20 * 1/3 (unlayered files)
    assert payload["health"]["score"] == 48.3
    assert payload["health"]["grade"] == "F"
    assert [pattern["name"] for pattern in payload["patterns"]["architectural"]] == ["Layered Architecture"]


def test_empty_project_is_healthy_but_empty() -> None:
    payload = ArchitectureAnalyzer().analyze(RawProjectData(), AnalysisConfig("architecture"))

    assert payload["overview"]["total_files"] == 0
    assert payload["health"]["score"] == 100.0
    assert payload["violations"] == []
    assert payload["recommendations"] == []


def test_results_are_deterministic() -> None:
    analyzer = ArchitectureAnalyzer()

    first = analyzer.analyze(_project(), AnalysisConfig("architecture"))
    second = analyzer.analyze(_project(), AnalysisConfig("architecture"))

    assert first == second
