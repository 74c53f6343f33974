"""Tests for architectural and design pattern detection."""

from __future__ import annotations

from codescope.architecture import LayerClassifier, PatternDefinition, PatternDetector
from tests._fixtures.repo_builder import make_source


def _detect(paths, detector=None):
    files = [make_source(path, "x = 1\n") for path in paths]
    layers = LayerClassifier().group(files)
    return (detector or PatternDetector()).detect_patterns(files, layers)


def _names(result, category):
    return [entry["name"] for entry in result[category]]


def test_layered_architecture_needs_all_three_core_layers() -> None:
    result = _detect(["src/pages/home.tsx", "src/services/auth.ts", "src/models/user.ts"])

    assert _names(result, "architectural") == ["Layered Architecture"]
    entry = result["architectural"][0]
    assert entry["confidence"] == 0.8
    assert entry["evidence"] == "1 presentation, 1 business, 1 data layer files"

    partial = _detect(["src/pages/home.tsx", "src/services/auth.ts"])
    assert "Layered Architecture" not in _names(partial, "architectural")


def test_mvc_needs_controllers_models_and_views() -> None:
    result = _detect(["app/user_controller.rb", "app/user_model.rb", "app/user_view.rb"])
    assert "MVC" in _names(result, "architectural")

    missing_views = _detect(["app/user_controller.rb", "app/user_model.rb"])
    assert "MVC" not in _names(missing_views, "architectural")


def test_microservices_need_two_service_directories() -> None:
    result = _detect(["services/billing/main.go", "services/users/main.go"])
    assert "Microservices" in _names(result, "architectural")

    single = _detect(["services/billing/main.go", "services/billing/util.go"])
    assert "Microservices" not in _names(single, "architectural")


def test_design_patterns_and_confidence() -> None:
    result = _detect(["app/user_repository.py", "app/container.py"])

    assert _names(result, "design") == ["Repository", "Dependency Injection"]
    assert result["confidence"] == 0.55


def test_no_patterns_means_zero_confidence() -> None:
    result = _detect(["main.py"])

    assert result == {"architectural": [], "design": [], "confidence": 0.0}


def test_custom_definitions_extend_the_registry() -> None:
    definition = PatternDefinition(
        name="Monorepo",
        category="organizational",
        confidence=0.9,
        predicate=lambda ctx: ctx.count("files") >= 2,
        evidence="{files} files, {unknown_key} unknown",
    )

    result = _detect(["a.py", "b.py"], PatternDetector([definition]))

    assert result["organizational"] == [
        {"name": "Monorepo", "confidence": 0.9, "evidence": "2 files, 0 unknown", "description": ""}
    ]
    assert result["confidence"] == 0.9
