"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from codescope.cli import _build_parser, main
from codescope.models import OPERATIONS
from tests._fixtures.repo_builder import RepoBuilder


def _project(repo_builder: RepoBuilder) -> Path:
    repo_builder.write({"app/main.py": "def main():\n    return 1\n"})
    return repo_builder.path()


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "analyze", "quality"])
    assert args.verbose is True
    assert args.command == "analyze"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["health", "--verbose"])
    assert args.verbose is True
    assert args.command == "health"


def test_cli_rejects_unknown_scope() -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args(["analyze", "quality", "--scope", "weekly"])
    assert excinfo.value.code == 2


def test_analyze_prints_the_envelope(repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(repo_builder)

    main(["analyze", "quality", str(root), "--scope", "module"])

    envelope = json.loads(capsys.readouterr().out)
    assert envelope["success"] is True
    assert envelope["operation"] == "quality"
    assert envelope["metadata"]["scope"] == "module"
    assert envelope["metadata"]["filesAnalyzed"] == 1


def test_analyze_writes_output_file(
    repo_builder: RepoBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _project(repo_builder)
    target = tmp_path / "result.json"

    main(["analyze", "architecture", str(root), "--output", str(target), "--indent", "0"])

    assert "Result written to" in capsys.readouterr().out
    envelope = json.loads(target.read_text(encoding="utf-8"))
    assert envelope["data"]["overview"]["total_files"] == 1


def test_failed_analysis_exits_non_zero(repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(repo_builder)

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", "security", str(root)])

    assert excinfo.value.code == 1
    envelope = json.loads(capsys.readouterr().out)
    assert envelope["success"] is False
    assert "security" in envelope["error"]


def test_health_command(
    repo_builder: RepoBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _project(repo_builder)

    main(["health", str(root)])
    assert capsys.readouterr().out.strip() == "ok"

    with pytest.raises(SystemExit) as excinfo:
        main(["health", str(tmp_path / "missing")])
    assert excinfo.value.code == 1
    assert capsys.readouterr().out.strip() == "failed"


def test_operations_command(capsys: pytest.CaptureFixture[str]) -> None:
    main(["operations"])

    assert capsys.readouterr().out.split() == list(OPERATIONS)


def test_broken_config_is_reported(repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(repo_builder)
    (root / ".codescope.yml").write_text("scope: weekly\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", "quality", str(root)])

    assert excinfo.value.code == 1
    assert "Invalid scope" in capsys.readouterr().err
