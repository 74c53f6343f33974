"""Dependency hints read from package manifests at the project root."""

from __future__ import annotations

import json
import re
import time
import tomllib
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Set, Tuple

from ..logging import get_logger
from ..models import DependencyInfo
from .base import Collector

_REQUIREMENT_NAME = re.compile(r"^([A-Za-z0-9][A-Za-z0-9._-]*)(\[[^\]]*\])?\s*(.*)$")

# Python dependency helpers


def parse_requirements(text: str, dep_type: str = "runtime") -> List[DependencyInfo]:
    deps: List[DependencyInfo] = []
    for line in text.splitlines():
        stripped = line.split("#", 1)[0].strip()
        if not stripped or stripped.startswith(("-", "git+", "http")):
            continue
        dep = _python_requirement(stripped, dep_type)
        if dep is not None:
            deps.append(dep)
    return deps


def _python_requirement(spec: str, dep_type: str) -> DependencyInfo | None:
    match = _REQUIREMENT_NAME.match(spec.split(";", 1)[0].strip())
    if not match:
        return None
    name = match.group(1)
    if name.lower() == "python":
        return None
    version = match.group(3).strip() or "*"
    return DependencyInfo(name=name, version=version, type=dep_type, source="python")


def parse_pyproject(text: str) -> List[DependencyInfo]:
    data = tomllib.loads(text)
    deps: List[DependencyInfo] = []

    project = data.get("project")
    if isinstance(project, dict):
        for spec in project.get("dependencies", []) or []:
            if isinstance(spec, str):
                dep = _python_requirement(spec, "runtime")
                if dep is not None:
                    deps.append(dep)
        optional = project.get("optional-dependencies", {}) or {}
        if isinstance(optional, dict):
            for values in optional.values():
                for spec in values or []:
                    if isinstance(spec, str):
                        dep = _python_requirement(spec, "optional")
                        if dep is not None:
                            deps.append(dep)

    tool = data.get("tool")
    poetry = tool.get("poetry", {}) if isinstance(tool, dict) else {}
    if isinstance(poetry, dict):
        deps.extend(_poetry_table(poetry.get("dependencies"), "runtime"))
        deps.extend(_poetry_table(poetry.get("dev-dependencies"), "dev"))
        groups = poetry.get("group", {})
        if isinstance(groups, dict):
            for group in groups.values():
                if isinstance(group, dict):
                    deps.extend(_poetry_table(group.get("dependencies"), "dev"))
    return deps


def _poetry_table(table: Any, dep_type: str) -> List[DependencyInfo]:
    if not isinstance(table, dict):
        return []
    deps: List[DependencyInfo] = []
    for name, spec in table.items():
        if name.lower() == "python":
            continue
        deps.append(
            DependencyInfo(name=name, version=_version_of(spec), type=dep_type, source="python")
        )
    return deps


# Node.js dependency helpers

_NPM_SECTIONS = (
    ("dependencies", "runtime"),
    ("devDependencies", "dev"),
    ("peerDependencies", "peer"),
    ("optionalDependencies", "optional"),
)


def parse_package_json(text: str) -> List[DependencyInfo]:
    data = json.loads(text)
    if not isinstance(data, dict):
        return []
    deps: List[DependencyInfo] = []
    for key, dep_type in _NPM_SECTIONS:
        section = data.get(key, {})
        if isinstance(section, dict):
            for name, version in section.items():
                deps.append(
                    DependencyInfo(name=name, version=str(version), type=dep_type, source="npm")
                )
    return deps


# Go and Rust dependency helpers

_GO_REQUIRE = re.compile(r"^\s*([^\s()]+)\s+(v[^\s]+)")


def parse_go_mod(text: str) -> List[DependencyInfo]:
    deps: List[DependencyInfo] = []
    in_block = False
    for raw_line in text.splitlines():
        line = raw_line.split("//", 1)[0].strip()
        if not line:
            continue
        if line.startswith("require ("):
            in_block = True
            continue
        if in_block and line == ")":
            in_block = False
            continue
        if line.startswith("require "):
            line = line[len("require ") :]
        elif not in_block:
            continue
        match = _GO_REQUIRE.match(line)
        if match:
            dep_type = "optional" if "// indirect" in raw_line else "runtime"
            deps.append(
                DependencyInfo(name=match.group(1), version=match.group(2), type=dep_type, source="go")
            )
    return deps


def parse_cargo_toml(text: str) -> List[DependencyInfo]:
    data = tomllib.loads(text)
    deps: List[DependencyInfo] = []
    for key, dep_type in (
        ("dependencies", "runtime"),
        ("dev-dependencies", "dev"),
        ("build-dependencies", "build"),
    ):
        table = data.get(key, {})
        if isinstance(table, dict):
            for name, spec in table.items():
                deps.append(
                    DependencyInfo(name=name, version=_version_of(spec), type=dep_type, source="cargo")
                )
    return deps


# Java dependency helpers


def parse_pom(text: str) -> List[DependencyInfo]:
    root = ET.fromstring(text)
    namespace = _detect_xml_namespace(root)

    def _tag(name: str) -> str:
        return f"{{{namespace}}}{name}" if namespace else name

    deps: List[DependencyInfo] = []
    for dep in root.iter(_tag("dependency")):
        group = dep.findtext(_tag("groupId"), default="").strip()
        artifact = dep.findtext(_tag("artifactId"), default="").strip()
        if not (group and artifact):
            continue
        version = dep.findtext(_tag("version"), default="").strip() or "*"
        scope = dep.findtext(_tag("scope"), default="").strip()
        dep_type = "dev" if scope == "test" else "optional" if scope == "provided" else "runtime"
        deps.append(
            DependencyInfo(name=f"{group}:{artifact}", version=version, type=dep_type, source="maven")
        )
    return deps


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


_GRADLE_DEP = re.compile(
    r"\b(implementation|api|compile|runtimeOnly|compileOnly|testImplementation|testRuntimeOnly)\b"
    r"\s*\(?\s*['\"]([\w\-.]+):([\w\-.]+)(?::([\w\-.+]+))?['\"]"
)


def parse_gradle(text: str) -> List[DependencyInfo]:
    deps: List[DependencyInfo] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("//"):
            continue
        match = _GRADLE_DEP.search(stripped)
        if not match:
            continue
        configuration, group, artifact, version = match.groups()
        if configuration.startswith("test"):
            dep_type = "dev"
        elif configuration == "compileOnly":
            dep_type = "optional"
        else:
            dep_type = "runtime"
        deps.append(
            DependencyInfo(
                name=f"{group}:{artifact}", version=version or "*", type=dep_type, source="gradle"
            )
        )
    return deps


def _version_of(spec: Any) -> str:
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict):
        version = spec.get("version")
        if isinstance(version, str):
            return version
    return "*"


_MANIFEST_PARSERS: Tuple[Tuple[str, Callable[[str], List[DependencyInfo]]], ...] = (
    ("package.json", parse_package_json),
    ("requirements.txt", parse_requirements),
    ("requirements-dev.txt", lambda text: parse_requirements(text, "dev")),
    ("pyproject.toml", parse_pyproject),
    ("go.mod", parse_go_mod),
    ("Cargo.toml", parse_cargo_toml),
    ("pom.xml", parse_pom),
    ("build.gradle", parse_gradle),
    ("build.gradle.kts", parse_gradle),
)

_PARSE_ERRORS = (
    OSError,
    ValueError,
    tomllib.TOMLDecodeError,
    ET.ParseError,
)


class DependencyCollector(Collector):
    """Reads declared third-party dependencies from root-level manifests."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.logger = get_logger("collectors.dependencies")

    def collect(self, scope: str) -> Dict[str, Any]:
        started = time.perf_counter()
        manifests: List[str] = []
        deps: List[DependencyInfo] = []
        seen: Set[Tuple[str, str, str]] = set()

        for filename, parser in _MANIFEST_PARSERS:
            path = self.root / filename
            if not path.is_file():
                continue
            try:
                parsed = parser(path.read_text(encoding="utf-8"))
            except _PARSE_ERRORS as exc:
                self.logger.warning("Could not parse %s: %s", filename, exc)
                continue
            manifests.append(filename)
            for dep in _dedupe(parsed, seen):
                deps.append(dep)

        return {
            "dependencies": deps,
            "metadata": {
                "total_dependencies": len(deps),
                "manifests": manifests,
                "collection_time_ms": int((time.perf_counter() - started) * 1000),
                "scope": scope,
            },
        }


def _dedupe(
    deps: Iterable[DependencyInfo], seen: Set[Tuple[str, str, str]]
) -> Iterable[DependencyInfo]:
    for dep in deps:
        key = (dep.name, dep.version, dep.source)
        if key in seen:
            continue
        seen.add(key)
        yield dep


__all__ = [
    "DependencyCollector",
    "parse_cargo_toml",
    "parse_go_mod",
    "parse_gradle",
    "parse_package_json",
    "parse_pom",
    "parse_pyproject",
    "parse_requirements",
]
