"""Dependencies operation: declared manifests against the imports actually used."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Set

from ..architecture import DependencyGraphBuilder, summarize
from ..extractors import extract_file_dependencies
from ..models import AnalysisConfig, DependencyInfo, RawProjectData
from .base import Analyzer

# Distribution names whose import name differs.
PYTHON_IMPORT_ALIASES = {
    "pyyaml": "yaml",
    "beautifulsoup4": "bs4",
    "pillow": "pil",
    "scikit-learn": "sklearn",
    "python-dateutil": "dateutil",
    "opencv-python": "cv2",
    "protobuf": "google",
    "attrs": "attr",
}

_UNPINNED = frozenset({"", "*", "latest"})
# Ecosystems whose imports the extractors can see.
_CHECKED_SOURCES = frozenset({"python", "npm", "go", "maven", "gradle"})
LARGE_FOOTPRINT = 50


def _normalize_python(name: str) -> str:
    lowered = name.lower()
    return PYTHON_IMPORT_ALIASES.get(lowered, lowered).replace("-", "_").replace(".", "_")


def _js_package(specifier: str) -> str:
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def is_imported(dependency: DependencyInfo, imports: Dict[str, Set[str]]) -> bool:
    source = dependency.source
    if source == "python":
        roots = {target.split(".", 1)[0].lower() for target in imports.get("python", ())}
        return _normalize_python(dependency.name) in roots
    if source == "npm":
        packages = {
            _js_package(target)
            for language in ("javascript", "typescript")
            for target in imports.get(language, ())
        }
        return dependency.name in packages or f"node:{dependency.name}" in packages
    if source == "go":
        return any(
            target == dependency.name or target.startswith(dependency.name + "/")
            for target in imports.get("go", ())
        )
    if source in ("maven", "gradle"):
        group = dependency.name.split(":", 1)[0]
        return any(
            target == group or target.startswith(group + ".") for target in imports.get("java", ())
        )
    return True


def find_unused(dependencies: Iterable[DependencyInfo], imports: Dict[str, Set[str]]) -> List[str]:
    """Runtime and optional dependencies that no source file imports."""
    unused = {
        dependency.name
        for dependency in dependencies
        if dependency.type != "dev"
        and dependency.source in _CHECKED_SOURCES
        and not is_imported(dependency, imports)
    }
    return sorted(unused)


class DependenciesAnalyzer(Analyzer):
    name = "dependencies"

    def analyze(self, data: RawProjectData, config: AnalysisConfig) -> Dict[str, Any]:
        dependencies = data.dependencies
        imports: Dict[str, Set[str]] = {}
        usage: Counter = Counter()
        for source in data.files:
            found = {
                target for target in extract_file_dependencies(source) if not target.startswith(".")
            }
            imports.setdefault(source.language, set()).update(found)
            usage.update(found)

        graph = DependencyGraphBuilder().build(data.files, dependencies)
        unused = find_unused(dependencies, imports)
        unpinned = sorted(
            {dependency.name for dependency in dependencies if dependency.version.strip() in _UNPINNED}
        )
        unchecked = sorted(
            {dependency.name for dependency in dependencies if dependency.source not in _CHECKED_SOURCES}
        )

        return {
            "summary": {
                "total": len(dependencies),
                "by_type": dict(sorted(Counter(dep.type for dep in dependencies).items())),
                "by_source": dict(sorted(Counter(dep.source for dep in dependencies).items())),
            },
            "declared": [
                {"name": dep.name, "version": dep.version, "type": dep.type, "source": dep.source}
                for dep in sorted(dependencies, key=lambda item: (item.source, item.name))
            ],
            "external": [
                {"module": module, "files": count}
                for module, count in sorted(usage.items(), key=lambda item: (-item[1], item[0]))
            ],
            "internal": summarize(graph),
            "unused": unused,
            "unpinned": unpinned,
            "unchecked": unchecked,
            "recommendations": self._recommendations(dependencies, unused, unpinned),
        }

    @staticmethod
    def _recommendations(
        dependencies: List[DependencyInfo], unused: List[str], unpinned: List[str]
    ) -> List[Dict[str, Any]]:
        recommendations: List[Dict[str, Any]] = []
        if unused:
            recommendations.append(
                {
                    "type": "removal",
                    "title": f"Remove {len(unused)} unused dependencies",
                    "description": "Declared packages that no source file imports widen the install surface.",
                    "packages": unused,
                    "priority": "low",
                    "effort": "low",
                }
            )
        if unpinned:
            recommendations.append(
                {
                    "type": "version_pin",
                    "title": f"Pin {len(unpinned)} unversioned dependencies",
                    "description": "Dependencies without a version constraint make builds irreproducible.",
                    "packages": unpinned,
                    "priority": "medium",
                    "effort": "low",
                }
            )
        runtime = sum(1 for dependency in dependencies if dependency.type == "runtime")
        if runtime > LARGE_FOOTPRINT:
            recommendations.append(
                {
                    "type": "footprint",
                    "title": f"Review {runtime} runtime dependencies",
                    "description": "A large runtime dependency set increases upgrade and audit cost.",
                    "packages": [],
                    "priority": "medium",
                    "effort": "medium",
                }
            )
        return recommendations


__all__ = ["DependenciesAnalyzer", "find_unused", "is_imported"]
