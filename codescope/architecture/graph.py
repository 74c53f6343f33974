"""File-level dependency graph construction, cycle detection and coupling."""

from __future__ import annotations

import posixpath
import re
from collections import Counter
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set

from ..extractors.base import mask_literals
from ..logging import get_logger
from ..models import (
    CircularDependency,
    DependencyEdge,
    DependencyGraph,
    DependencyInfo,
    DependencyNode,
    SourceFile,
)
from .layers import LayerClassifier

_JS_IMPORT = re.compile(
    r"""(?:\bimport\s+(?:type\s+)?(?:[\w$*{}\s,]+?\s+from\s+)?|\bexport\s+[\w$*{}\s,]+?\s+from\s+|"""
    r"""\brequire\s*\(\s*|\bimport\s*\(\s*)['"]([^'"]+)['"]"""
)
_PY_FROM = re.compile(r"^[ \t]*from[ \t]+(\.+)([\w.]*)[ \t]+import[ \t]+\(?([\w \t,*]+)", re.M)
_PY_IMPORT = re.compile(r"^[ \t]*import[ \t]+([\w.]+)", re.M)
_GO_IMPORT_SINGLE = re.compile(r"^[ \t]*import[ \t]+(?:[\w.]+[ \t]+)?\"([^\"]+)\"", re.M)
_GO_IMPORT_BLOCK = re.compile(r"^[ \t]*import[ \t]*\(([^)]*)\)", re.M)
_QUOTED = re.compile(r"\"([^\"]+)\"")

RESOLVE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".py", ".go")
_INDEX_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
_JS_SUFFIXES = (".js", ".jsx", ".mjs", ".cjs")
_VENDOR_DIRS = frozenset({"node_modules", "vendor"})

COUPLING_THRESHOLDS = ((2.0, "loose"), (5.0, "moderate"), (10.0, "tight"))


def coupling_strength(mean_out_degree: float) -> str:
    for limit, label in COUPLING_THRESHOLDS:
        if mean_out_degree < limit:
            return label
    return "very_tight"


def import_targets(source: SourceFile) -> List[str]:
    """Return raw import specifiers in order of appearance, without duplicates."""
    language = source.language
    content = _strip_comments(language, source.content)
    targets: List[str] = []
    if language in ("javascript", "typescript"):
        targets = [match.group(1) for match in _JS_IMPORT.finditer(content)]
    elif language == "python":
        targets = list(_python_targets(content))
    elif language == "go":
        targets = [match.group(1) for match in _GO_IMPORT_SINGLE.finditer(content)]
        for block in _GO_IMPORT_BLOCK.finditer(content):
            targets.extend(match.group(1) for match in _QUOTED.finditer(block.group(1)))
    return list(dict.fromkeys(targets))


def _strip_comments(language: str, content: str) -> str:
    if language == "python":
        # Relative imports never live inside string literals, so docstrings go too.
        return mask_literals(
            content,
            line_comment="#",
            block_comment=None,
            quotes=('"""', "'''", '"', "'"),
            multiline_quotes=('"""', "'''"),
        )
    if language in ("javascript", "typescript", "go"):
        return mask_literals(content, keep_strings=True)
    return content


def _python_targets(content: str) -> Iterator[str]:
    for match in _PY_FROM.finditer(content):
        dots, module, names = match.groups()
        prefix = "./" if len(dots) == 1 else "../" * (len(dots) - 1)
        if module:
            yield prefix + module.replace(".", "/")
            continue
        for name in names.split(","):
            name = name.strip().split()[0] if name.strip() else ""
            if name and name != "*":
                yield prefix + name
    for match in _PY_IMPORT.finditer(content):
        yield match.group(1)


def resolve_import(source_path: str, target: str, node_ids: Set[str]) -> Optional[str]:
    """Resolve a path-relative import to an existing node id, or None."""
    if not target.startswith(("./", "../")):
        return None
    joined = posixpath.normpath(posixpath.join(posixpath.dirname(source_path), target))
    if joined == ".." or joined.startswith("../"):
        return None
    for candidate in _candidates(joined):
        if _VENDOR_DIRS.intersection(candidate.split("/")):
            continue
        if candidate in node_ids:
            return candidate
    return None


def _candidates(joined: str) -> Iterator[str]:
    directory = "" if joined == "." else f"{joined}/"
    if joined != ".":
        yield joined
        for ext in RESOLVE_EXTENSIONS:
            yield joined + ext
    for ext in _INDEX_EXTENSIONS:
        yield f"{directory}index{ext}"
    yield f"{directory}__init__.py"
    if joined.endswith(_JS_SUFFIXES):
        stem = joined.rsplit(".", 1)[0]
        yield stem + ".ts"
        yield stem + ".tsx"


def detect_cycles(
    node_ids: Sequence[str], adjacency: Dict[str, List[str]]
) -> List[CircularDependency]:
    """Iterative DFS reporting one cycle per back edge.

    A node joins the global visited set once fully explored, so cycles that
    only pass through already-explored regions are not reported again. This
    is not an elementary-cycle enumeration.
    """
    visited: Set[str] = set()
    cycles: List[CircularDependency] = []

    for root in node_ids:
        if root in visited:
            continue
        path: List[str] = [root]
        on_path: Set[str] = {root}
        frontier: List[Iterator[str]] = [iter(adjacency.get(root, ()))]

        while frontier:
            advanced = False
            for neighbor in frontier[-1]:
                if neighbor in on_path:
                    cycle = path[path.index(neighbor) :]
                    cycles.append(
                        CircularDependency(
                            nodes=list(cycle),
                            description=" -> ".join(cycle + [neighbor]),
                        )
                    )
                    continue
                if neighbor in visited:
                    continue
                path.append(neighbor)
                on_path.add(neighbor)
                frontier.append(iter(adjacency.get(neighbor, ())))
                advanced = True
                break
            if not advanced:
                frontier.pop()
                finished = path.pop()
                on_path.discard(finished)
                visited.add(finished)

    return cycles


class DependencyGraphBuilder:
    """Builds the file-level import graph for a set of source files."""

    def __init__(self, classifier: LayerClassifier | None = None) -> None:
        self.classifier = classifier or LayerClassifier()
        self.logger = get_logger("architecture.graph")

    def build(
        self,
        files: Iterable[SourceFile],
        dependency_hints: Iterable[DependencyInfo] | None = None,
    ) -> DependencyGraph:
        files = list(files)
        graph = DependencyGraph()
        for source in files:
            graph.nodes[source.path] = DependencyNode(
                id=source.path, layer=self.classifier.classify(source.path, source.content)
            )

        node_ids = set(graph.nodes)
        adjacency: Dict[str, List[str]] = {node_id: [] for node_id in graph.nodes}
        for source in files:
            for target in import_targets(source):
                resolved = resolve_import(source.path, target, node_ids)
                if resolved is None or resolved == source.path or resolved in adjacency[source.path]:
                    continue
                adjacency[source.path].append(resolved)
                graph.edges.append(DependencyEdge(source=source.path, target=resolved))
                graph.nodes[source.path].out_degree += 1

        graph.cycles = detect_cycles(list(graph.nodes), adjacency)
        mean = len(graph.edges) / len(graph.nodes) if graph.nodes else 0.0
        graph.coupling_strength = coupling_strength(mean)
        self.logger.debug(
            "Built graph with %d nodes, %d edges, %d cycles",
            len(graph.nodes),
            len(graph.edges),
            len(graph.cycles),
        )
        return graph


def summarize(graph: DependencyGraph, limit: int = 10) -> Dict[str, Any]:
    """Aggregate statistics used by several operation payloads."""
    in_degree = Counter(edge.target for edge in graph.edges)
    node_count = len(graph.nodes)
    return {
        "nodes": node_count,
        "edges": len(graph.edges),
        "cycles": len(graph.cycles),
        "average_out_degree": round(len(graph.edges) / node_count, 2) if node_count else 0.0,
        "coupling_strength": graph.coupling_strength,
        "most_depended_on": [
            {"file": path, "dependents": count} for path, count in in_degree.most_common(limit)
        ],
        "most_dependent": [
            {"file": node.id, "dependencies": node.out_degree}
            for node in sorted(graph.nodes.values(), key=lambda item: (-item.out_degree, item.id))[:limit]
            if node.out_degree
        ],
        "isolated": sorted(
            node.id for node in graph.nodes.values() if not node.out_degree and not in_degree[node.id]
        ),
    }


__all__ = [
    "COUPLING_THRESHOLDS",
    "DependencyGraphBuilder",
    "coupling_strength",
    "detect_cycles",
    "import_targets",
    "resolve_import",
    "summarize",
]
