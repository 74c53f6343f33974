"""Registry-driven detection of coarse architectural and design patterns."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from ..models import DependencyGraph, SourceFile


@dataclass
class PatternContext:
    """Counts derived once from the inputs and shared by every predicate."""

    files: Sequence[SourceFile]
    layers: Mapping[str, Sequence[str]]
    graph: DependencyGraph | None = None
    stats: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        files: Iterable[SourceFile],
        layers: Mapping[str, Sequence[str]],
        graph: DependencyGraph | None = None,
    ) -> "PatternContext":
        files = list(files)
        names = [posixpath.basename(source.path).lower() for source in files]
        paths = ["/" + source.path.lower() for source in files]

        def _count(fragments: Sequence[str], haystack: Sequence[str]) -> int:
            return sum(1 for item in haystack if any(fragment in item for fragment in fragments))

        service_dirs = set()
        for path in paths:
            parts = path.strip("/").split("/")
            for index, part in enumerate(parts[:-2]):
                if part in ("services", "microservices"):
                    service_dirs.add("/".join(parts[: index + 2]))

        stats = {layer: len(members) for layer, members in layers.items()}
        stats.update(
            files=len(files),
            controllers=_count(("controller",), paths),
            models=_count(("model",), paths),
            views=_count(("view", "template"), paths),
            service_dirs=len(service_dirs),
            repositories=_count(("repository", "repositories", "repo."), names),
            injectors=_count(("container", "injector", "provider", "inject"), names),
            edges=len(graph.edges) if graph else 0,
            cycles=len(graph.cycles) if graph else 0,
        )
        return cls(files=files, layers=layers, graph=graph, stats=stats)

    def count(self, key: str) -> int:
        return self.stats.get(key, 0)


@dataclass(frozen=True)
class PatternDefinition:
    """One detectable pattern; the detector never branches on names."""

    name: str
    category: str
    confidence: float
    predicate: Callable[[PatternContext], bool]
    evidence: str
    description: str = ""

    def render_evidence(self, context: PatternContext) -> str:
        return self.evidence.format_map(_Defaulting(context.stats))


class _Defaulting(dict):
    def __missing__(self, key: str) -> int:
        return 0


DEFAULT_PATTERNS: Sequence[PatternDefinition] = (
    PatternDefinition(
        name="Layered Architecture",
        category="architectural",
        confidence=0.8,
        predicate=lambda ctx: all(ctx.count(layer) > 0 for layer in ("presentation", "business", "data")),
        evidence="{presentation} presentation, {business} business, {data} data layer files",
        description="Clear separation between presentation, business and data concerns",
    ),
    PatternDefinition(
        name="MVC",
        category="architectural",
        confidence=0.7,
        predicate=lambda ctx: all(ctx.count(key) > 0 for key in ("controllers", "models", "views")),
        evidence="{controllers} controllers, {models} models, {views} views",
        description="Model, view and controller responsibilities live in separate files",
    ),
    PatternDefinition(
        name="Microservices",
        category="architectural",
        confidence=0.6,
        predicate=lambda ctx: ctx.count("service_dirs") >= 2,
        evidence="{service_dirs} service directories",
        description="Independently organised services under a shared services root",
    ),
    PatternDefinition(
        name="Repository",
        category="design",
        confidence=0.6,
        predicate=lambda ctx: ctx.count("repositories") > 0,
        evidence="{repositories} repository files",
        description="Data access is wrapped behind repository objects",
    ),
    PatternDefinition(
        name="Dependency Injection",
        category="design",
        confidence=0.5,
        predicate=lambda ctx: ctx.count("injectors") > 0,
        evidence="{injectors} container/provider files",
        description="Dependencies are wired through containers or providers",
    ),
)


class PatternDetector:
    """Evaluates every registered pattern definition against the project."""

    def __init__(self, definitions: Iterable[PatternDefinition] = DEFAULT_PATTERNS) -> None:
        self.definitions = tuple(definitions)

    def detect_patterns(
        self,
        files: Iterable[SourceFile],
        layers: Mapping[str, Sequence[str]],
        graph: DependencyGraph | None = None,
    ) -> Dict[str, Any]:
        context = PatternContext.build(files, layers, graph)
        detected: Dict[str, List[Dict[str, Any]]] = {"architectural": [], "design": []}
        confidences: List[float] = []
        for definition in self.definitions:
            if not definition.predicate(context):
                continue
            detected.setdefault(definition.category, []).append(
                {
                    "name": definition.name,
                    "confidence": definition.confidence,
                    "evidence": definition.render_evidence(context),
                    "description": definition.description,
                }
            )
            confidences.append(definition.confidence)

        confidence = round(sum(confidences) / len(confidences), 3) if confidences else 0.0
        return {**detected, "confidence": confidence}


__all__ = ["DEFAULT_PATTERNS", "PatternContext", "PatternDefinition", "PatternDetector"]
