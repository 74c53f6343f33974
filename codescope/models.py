"""Core data models shared across codescope components."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

VERSION = "1.0.0"

OPERATIONS = ("architecture", "quality", "dependencies", "metrics", "health", "insights")
SCOPES = ("full", "module", "incremental")
LAYERS = ("presentation", "business", "data", "infrastructure", "unidentified")


@dataclass(frozen=True)
class SourceFile:
    """Snapshot of one project file taken during a collection pass."""

    path: str
    content: str
    language: str
    size: int
    modified: datetime
    hash: str

    @property
    def line_count(self) -> int:
        if not self.content:
            return 0
        return self.content.count("\n") + (0 if self.content.endswith("\n") else 1)


@dataclass
class Symbol:
    """Function, method or type declaration located by an extractor."""

    id: str
    name: str
    kind: str
    file_path: str
    line: int
    signature: str
    visibility: str
    complexity: int
    language: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "file": self.file_path,
            "line": self.line,
            "signature": self.signature,
            "visibility": self.visibility,
            "complexity": self.complexity,
            "language": self.language,
            "metadata": dict(self.metadata),
        }


@dataclass
class DependencyNode:
    id: str
    layer: str
    out_degree: int = 0


@dataclass(frozen=True)
class DependencyEdge:
    source: str
    target: str
    type: str = "direct"


@dataclass
class CircularDependency:
    nodes: List[str]
    description: str


@dataclass
class DependencyGraph:
    """File-level import graph with detected cycles and a coupling label."""

    nodes: Dict[str, DependencyNode] = field(default_factory=dict)
    edges: List[DependencyEdge] = field(default_factory=list)
    cycles: List[CircularDependency] = field(default_factory=list)
    coupling_strength: str = "loose"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [
                {"id": node.id, "layer": node.layer, "outDegree": node.out_degree}
                for node in self.nodes.values()
            ],
            "edges": [
                {"from": edge.source, "to": edge.target, "type": edge.type}
                for edge in self.edges
            ],
            "cycles": [
                {"nodes": list(cycle.nodes), "description": cycle.description}
                for cycle in self.cycles
            ],
            "couplingStrength": self.coupling_strength,
        }


@dataclass
class GitCommit:
    """One commit parsed from `git log --numstat` output."""

    hash: str
    author: str
    email: str
    date: datetime
    message: str
    files: List[str] = field(default_factory=list)
    insertions: int = 0
    deletions: int = 0

    @property
    def files_changed(self) -> int:
        return len(self.files)

    @property
    def lines_changed(self) -> int:
        return self.insertions + self.deletions


@dataclass(frozen=True)
class DependencyInfo:
    """Third-party dependency declared in a package manifest."""

    name: str
    version: str
    type: str
    source: str


@dataclass
class RawProjectData:
    """Merged output of every registered collector for one scope."""

    files: List[SourceFile] = field(default_factory=list)
    commits: List[GitCommit] = field(default_factory=list)
    dependencies: List[DependencyInfo] = field(default_factory=list)
    branches: Dict[str, Any] = field(default_factory=dict)
    contributors: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    collector_metadata: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def data_points(self) -> int:
        return len(self.files) + len(self.commits) + len(self.dependencies)


@dataclass
class AnalysisConfig:
    operation: str
    scope: str = "full"
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AnalysisMetadata:
    analysis_time_ms: int = 0
    data_points: int = 0
    cache_used: bool = False
    files_analyzed: int = 0
    scope: str = "full"
    version: str = VERSION


@dataclass
class AnalysisResult:
    """Envelope returned for every `analyze()` call."""

    operation: str
    timestamp: str
    success: bool
    data: Optional[Dict[str, Any]]
    metadata: AnalysisMetadata
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "operation": self.operation,
            "timestamp": self.timestamp,
            "success": self.success,
            "data": self.data,
            "metadata": {
                "analysisTime": self.metadata.analysis_time_ms,
                "dataPoints": self.metadata.data_points,
                "cacheUsed": self.metadata.cache_used,
                "filesAnalyzed": self.metadata.files_analyzed,
                "scope": self.metadata.scope,
                "version": self.metadata.version,
            },
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload
