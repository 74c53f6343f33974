"""Heuristic mapping of files to architectural layers.

Rules are evaluated in priority order and the first layer with any path or
content hit wins. A file that would match several layers gets the
highest-priority one, not the best-scoring one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from ..models import LAYERS, SourceFile


@dataclass(frozen=True)
class LayerRule:
    """Path fragments and content vocabulary that identify one layer."""

    layer: str
    path_fragments: Sequence[str]
    content_keywords: Sequence[str]

    def matches_path(self, path: str) -> bool:
        normalized = "/" + path.replace("\\", "/").lower()
        return any(fragment in normalized for fragment in self.path_fragments)

    def matches_content(self, lowered: str) -> bool:
        # Plain substring match so compound names like UserService still count.
        return any(keyword.lower() in lowered for keyword in self.content_keywords)


DEFAULT_RULES: Sequence[LayerRule] = (
    LayerRule(
        layer="presentation",
        path_fragments=("/ui/", "/components/", "/views/", "/pages/", "/templates/", "/public/"),
        content_keywords=("react", "vue", "angular", "jsx", "tsx", "html", "css", "scss"),
    ),
    LayerRule(
        layer="business",
        path_fragments=("/services/", "/usecases/", "/interactors/", "/business/", "/logic/", "/handlers/"),
        content_keywords=("service", "usecase", "business logic", "handler", "controller", "middleware"),
    ),
    LayerRule(
        layer="data",
        path_fragments=("/models/", "/entities/", "/repositories/", "/dao/", "/database/", "/migrations/"),
        content_keywords=("model", "entity", "repository", "database", "schema", "migration"),
    ),
    LayerRule(
        layer="infrastructure",
        path_fragments=("/config/", "/utils/", "/lib/", "/helpers/", "/infrastructure/", "/external/"),
        content_keywords=("config", "utility", "helper", "infrastructure", "external service", "api client"),
    ),
)


class LayerClassifier:
    """Assigns presentation/business/data/infrastructure/unidentified to files."""

    def __init__(self, rules: Iterable[LayerRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def classify(self, path: str, content: str = "") -> str:
        lowered = content.lower()
        for rule in self.rules:
            if rule.matches_path(path) or rule.matches_content(lowered):
                return rule.layer
        return "unidentified"

    def group(self, files: Iterable[SourceFile]) -> Dict[str, List[str]]:
        """Return every layer name mapped to the paths classified into it."""
        layers: Dict[str, List[str]] = {layer: [] for layer in LAYERS}
        for source in files:
            layers.setdefault(self.classify(source.path, source.content), []).append(source.path)
        return layers


__all__ = ["DEFAULT_RULES", "LayerClassifier", "LayerRule"]
