"""Per-language symbol extractors and the language lookup table."""

from __future__ import annotations

from typing import Callable, Dict, List, Set

from ..models import SourceFile, Symbol
from .base import ExtractorOptions, SymbolExtractor
from .go import GoExtractor
from .java import JavaExtractor
from .python import PythonExtractor
from .typescript import TypeScriptExtractor

_EXTRACTORS: Dict[str, Callable[[ExtractorOptions], SymbolExtractor]] = {
    "python": PythonExtractor,
    "typescript": TypeScriptExtractor,
    "javascript": TypeScriptExtractor,
    "go": GoExtractor,
    "java": JavaExtractor,
}


def supported_languages() -> List[str]:
    return sorted(_EXTRACTORS)


def get_extractor(
    language: str, options: ExtractorOptions | None = None
) -> SymbolExtractor | None:
    """Return an extractor for ``language`` or None when the language has none."""
    factory = _EXTRACTORS.get(language.lower())
    if factory is None:
        return None
    return factory(options or ExtractorOptions())


def extract_file_symbols(
    source: SourceFile, options: ExtractorOptions | None = None
) -> List[Symbol]:
    extractor = get_extractor(source.language, options)
    if extractor is None:
        return []
    return extractor.extract_symbols(source.path, source.content)


def extract_file_dependencies(source: SourceFile) -> Set[str]:
    extractor = get_extractor(source.language)
    if extractor is None:
        return set()
    return extractor.extract_dependencies(source.content)


__all__ = [
    "ExtractorOptions",
    "GoExtractor",
    "JavaExtractor",
    "PythonExtractor",
    "SymbolExtractor",
    "TypeScriptExtractor",
    "extract_file_dependencies",
    "extract_file_symbols",
    "get_extractor",
    "supported_languages",
]
