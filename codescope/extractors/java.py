"""Java symbol extraction."""

from __future__ import annotations

import re
from typing import List, Optional, Set, Tuple

from ..errors import ExtractionError
from ..models import Symbol
from .base import (
    SymbolExtractor,
    collapse,
    count_decisions,
    find_block_end,
    line_number,
    mask_literals,
    match_paren,
    preceding_annotations,
    should_include,
    split_parameters,
    symbol_id,
)

_TYPE_MODIFIERS = r"(?:(?:public|private|protected|abstract|final|static|sealed|non-sealed|strictfp)\s+)*"
_METHOD_MODIFIERS = (
    r"(?:(?:public|private|protected|static|final|abstract|synchronized|native|default|strictfp)\s+)*"
)
_INLINE_ANNOTATIONS = r"(?:@[\w.]+(?:\([^)]*\))?\s+)*"

_TYPE = re.compile(
    rf"(?<![\w.@])(?P<mods>{_TYPE_MODIFIERS})(?P<kind>class|interface|enum|record)\s+(?P<name>\w+)"
    r"(?:\s*<[^{(]*?>)?(?:\s*\((?P<components>[^)]*)\))?"
    r"(?:\s+extends\s+(?P<extends>[^{]+?))?(?:\s+implements\s+(?P<implements>[^{]+?))?"
    r"(?:\s+permits\s+[^{]+?)?\s*\{"
)
_METHOD = re.compile(
    rf"^[ \t]*{_INLINE_ANNOTATIONS}(?P<mods>{_METHOD_MODIFIERS})(?:<[^>]+>\s+)?"
    r"(?P<returns>[\w.$]+(?:\s*<[^;{()]*?>)?(?:\s*\[\s*\])*)\s+(?P<name>[A-Za-z_$][\w$]*)\s*\(",
    re.M,
)
_CONSTRUCTOR = re.compile(
    rf"^[ \t]*{_INLINE_ANNOTATIONS}(?P<mods>(?:(?:public|private|protected)\s+)*)"
    r"(?P<name>[A-Z][\w$]*)\s*\(",
    re.M,
)
_AFTER_PARAMS = re.compile(r"\s*(?:throws\s+(?P<throws>[\w.$,\s]+?))?\s*(?P<term>[{;])")
_IMPORT = re.compile(r"^[ \t]*import\s+(?:static\s+)?(?P<path>[\w.$]+?)(?P<wildcard>\.\*)?\s*;", re.M)

_DECISIONS = [
    re.compile(r"\bif\b"),
    re.compile(r"\bfor\b"),
    re.compile(r"\bwhile\b"),
    re.compile(r"\bcase\b"),
    re.compile(r"\bcatch\b"),
    re.compile(r"&&"),
    re.compile(r"\|\|"),
    re.compile(r"(?<!\?)\?(?=\s)"),
]

# Words that can precede an identifier and "(" inside method bodies.
_STATEMENT_WORDS = frozenset({"return", "new", "throw", "else", "case", "package", "import", "yield"})
_TYPE_KEYWORDS = frozenset({"class", "interface", "enum", "record"})
_VISIBILITY_WORDS = frozenset({"public", "private", "protected"})

_RESERVED = frozenset(
    {
        "if", "for", "while", "switch", "catch", "synchronized", "return", "new", "throw",
        "else", "do", "try", "finally", "case", "default", "super", "this", "assert",
    }
)


def _mask(content: str) -> str:
    return mask_literals(content, quotes=('"""', '"', "'"), multiline_quotes=('"""',))


def _visibility(mods: str) -> str:
    words = mods.split()
    for candidate in ("public", "private", "protected"):
        if candidate in words:
            return candidate
    return "package"


def _param_names(text: str) -> List[str]:
    names: List[str] = []
    for piece in split_parameters(text):
        tokens = [token for token in piece.split() if not token.startswith("@")]
        if tokens:
            names.append(tokens[-1].lstrip("."))
    return names


def _split_types(text: Optional[str]) -> List[str]:
    return [collapse(part) for part in split_parameters(text)] if text else []


class JavaExtractor(SymbolExtractor):
    """Finds classes, interfaces, enums, records, methods and constructors."""

    language = "java"

    def extract_symbols(self, path: str, content: str) -> List[Symbol]:
        masked = _mask(content)
        lines = content.split("\n")
        found: List[Tuple[int, Symbol]] = []
        seen: Set[int] = set()
        type_names: Set[str] = set()

        for match in _TYPE.finditer(masked):
            type_names.add(match.group("name"))
            symbol = self._type_symbol(path, content, masked, lines, match)
            if symbol is not None:
                found.append((match.start("name"), symbol))

        for match in _METHOD.finditer(masked):
            returns = match.group("returns")
            # "public Foo(" reads as a method returning "public" and "record Foo(" as one returning
            # "record"; constructors and records are matched elsewhere.
            if returns in _STATEMENT_WORDS or returns in _TYPE_KEYWORDS or returns in _VISIBILITY_WORDS:
                continue
            symbol = self._method_symbol(path, content, masked, lines, match, "method", returns)
            if symbol is not None and match.start("name") not in seen:
                seen.add(match.start("name"))
                found.append((match.start("name"), symbol))

        for match in _CONSTRUCTOR.finditer(masked):
            if match.group("name") not in type_names or match.start("name") in seen:
                continue
            symbol = self._method_symbol(path, content, masked, lines, match, "constructor", None)
            if symbol is not None:
                seen.add(match.start("name"))
                found.append((match.start("name"), symbol))

        found.sort(key=lambda item: item[0])
        return [symbol for _, symbol in found]

    def extract_dependencies(self, content: str) -> Set[str]:
        masked = mask_literals(content, quotes=('"""', '"', "'"), multiline_quotes=('"""',), keep_strings=True)
        packages: Set[str] = set()
        for match in _IMPORT.finditer(masked):
            target = match.group("path")
            if not match.group("wildcard") and "." in target:
                target = target.rsplit(".", 1)[0]
            packages.add(target)
        return packages

    def _type_symbol(self, path, content, masked, lines, match) -> Optional[Symbol]:
        name = match.group("name")
        mods = match.group("mods") or ""
        visibility = _visibility(mods)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None
        try:
            end = find_block_end(masked, match.end() - 1)
        except ExtractionError:
            return None
        kind = match.group("kind")
        line = line_number(content, match.start("name"))
        extends = _split_types(match.group("extends"))
        metadata = {
            "modifiers": mods.split(),
            "annotations": preceding_annotations(lines, line - 1),
            "extends": extends,
            "implements": _split_types(match.group("implements")),
        }
        if match.group("components") is not None:
            metadata["components"] = _param_names(content[match.start("components") : match.end("components")])
        return Symbol(
            id=symbol_id(path, name, line),
            name=name,
            kind=kind,
            file_path=path,
            line=line,
            signature=collapse(content[match.start() : match.end() - 1]),
            visibility=visibility,
            complexity=1 if kind in ("interface", "record", "enum") else count_decisions(
                masked[match.end() - 1 : end + 1], _DECISIONS
            ),
            language=self.language,
            metadata=metadata,
        )

    def _method_symbol(self, path, content, masked, lines, match, kind, returns) -> Optional[Symbol]:
        name = match.group("name")
        mods = match.group("mods") or ""
        visibility = _visibility(mods)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None
        try:
            close = match_paren(masked, match.end() - 1)
            tail = _AFTER_PARAMS.match(masked, close + 1)
            if tail is None:
                return None
            abstract = tail.group("term") == ";"
            if abstract and kind == "constructor":
                return None
            end = close if abstract else find_block_end(masked, tail.end() - 1)
        except ExtractionError:
            return None

        line = line_number(content, match.start("name"))
        body = "" if abstract else masked[tail.end() - 1 : end + 1]
        return Symbol(
            id=symbol_id(path, name, line),
            name=name,
            kind=kind,
            file_path=path,
            line=line,
            signature=collapse(content[match.start() : tail.start("term")]),
            visibility=visibility,
            complexity=count_decisions(body, _DECISIONS),
            language=self.language,
            metadata={
                "parameters": _param_names(content[match.end() : close]),
                "modifiers": mods.split(),
                "annotations": preceding_annotations(lines, line - 1),
                "return_type": collapse(returns) if returns else None,
                "throws": _split_types(tail.group("throws")),
                "abstract": abstract,
            },
        )


__all__ = ["JavaExtractor"]
