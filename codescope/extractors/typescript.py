"""TypeScript and JavaScript symbol extraction using brace balance."""

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

_IDENT = r"[A-Za-z_$][\w$]*"

_FUNCTION = re.compile(
    rf"(?<![\w$.])(?P<export>export\s+(?:default\s+)?)?(?P<async>async\s+)?function\b\s*\*?\s*"
    rf"(?P<name>{_IDENT})\s*(?:<[^>(]*>\s*)?\("
)
_ARROW = re.compile(
    rf"(?<![\w$.])(?P<export>export\s+)?(?:const|let|var)\s+(?P<name>{_IDENT})\s*(?::[^=;]+?)?="
    rf"\s*(?P<async>async\s+)?(?:<[^>(]*>\s*)?(?P<params>\(|{_IDENT}\s*=>)"
)
_CLASS = re.compile(
    rf"(?<![\w$.])(?P<export>export\s+(?:default\s+)?)?(?:abstract\s+)?class\s+(?P<name>{_IDENT})"
    rf"(?:\s*<[^{{]*?>)?(?:\s+extends\s+(?P<extends>[\w$.]+(?:\s*<[^{{]*?>)?))?"
    rf"(?:\s+implements\s+(?P<implements>[^{{]+?))?\s*\{{"
)
_INTERFACE = re.compile(
    rf"(?<![\w$.])(?P<export>export\s+)?interface\s+(?P<name>{_IDENT})(?:\s*<[^{{]*?>)?"
    rf"(?:\s+extends\s+(?P<extends>[^{{]+?))?\s*\{{"
)
_METHOD = re.compile(
    rf"^[ \t]*(?P<mods>(?:(?:public|private|protected|static|async|readonly|abstract|override|get|set)\s+)*)"
    rf"(?P<hash>#)?(?P<name>{_IDENT})\s*(?:<[^>(]*>\s*)?\(",
    re.M,
)
_AFTER_PARAMS = re.compile(r"\s*(?::\s*(?P<returns>[^{;=]+?))?\s*(?P<term>=>|\{|;)")
_PARAM_NAME = re.compile(r"^(?:\.\.\.)?\s*(?:(?:public|private|protected|readonly)\s+)*([A-Za-z_$][\w$]*)")

_IMPORT_FROM = re.compile(r"\bimport\s+(?:type\s+)?[\w$*{}\s,]+?\s+from\s+['\"]([^'\"]+)['\"]")
_IMPORT_BARE = re.compile(r"\bimport\s+['\"]([^'\"]+)['\"]")
_EXPORT_FROM = re.compile(r"\bexport\s+(?:type\s+)?(?:\*|\{[^}]*\})(?:\s+as\s+[\w$]+)?\s+from\s+['\"]([^'\"]+)['\"]")
_REQUIRE = re.compile(r"\brequire\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")
_DYNAMIC_IMPORT = re.compile(r"\bimport\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")

_DECISIONS = [
    re.compile(r"\bif\b"),
    re.compile(r"\bfor\b"),
    re.compile(r"\bwhile\b"),
    re.compile(r"\bcase\b"),
    re.compile(r"\bcatch\b"),
    re.compile(r"&&"),
    re.compile(r"\|\|"),
    re.compile(r"\?\?"),
    re.compile(r"(?<!\?)\?(?=\s)"),
]

_RESERVED = frozenset(
    {
        "if", "for", "while", "switch", "catch", "function", "return", "typeof", "new",
        "delete", "void", "await", "yield", "super", "this", "import", "export", "class",
        "else", "do", "try", "with", "in", "of", "instanceof", "throw", "case", "default",
    }
)


def _mask(content: str, keep_strings: bool = False) -> str:
    return mask_literals(content, keep_strings=keep_strings)


def _visibility(name: str, mods: str = "", private_field: bool = False) -> str:
    if private_field or "private" in mods.split() or name.startswith("_"):
        return "private"
    if "protected" in mods.split():
        return "protected"
    return "public"


def _param_names(text: str) -> List[str]:
    names: List[str] = []
    for piece in split_parameters(text):
        match = _PARAM_NAME.match(piece)
        if match:
            names.append(match.group(1))
        elif piece.startswith(("{", "[")):
            names.append(piece.split(":", 1)[0].strip() if piece.startswith("[") else "{...}")
    return names


class TypeScriptExtractor(SymbolExtractor):
    """Finds functions, arrow functions, classes, methods and interfaces.

    Serves JavaScript too; the language tag follows the file extension.
    """

    language = "typescript"

    def extract_symbols(self, path: str, content: str) -> List[Symbol]:
        masked = _mask(content)
        lines = content.split("\n")
        language = "typescript" if path.lower().endswith((".ts", ".tsx", ".mts", ".cts")) else "javascript"
        found: List[Tuple[int, Symbol]] = []
        seen: Set[Tuple[str, int]] = set()

        def _add(position: int, symbol: Optional[Symbol]) -> None:
            if symbol is None:
                return
            key = (symbol.name, symbol.line)
            if key in seen:
                return
            seen.add(key)
            found.append((position, symbol))

        class_spans: List[Tuple[int, int, str]] = []
        for match in _CLASS.finditer(masked):
            try:
                end = find_block_end(masked, match.end() - 1)
            except ExtractionError:
                continue
            class_spans.append((match.end() - 1, end, match.group("name")))
            _add(match.start("name"), self._type_symbol(path, content, masked, lines, match, end, "class", language))

        if language == "typescript":
            for match in _INTERFACE.finditer(masked):
                try:
                    end = find_block_end(masked, match.end() - 1)
                except ExtractionError:
                    continue
                _add(
                    match.start("name"),
                    self._type_symbol(path, content, masked, lines, match, end, "interface", language),
                )

        for match in _FUNCTION.finditer(masked):
            _add(match.start("name"), self._function_symbol(path, content, masked, match, language))

        for match in _ARROW.finditer(masked):
            _add(match.start("name"), self._arrow_symbol(path, content, masked, match, language))

        for open_brace, close_brace, class_name in class_spans:
            for match in _METHOD.finditer(masked, open_brace + 1, close_brace):
                if masked.count("{", open_brace + 1, match.start()) != masked.count(
                    "}", open_brace + 1, match.start()
                ):
                    continue
                _add(
                    match.start("name"),
                    self._method_symbol(path, content, masked, lines, match, class_name, language),
                )

        found.sort(key=lambda item: item[0])
        return [symbol for _, symbol in found]

    def extract_dependencies(self, content: str) -> Set[str]:
        masked = _mask(content, keep_strings=True)
        modules: Set[str] = set()
        for pattern in (_IMPORT_FROM, _IMPORT_BARE, _EXPORT_FROM, _REQUIRE, _DYNAMIC_IMPORT):
            modules.update(match.group(1) for match in pattern.finditer(masked))
        return modules

    # ------------------------------------------------------------------
    # Internals

    def _type_symbol(self, path, content, masked, lines, match, end, kind, language) -> Optional[Symbol]:
        name = match.group("name")
        visibility = _visibility(name)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None
        line = line_number(content, match.start("name"))
        extends = match.group("extends")
        implements = match.groupdict().get("implements")
        metadata = {
            "extends": [collapse(part) for part in split_parameters(extends)] if extends else [],
            "implements": [collapse(part) for part in split_parameters(implements)] if implements else [],
            "exported": bool(match.group("export")),
            "decorators": preceding_annotations(lines, line - 1),
        }
        return Symbol(
            id=symbol_id(path, name, line),
            name=name,
            kind=kind,
            file_path=path,
            line=line,
            signature=collapse(content[match.start() : match.end() - 1]),
            visibility=visibility,
            complexity=count_decisions(masked[match.end() - 1 : end + 1], _DECISIONS),
            language=language,
            metadata=metadata,
        )

    def _function_symbol(self, path, content, masked, match, language) -> Optional[Symbol]:
        name = match.group("name")
        visibility = _visibility(name)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None
        try:
            close = match_paren(masked, match.end() - 1)
            tail = _AFTER_PARAMS.match(masked, close + 1)
            if tail is None or tail.group("term") != "{":
                return None
            end = find_block_end(masked, tail.end() - 1)
        except ExtractionError:
            return None
        line = line_number(content, match.start("name"))
        return Symbol(
            id=symbol_id(path, name, line),
            name=name,
            kind="function",
            file_path=path,
            line=line,
            signature=collapse(content[match.start() : tail.start("term")]),
            visibility=visibility,
            complexity=count_decisions(masked[tail.end() - 1 : end + 1], _DECISIONS),
            language=language,
            metadata={
                "parameters": _param_names(content[match.end() : close]),
                "is_async": bool(match.group("async")),
                "exported": bool(match.group("export")),
                "return_type": collapse(tail.group("returns")) if tail.group("returns") else None,
            },
        )

    def _arrow_symbol(self, path, content, masked, match, language) -> Optional[Symbol]:
        name = match.group("name")
        visibility = _visibility(name)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None
        try:
            if match.group("params") == "(":
                close = match_paren(masked, match.end() - 1)
                params = _param_names(content[match.end() : close])
                tail = _AFTER_PARAMS.match(masked, close + 1)
                if tail is None or tail.group("term") != "=>":
                    return None
                arrow_end = tail.end()
                returns = tail.group("returns")
            else:
                params = [match.group("params").split("=>")[0].strip()]
                arrow_end = match.end()
                returns = None
            body_start, body_end = _arrow_body(masked, arrow_end)
        except ExtractionError:
            return None
        line = line_number(content, match.start("name"))
        return Symbol(
            id=symbol_id(path, name, line),
            name=name,
            kind="function",
            file_path=path,
            line=line,
            signature=collapse(content[match.start() : arrow_end]),
            visibility=visibility,
            complexity=count_decisions(masked[body_start:body_end], _DECISIONS),
            language=language,
            metadata={
                "parameters": params,
                "is_async": bool(match.group("async")),
                "exported": bool(match.group("export")),
                "arrow": True,
                "return_type": collapse(returns) if returns else None,
            },
        )

    def _method_symbol(self, path, content, masked, lines, match, class_name, language) -> Optional[Symbol]:
        name = match.group("name")
        mods = match.group("mods") or ""
        visibility = _visibility(name, mods, private_field=bool(match.group("hash")))
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None
        try:
            close = match_paren(masked, match.end() - 1)
            tail = _AFTER_PARAMS.match(masked, close + 1)
            if tail is None or tail.group("term") != "{":
                return None
            end = find_block_end(masked, tail.end() - 1)
        except ExtractionError:
            return None
        line = line_number(content, match.start("name"))
        return Symbol(
            id=symbol_id(path, name, line),
            name=name,
            kind="constructor" if name == "constructor" else "method",
            file_path=path,
            line=line,
            signature=collapse(content[match.start() : tail.start("term")]),
            visibility=visibility,
            complexity=count_decisions(masked[tail.end() - 1 : end + 1], _DECISIONS),
            language=language,
            metadata={
                "class": class_name,
                "parameters": _param_names(content[match.end() : close]),
                "modifiers": mods.split(),
                "is_async": "async" in mods.split(),
                "decorators": preceding_annotations(lines, line - 1),
                "return_type": collapse(tail.group("returns")) if tail.group("returns") else None,
            },
        )


def _arrow_body(masked: str, start: int) -> Tuple[int, int]:
    index = start
    while index < len(masked) and masked[index] in " \t\r\n":
        index += 1
    if index < len(masked) and masked[index] == "{":
        return index, find_block_end(masked, index) + 1
    end = masked.find(";", index)
    newline = masked.find("\n", index)
    candidates = [pos for pos in (end, newline) if pos != -1]
    return index, min(candidates) if candidates else len(masked)


__all__ = ["TypeScriptExtractor"]
