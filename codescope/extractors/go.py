"""Go symbol extraction."""

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
    should_include,
    split_parameters,
    symbol_id,
)

_FUNC = re.compile(r"^func\s*(?:\((?P<receiver>[^)]*)\)\s*)?(?P<name>\w+)\s*(?:\[[^\]]*\]\s*)?\(", re.M)
_TYPE = re.compile(r"^type\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+(?P<kind>struct|interface)\s*\{", re.M)
_FIELD = re.compile(r"^[ \t]*(?P<names>\w+(?:\s*,\s*\w+)*)\s+(?P<type>[^\s/]+)", re.M)
_INTERFACE_METHOD = re.compile(r"^[ \t]*(?P<name>\w+)\s*\(", re.M)
_IMPORT_SINGLE = re.compile(r"^[ \t]*import\s+(?:[\w.]+\s+)?\"([^\"]+)\"", re.M)
_IMPORT_BLOCK = re.compile(r"^[ \t]*import\s*\(([^)]*)\)", re.M)
_QUOTED = re.compile(r"\"([^\"]+)\"")

_DECISIONS = [
    re.compile(r"\bif\b"),
    re.compile(r"\bfor\b"),
    re.compile(r"\bcase\b"),
    re.compile(r"&&"),
    re.compile(r"\|\|"),
]

_RESERVED = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface", "map",
        "package", "range", "return", "select", "struct", "switch", "type", "var",
    }
)


def _mask(content: str, keep_strings: bool = False) -> str:
    return mask_literals(content, quotes=('"', "'", "`"), keep_strings=keep_strings)


def _visibility(name: str) -> str:
    return "public" if name[:1].isupper() else "private"


def _param_names(text: str) -> List[str]:
    # Unnamed parameters report their type, which is all the text carries.
    return [piece.split()[0] for piece in split_parameters(text) if piece.split()]


def _body_brace(masked: str, start: int) -> int:
    """Find the `{` opening a func body, skipping `interface{}`/`struct{}` result types."""
    depth = 0
    index = start
    while index < len(masked):
        char = masked[index]
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        elif char == "\n" and depth == 0:
            break
        elif char == "{" and depth == 0:
            if masked[start:index].rstrip().endswith(("interface", "struct")):
                index = find_block_end(masked, index) + 1
                continue
            return index
        index += 1
    raise ExtractionError(f"No function body after offset {start}")


def _receiver_type(receiver: str) -> str:
    tokens = receiver.split()
    if not tokens:
        return ""
    return tokens[-1].lstrip("*").split("[", 1)[0]


class GoExtractor(SymbolExtractor):
    """Finds functions, methods with receivers, structs and interfaces."""

    language = "go"

    def extract_symbols(self, path: str, content: str) -> List[Symbol]:
        masked = _mask(content)
        found: List[Tuple[int, Symbol]] = []

        for match in _FUNC.finditer(masked):
            symbol = self._func_symbol(path, content, masked, match)
            if symbol is not None:
                found.append((match.start("name"), symbol))

        for match in _TYPE.finditer(masked):
            symbol = self._type_symbol(path, content, masked, match)
            if symbol is not None:
                found.append((match.start("name"), symbol))

        found.sort(key=lambda item: item[0])
        return [symbol for _, symbol in found]

    def extract_dependencies(self, content: str) -> Set[str]:
        masked = _mask(content, keep_strings=True)
        modules = {match.group(1) for match in _IMPORT_SINGLE.finditer(masked)}
        for block in _IMPORT_BLOCK.finditer(masked):
            modules.update(match.group(1) for match in _QUOTED.finditer(block.group(1)))
        return modules

    def _func_symbol(self, path, content, masked, match) -> Optional[Symbol]:
        name = match.group("name")
        visibility = _visibility(name)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None
        try:
            close = match_paren(masked, match.end() - 1)
            brace = _body_brace(masked, close + 1)
            end = find_block_end(masked, brace)
        except ExtractionError:
            return None

        receiver = match.group("receiver")
        returns = collapse(content[close + 1 : brace])
        line = line_number(content, match.start("name"))
        metadata = {
            "parameters": _param_names(content[match.end() : close]),
            "returns": returns or None,
        }
        if receiver is not None:
            metadata["receiver"] = _receiver_type(receiver)
        return Symbol(
            id=symbol_id(path, name, line),
            name=name,
            kind="method" if receiver is not None else "function",
            file_path=path,
            line=line,
            signature=collapse(content[match.start() : brace]),
            visibility=visibility,
            complexity=count_decisions(masked[brace : end + 1], _DECISIONS),
            language=self.language,
            metadata=metadata,
        )

    def _type_symbol(self, path, content, masked, match) -> Optional[Symbol]:
        name = match.group("name")
        visibility = _visibility(name)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None
        try:
            end = find_block_end(masked, match.end() - 1)
        except ExtractionError:
            return None

        body = masked[match.end() : end]
        kind = match.group("kind")
        metadata: dict = {}
        if kind == "struct":
            fields: List[str] = []
            embedded: List[str] = []
            for line_text in body.split("\n"):
                stripped = line_text.strip()
                if not stripped:
                    continue
                field = _FIELD.match(line_text)
                if field:
                    fields.extend(part.strip() for part in field.group("names").split(","))
                else:
                    embedded.append(stripped.lstrip("*"))
            metadata = {"fields": fields, "embedded": embedded}
        else:
            metadata = {"methods": [m.group("name") for m in _INTERFACE_METHOD.finditer(body)]}

        line = line_number(content, match.start("name"))
        return Symbol(
            id=symbol_id(path, name, line),
            name=name,
            kind=kind,
            file_path=path,
            line=line,
            signature=collapse(content[match.start() : match.end() - 1]),
            visibility=visibility,
            complexity=1,
            language=self.language,
            metadata=metadata,
        )


__all__ = ["GoExtractor"]
