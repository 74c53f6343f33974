"""Python symbol extraction using indentation to bound declaration bodies."""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass
from typing import List, Optional, Set

from ..errors import ExtractionError
from ..models import Symbol
from .base import (
    SymbolExtractor,
    collapse,
    count_decisions,
    indentation_block_end,
    line_number,
    mask_literals,
    match_paren,
    preceding_annotations,
    should_include,
    split_parameters,
    symbol_id,
)

_DEF = re.compile(r"^(?P<indent>[ \t]*)(?P<async>async[ \t]+)?def[ \t]+(?P<name>\w+)[ \t]*\(", re.M)
_CLASS = re.compile(r"^(?P<indent>[ \t]*)class[ \t]+(?P<name>\w+)[ \t]*(?P<paren>\()?", re.M)
_HEADER_TAIL = re.compile(r"\s*(?:->\s*(?P<returns>[^:]+?))?\s*:")
_PARAM_NAME = re.compile(r"^\**\s*(\w+)")
_IMPORT = re.compile(r"^[ \t]*import[ \t]+([\w. \t,]+)", re.M)
_FROM_IMPORT = re.compile(r"^[ \t]*from[ \t]+(\.*[\w.]*)[ \t]+import\b", re.M)

_DECISIONS = [
    re.compile(r"\bif\b"),
    re.compile(r"\belif\b"),
    re.compile(r"\bfor\b"),
    re.compile(r"\bwhile\b"),
    re.compile(r"\bexcept\b"),
    re.compile(r"\bwith\b"),
    re.compile(r"\band\b"),
    re.compile(r"\bor\b"),
    re.compile(r"^[ \t]*case\b", re.M),
]

_RESERVED = frozenset(keyword.kwlist)


@dataclass
class _Block:
    kind: str
    indent: int
    start: int
    end: int


def _mask(content: str) -> str:
    return mask_literals(
        content,
        line_comment="#",
        block_comment=None,
        quotes=('"""', "'''", '"', "'"),
        multiline_quotes=('"""', "'''"),
    )


def _indent_width(text: str) -> int:
    return len(text.expandtabs(4))


def _visibility(name: str) -> str:
    if name.startswith("__") and name.endswith("__"):
        return "public"
    if name.startswith("_"):
        return "private"
    return "public"


class PythonExtractor(SymbolExtractor):
    """Finds ``def``/``async def`` and ``class`` declarations."""

    language = "python"

    def extract_symbols(self, path: str, content: str) -> List[Symbol]:
        masked = _mask(content)
        lines = content.split("\n")
        masked_lines = masked.split("\n")

        blocks: List[_Block] = []
        found: List[tuple[int, Symbol]] = []

        for match in _CLASS.finditer(masked):
            try:
                symbol, block = self._class_symbol(path, content, masked, lines, masked_lines, match)
            except ExtractionError:
                continue
            blocks.append(block)
            if symbol is not None:
                found.append((match.start("name"), symbol))

        functions = []
        for match in _DEF.finditer(masked):
            try:
                functions.append(self._function_parts(content, masked, masked_lines, match))
            except ExtractionError:
                continue
        blocks.extend(block for _, block, _ in functions)

        for match, block, header in functions:
            enclosing = _innermost(blocks, block)
            is_method = enclosing is not None and enclosing.kind == "class"
            symbol = self._function_symbol(path, content, lines, masked_lines, match, block, header, is_method)
            if symbol is not None:
                found.append((match.start("name"), symbol))

        found.sort(key=lambda item: item[0])
        return [symbol for _, symbol in found]

    def extract_dependencies(self, content: str) -> Set[str]:
        masked = _mask(content)
        modules: Set[str] = set()
        for match in _IMPORT.finditer(masked):
            for part in match.group(1).split(","):
                name = part.strip().split()[0] if part.strip() else ""
                if name:
                    modules.add(name)
        for match in _FROM_IMPORT.finditer(masked):
            if match.group(1):
                modules.add(match.group(1))
        return modules

    def _class_symbol(self, path, content, masked, lines, masked_lines, match):
        name = match.group("name")
        indent = _indent_width(match.group("indent"))
        header_end = match.end()
        bases: List[str] = []
        if match.group("paren"):
            close = match_paren(masked, match.end() - 1)
            bases = [collapse(part) for part in split_parameters(content[match.end() : close])]
            header_end = close + 1
        colon = _HEADER_TAIL.match(masked, header_end)
        if colon is None:
            raise ExtractionError(f"class {name} has no header colon")

        start_line = line_number(content, match.start("name")) - 1
        end_line = indentation_block_end(masked_lines, line_number(content, colon.end()) - 1, indent)
        block = _Block("class", indent, start_line, end_line)

        visibility = _visibility(name)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None, block

        body = "\n".join(masked_lines[start_line : end_line + 1])
        symbol = Symbol(
            id=symbol_id(path, name, start_line + 1),
            name=name,
            kind="class",
            file_path=path,
            line=start_line + 1,
            signature=f"class {name}({', '.join(bases)})" if bases else f"class {name}",
            visibility=visibility,
            complexity=count_decisions(body, _DECISIONS),
            language=self.language,
            metadata={
                "bases": bases,
                "decorators": preceding_annotations(lines, start_line),
            },
        )
        return symbol, block

    def _function_parts(self, content, masked, masked_lines, match):
        indent = _indent_width(match.group("indent"))
        close = match_paren(masked, match.end() - 1)
        tail = _HEADER_TAIL.match(masked, close + 1)
        if tail is None:
            raise ExtractionError(f"def {match.group('name')} has no header colon")
        start_line = line_number(content, match.start("name")) - 1
        end_line = indentation_block_end(masked_lines, line_number(content, tail.end()) - 1, indent)
        return match, _Block("function", indent, start_line, end_line), (close, tail)

    def _function_symbol(
        self, path, content, lines, masked_lines, match, block, header, is_method
    ) -> Optional[Symbol]:
        name = match.group("name")
        visibility = _visibility(name)
        if not should_include(name, _RESERVED) or not self._keep(visibility):
            return None

        close, tail = header
        params: List[str] = []
        for piece in split_parameters(content[match.end() : close]):
            param = _PARAM_NAME.match(piece)
            if param:
                params.append(param.group(1))
        if is_method and params and params[0] in ("self", "cls"):
            params = params[1:]

        returns = content[tail.start("returns") : tail.end("returns")] if tail.group("returns") else None
        sig_start = match.start() + len(match.group("indent"))
        body = "\n".join(masked_lines[block.start : block.end + 1])
        return Symbol(
            id=symbol_id(path, name, block.start + 1),
            name=name,
            kind="method" if is_method else "function",
            file_path=path,
            line=block.start + 1,
            signature=collapse(content[sig_start : tail.start()]),
            visibility=visibility,
            complexity=count_decisions(body, _DECISIONS),
            language=self.language,
            metadata={
                "parameters": params,
                "decorators": preceding_annotations(lines, block.start),
                "is_async": bool(match.group("async")),
                "return_type": collapse(returns) if returns else None,
            },
        )


def _innermost(blocks: List[_Block], target: _Block) -> Optional[_Block]:
    best: Optional[_Block] = None
    for block in blocks:
        if block is target:
            continue
        if block.start < target.start <= block.end and block.indent < target.indent:
            if best is None or block.start > best.start:
                best = block
    return best


__all__ = ["PythonExtractor"]
