"""Shared contract and stateless helpers for per-language symbol extractors.

Extraction is textual: declarations are located with regular expressions over
a copy of the source in which comments (and usually string literals) are
blanked out, so offsets and line numbers stay aligned with the original text.
Complexity is a keyword-count proxy for cyclomatic complexity (one plus the
number of decision points in the declaration body), not a control-flow-graph
computation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Pattern, Sequence, Set, Tuple

from ..errors import ExtractionError
from ..models import Symbol

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


@dataclass(frozen=True)
class ExtractorOptions:
    include_private: bool = True


class SymbolExtractor(ABC):
    """Contract implemented once per supported language."""

    language: str = "unknown"

    def __init__(self, options: ExtractorOptions | None = None) -> None:
        self.options = options or ExtractorOptions()

    @abstractmethod
    def extract_symbols(self, path: str, content: str) -> List[Symbol]:
        """Return declarations in source order; never raise on malformed input."""

    @abstractmethod
    def extract_dependencies(self, content: str) -> Set[str]:
        """Return the module names referenced by import statements."""

    def _keep(self, visibility: str) -> bool:
        return self.options.include_private or visibility != "private"


def symbol_id(path: str, name: str, line: int) -> str:
    normalized = path.replace("\\", "/")
    return f"{normalized}:{name}:{line}"


def line_number(content: str, index: int) -> int:
    """Return the 1-based line containing ``index``."""
    return content.count("\n", 0, max(index, 0)) + 1


def should_include(name: str, reserved: Iterable[str] = ()) -> bool:
    """Reject empty names, reserved words and ``_``-only placeholders."""
    if not name or not name.strip("_"):
        return False
    return name not in reserved


def count_decisions(text: str, patterns: Sequence[Pattern[str]]) -> int:
    return 1 + sum(len(pattern.findall(text)) for pattern in patterns)


def collapse(text: str) -> str:
    return " ".join(text.split())


def mask_literals(
    content: str,
    *,
    line_comment: str = "//",
    block_comment: Tuple[str, str] | None = ("/*", "*/"),
    quotes: Sequence[str] = ('"', "'", "`"),
    multiline_quotes: Sequence[str] = ("`",),
    keep_strings: bool = False,
) -> str:
    """Blank out comments and string bodies, preserving length and newlines.

    Quotes are tried in the given order, so triple quotes must precede their
    single-character forms. Only ``multiline_quotes`` may span lines.
    """
    out = list(content)
    length = len(content)
    index = 0

    def _blank(start: int, end: int) -> None:
        for pos in range(start, min(end, length)):
            if out[pos] != "\n":
                out[pos] = " "

    while index < length:
        if line_comment and content.startswith(line_comment, index):
            end = content.find("\n", index)
            end = length if end == -1 else end
            _blank(index, end)
            index = end
            continue
        if block_comment and content.startswith(block_comment[0], index):
            end = content.find(block_comment[1], index + len(block_comment[0]))
            end = length if end == -1 else end + len(block_comment[1])
            _blank(index, end)
            index = end
            continue
        quote = next((q for q in quotes if content.startswith(q, index)), None)
        if quote is None:
            index += 1
            continue
        body_start = index + len(quote)
        end = _string_end(content, body_start, quote, quote in multiline_quotes)
        if not keep_strings:
            _blank(body_start, end)
        index = end + len(quote)
    return "".join(out)


def _string_end(content: str, start: int, quote: str, multiline: bool) -> int:
    index = start
    while index < len(content):
        char = content[index]
        if char == "\\":
            index += 2
            continue
        if char == "\n" and not multiline:
            return index
        if content.startswith(quote, index):
            return index
        index += 1
    return len(content)


def match_paren(text: str, open_index: int) -> int:
    """Return the index of the bracket closing the one at ``open_index``.

    ``text`` should already be masked so brackets inside strings and comments
    are gone.
    """
    if open_index >= len(text) or text[open_index] not in _OPENERS:
        raise ExtractionError(f"No opening bracket at offset {open_index}")
    stack: List[str] = []
    for index in range(open_index, len(text)):
        char = text[index]
        if char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in _CLOSERS:
            if not stack or stack.pop() != char:
                raise ExtractionError(f"Mismatched '{char}' at offset {index}")
            if not stack:
                return index
    raise ExtractionError(f"Unbalanced bracket opened at offset {open_index}")


def find_block_end(text: str, open_index: int) -> int:
    """Brace-balance scan from the ``{`` at ``open_index`` to its closing ``}``."""
    if open_index >= len(text) or text[open_index] != "{":
        raise ExtractionError(f"No opening brace at offset {open_index}")
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    raise ExtractionError(f"Unbalanced brace opened at offset {open_index}")


def indentation_block_end(lines: Sequence[str], header_line: int, indent: int) -> int:
    """Return the last line index belonging to the block opened at ``header_line``.

    ``lines`` should be masked so docstring bodies read as blank lines.
    """
    last = header_line
    for index in range(header_line + 1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue
        prefix = line[: len(line) - len(line.lstrip(" \t"))]
        current = len(prefix.expandtabs(4))
        if current <= indent:
            break
        last = index
    return last


def split_parameters(text: str) -> List[str]:
    """Split a parameter list on top-level commas."""
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    previous = ""
    for char in text:
        if char in "([{<":
            depth += 1
        elif char in ")]}" or (char == ">" and previous != "="):
            depth = max(0, depth - 1)
        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        previous = char
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


def preceding_annotations(lines: Sequence[str], line_index: int) -> List[str]:
    """Collect ``@name`` lines directly above ``line_index`` (0-based), top-down."""
    found: List[str] = []
    index = line_index - 1
    while index >= 0:
        stripped = lines[index].strip()
        if not stripped.startswith("@"):
            break
        name = stripped[1:].split("(", 1)[0].strip()
        if name:
            found.append(name)
        index -= 1
    found.reverse()
    return found


__all__ = [
    "ExtractorOptions",
    "SymbolExtractor",
    "collapse",
    "count_decisions",
    "find_block_end",
    "indentation_block_end",
    "line_number",
    "mask_literals",
    "match_paren",
    "preceding_annotations",
    "should_include",
    "split_parameters",
    "symbol_id",
]
