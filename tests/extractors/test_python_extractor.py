"""Tests for Python symbol extraction."""

from __future__ import annotations

from textwrap import dedent

from codescope.extractors import ExtractorOptions, PythonExtractor

SOURCE = dedent(
    '''\
    import os, sys
    from .models import User
    from typing import List


    class Service(Base):
        """Doc mentioning def fake(): which is not code."""

        def __init__(self, repo):
            self.repo = repo

        async def fetch(self, key: str) -> List[str]:
            if key and key in self.repo:
                return [key]
            return []

        def _hidden(self):
            pass


    def helper(a, *args, **kwargs):
        for item in args:
            print(item)
    '''
)


def _by_name(symbols):
    return {symbol.name: symbol for symbol in symbols}


def test_extracts_classes_methods_and_functions_in_source_order() -> None:
    symbols = PythonExtractor().extract_symbols("app/service.py", SOURCE)

    assert [(symbol.name, symbol.kind) for symbol in symbols] == [
        ("Service", "class"),
        ("__init__", "method"),
        ("fetch", "method"),
        ("_hidden", "method"),
        ("helper", "function"),
    ]


def test_symbol_details() -> None:
    symbols = _by_name(PythonExtractor().extract_symbols("app/service.py", SOURCE))

    service = symbols["Service"]
    assert service.line == 6
    assert service.id == "app/service.py:Service:6"
    assert service.signature == "class Service(Base)"
    assert service.metadata["bases"] == ["Base"]

    fetch = symbols["fetch"]
    assert fetch.metadata["parameters"] == ["key"]
    assert fetch.metadata["is_async"] is True
    assert fetch.metadata["return_type"] == "List[str]"
    assert fetch.complexity == 3

    helper = symbols["helper"]
    assert helper.metadata["parameters"] == ["a", "args", "kwargs"]
    assert helper.complexity == 2
    assert helper.language == "python"

    assert symbols["__init__"].visibility == "public"
    assert symbols["_hidden"].visibility == "private"


def test_private_symbols_can_be_excluded() -> None:
    extractor = PythonExtractor(ExtractorOptions(include_private=False))

    names = [symbol.name for symbol in extractor.extract_symbols("app/service.py", SOURCE)]

    assert "_hidden" not in names
    assert "__init__" in names


def test_nested_function_is_not_a_method() -> None:
    source = dedent(
        """\
        def outer():
            def inner():
                return 1
            return inner
        """
    )

    symbols = PythonExtractor().extract_symbols("m.py", source)

    assert [(symbol.name, symbol.kind) for symbol in symbols] == [
        ("outer", "function"),
        ("inner", "function"),
    ]


def test_malformed_declarations_are_skipped() -> None:
    assert PythonExtractor().extract_symbols("broken.py", "def broken(\nclass Also(") == []


def test_extraction_is_repeatable() -> None:
    extractor = PythonExtractor()

    first = [symbol.to_dict() for symbol in extractor.extract_symbols("app/service.py", SOURCE)]
    second = [symbol.to_dict() for symbol in extractor.extract_symbols("app/service.py", SOURCE)]

    assert first == second


def test_dependencies_cover_plain_and_relative_imports() -> None:
    assert PythonExtractor().extract_dependencies(SOURCE) == {"os", "sys", ".models", "typing"}
