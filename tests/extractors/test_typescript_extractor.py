"""Tests for TypeScript and JavaScript symbol extraction."""

from __future__ import annotations

from textwrap import dedent

from codescope.extractors import ExtractorOptions, TypeScriptExtractor

SOURCE = dedent(
    """\
    import { Injectable } from '@angular/core';
    import axios from 'axios';
    import './polyfills';
    const fs = require('fs');
    export * from './models';

    export interface Repo<T> extends Base {
      find(id: string): T;
    }

    export class UserService extends BaseService implements Repo<User> {
      private cache = new Map();

      constructor(private readonly http: Http) {
        super();
      }

      async load(id: string): Promise<User> {
        // if this were code it would count
        if (this.cache.has(id) && id) {
          return this.cache.get(id);
        }
        return this.http.get(id);
      }

      #secret() {
        return 1;
      }
    }

    export function formatName(first: string, last = ''): string {
      return first + last;
    }

    export const add = (a: number, b: number): number => a + b;
    const double = x => x * 2;
    """
)


def _by_name(symbols):
    return {symbol.name: symbol for symbol in symbols}


def test_extracts_declarations_in_source_order() -> None:
    symbols = TypeScriptExtractor().extract_symbols("src/user.service.ts", SOURCE)

    assert [(symbol.name, symbol.kind) for symbol in symbols] == [
        ("Repo", "interface"),
        ("UserService", "class"),
        ("constructor", "constructor"),
        ("load", "method"),
        ("secret", "method"),
        ("formatName", "function"),
        ("add", "function"),
        ("double", "function"),
    ]
    assert {symbol.language for symbol in symbols} == {"typescript"}


def test_class_and_method_details() -> None:
    symbols = _by_name(TypeScriptExtractor().extract_symbols("src/user.service.ts", SOURCE))

    service = symbols["UserService"]
    assert service.metadata["extends"] == ["BaseService"]
    assert service.metadata["implements"] == ["Repo<User>"]
    assert service.metadata["exported"] is True

    assert symbols["Repo"].metadata["extends"] == ["Base"]

    load = symbols["load"]
    assert load.metadata["class"] == "UserService"
    assert load.metadata["is_async"] is True
    assert load.metadata["return_type"] == "Promise<User>"
    assert load.complexity == 3

    assert symbols["constructor"].metadata["parameters"] == ["http"]
    assert symbols["secret"].visibility == "private"


def test_function_and_arrow_details() -> None:
    symbols = _by_name(TypeScriptExtractor().extract_symbols("src/user.service.ts", SOURCE))

    format_name = symbols["formatName"]
    assert format_name.metadata["parameters"] == ["first", "last"]
    assert format_name.metadata["return_type"] == "string"
    assert format_name.metadata["exported"] is True

    add = symbols["add"]
    assert add.metadata["arrow"] is True
    assert add.metadata["parameters"] == ["a", "b"]
    assert add.metadata["return_type"] == "number"

    double = symbols["double"]
    assert double.metadata["parameters"] == ["x"]
    assert double.metadata["exported"] is False


def test_private_members_can_be_excluded() -> None:
    extractor = TypeScriptExtractor(ExtractorOptions(include_private=False))

    names = [symbol.name for symbol in extractor.extract_symbols("src/user.service.ts", SOURCE)]

    assert "secret" not in names
    assert "load" in names


def test_javascript_files_skip_interfaces_and_keep_their_language() -> None:
    source = dedent(
        """\
        interface NotJs {
        }
        function run(task) {
          return task();
        }
        """
    )

    symbols = TypeScriptExtractor().extract_symbols("lib/run.js", source)

    assert [(symbol.name, symbol.language) for symbol in symbols] == [("run", "javascript")]


def test_unbalanced_class_is_skipped() -> None:
    assert TypeScriptExtractor().extract_symbols("bad.ts", "class Broken {\n  run() {\n") == []


def test_dependencies_cover_every_import_form() -> None:
    assert TypeScriptExtractor().extract_dependencies(SOURCE) == {
        "@angular/core",
        "axios",
        "./polyfills",
        "fs",
        "./models",
    }
