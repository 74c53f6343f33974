"""Tests for Java symbol extraction."""

from __future__ import annotations

from textwrap import dedent

from codescope.extractors import ExtractorOptions, JavaExtractor

SOURCE = dedent(
    """\
    package com.example.web;

    import java.util.List;
    import java.util.concurrent.*;
    import static org.junit.Assert.assertEquals;
    import org.springframework.web.bind.annotation.RestController;

    @RestController
    public class UserController extends BaseController implements Api, Closeable {
        private final UserService service;

        public UserController(UserService service) {
            this.service = service;
        }

        @GetMapping("/users")
        public List<User> list(int page, @RequestParam String filter) throws IOException {
            if (page > 0 && filter != null) {
                return service.find(filter);
            }
            return List.of();
        }

        private void reset() {
            service.clear();
        }
    }

    interface Api {
        void close();
    }

    public record Point(int x, int y) {}
    """
)


def _symbols(options: ExtractorOptions | None = None):
    return JavaExtractor(options).extract_symbols("src/main/java/com/example/web/UserController.java", SOURCE)


def test_extracts_types_constructors_and_methods() -> None:
    assert [(symbol.name, symbol.kind) for symbol in _symbols()] == [
        ("UserController", "class"),
        ("UserController", "constructor"),
        ("list", "method"),
        ("reset", "method"),
        ("Api", "interface"),
        ("close", "method"),
        ("Point", "record"),
    ]


def test_type_metadata() -> None:
    controller, *_ = _symbols()

    assert controller.visibility == "public"
    assert controller.metadata["annotations"] == ["RestController"]
    assert controller.metadata["extends"] == ["BaseController"]
    assert controller.metadata["implements"] == ["Api", "Closeable"]

    point = _symbols()[-1]
    assert point.metadata["components"] == ["x", "y"]
    assert point.complexity == 1


def test_method_metadata() -> None:
    by_kind_name = {(symbol.kind, symbol.name): symbol for symbol in _symbols()}

    listing = by_kind_name[("method", "list")]
    assert listing.metadata["parameters"] == ["page", "filter"]
    assert listing.metadata["return_type"] == "List<User>"
    assert listing.metadata["throws"] == ["IOException"]
    assert listing.metadata["annotations"] == ["GetMapping"]
    assert listing.complexity == 3

    close = by_kind_name[("method", "close")]
    assert close.metadata["abstract"] is True
    assert close.visibility == "package"

    constructor = by_kind_name[("constructor", "UserController")]
    assert constructor.metadata["parameters"] == ["service"]
    assert constructor.metadata["return_type"] is None


def test_private_members_can_be_excluded() -> None:
    names = [symbol.name for symbol in _symbols(ExtractorOptions(include_private=False))]

    assert "reset" not in names
    assert "close" in names


def test_dependencies_are_package_names() -> None:
    assert JavaExtractor().extract_dependencies(SOURCE) == {
        "java.util",
        "java.util.concurrent",
        "org.junit.Assert",
        "org.springframework.web.bind.annotation",
    }
