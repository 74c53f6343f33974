"""CLI entrypoints for codescope commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .analyzers import build_analyzers
from .engine import AnalysisEngine
from .errors import CodescopeError
from .logging import configure_logging
from .models import SCOPES, AnalysisConfig


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codescope",
        description="Analyze the architecture, quality and history of a source tree.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Run one analysis operation and print the JSON result envelope.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument("operation", help="Operation to run, e.g. architecture or quality.")
    _add_path_argument(analyze_parser)
    analyze_parser.add_argument(
        "--scope",
        choices=SCOPES,
        default=None,
        help="Breadth of the tree to analyze (defaults to the configured scope).",
    )
    analyze_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the envelope to this file instead of stdout.",
    )
    analyze_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (0 for compact output).",
    )

    health_parser = subparsers.add_parser(
        "health",
        help="Run a quick health check and report ok/failed.",
    )
    _add_verbose_option(health_parser, suppress_default=True)
    _add_path_argument(health_parser)

    operations_parser = subparsers.add_parser(
        "operations",
        help="List the available analysis operations.",
    )
    _add_verbose_option(operations_parser, suppress_default=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service (requires fastapi and uvicorn).",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for codescope commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "analyze":
        try:
            engine = AnalysisEngine(args.path)
        except CodescopeError as exc:
            parser.exit(1, f"codescope analyze failed: {exc}\n")
        config = AnalysisConfig(
            operation=args.operation, scope=args.scope or engine.settings.scope
        )
        result = engine.analyze(args.operation, config)
        rendered = json.dumps(result.to_dict(), indent=args.indent or None, default=str)
        if args.output is not None:
            args.output.write_text(rendered + "\n", encoding="utf-8")
            print(f"Result written to {_relativize(args.output)}")
        else:
            print(rendered)
        if not result.success:
            parser.exit(1)
    elif args.command == "health":
        try:
            healthy = AnalysisEngine(args.path).health_check()
        except CodescopeError as exc:
            parser.exit(1, f"codescope health failed: {exc}\n")
        print("ok" if healthy else "failed")
        if not healthy:
            parser.exit(1)
    elif args.command == "operations":
        for name in build_analyzers():
            print(name)
    elif args.command == "serve":
        try:
            from .service import run_service
        except ModuleNotFoundError as exc:
            parser.exit(
                1,
                f"Service mode needs fastapi and uvicorn ({exc}). "
                "Install them with `pip install codescope[service]`.\n",
            )
        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
