"""Analysis engine: collect once per call, dispatch to an analyzer, wrap the result."""

from __future__ import annotations

import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping

from .analyzers import Analyzer, build_analyzers
from .collectors import CollectorManager, build_collector_manager
from .config import Settings, load_settings
from .errors import AnalysisError, CollectionError
from .extractors import ExtractorOptions
from .logging import get_logger
from .models import SCOPES, AnalysisConfig, AnalysisMetadata, AnalysisResult


class AnalysisEngine:
    """Runs analysis operations over one project root."""

    def __init__(
        self,
        root: Path | str,
        settings: Settings | None = None,
        *,
        git_runner: Callable[..., str] | None = None,
        analyzers: Mapping[str, Analyzer] | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.settings = settings or load_settings(self.root)
        self._collector_manager = build_collector_manager(
            self.root, self.settings, git_runner=git_runner
        )
        options = ExtractorOptions(include_private=self.settings.extraction.include_private)
        self._analyzers: Dict[str, Analyzer] = (
            dict(analyzers) if analyzers is not None else build_analyzers(options)
        )
        self.logger = get_logger("engine")

    @property
    def collector_manager(self) -> CollectorManager:
        return self._collector_manager

    def operations(self) -> List[str]:
        return list(self._analyzers)

    def analyze(
        self, operation: str, config: AnalysisConfig | None = None
    ) -> AnalysisResult:
        config = config or AnalysisConfig(operation=operation, scope=self.settings.scope)
        scope = config.scope

        analyzer = self._analyzers.get(operation)
        if analyzer is None:
            return self._failure(
                operation,
                scope,
                f"Unknown operation '{operation}'; expected one of {', '.join(self._analyzers)}",
            )
        if scope not in SCOPES:
            return self._failure(
                operation, scope, f"Invalid scope '{scope}'; expected one of {', '.join(SCOPES)}"
            )

        self.logger.info("Starting %s analysis (%s scope) for %s", operation, scope, self.root)
        started = time.perf_counter()
        files_analyzed = 0
        data_points = 0
        try:
            raw = self._collector_manager.collect(scope)
            files_analyzed = len(raw.files)
            data_points = raw.data_points
            payload = analyzer.analyze(raw, config)
        except (CollectionError, AnalysisError) as exc:
            return self._failure(operation, scope, str(exc), started, files_analyzed, data_points)
        except Exception as exc:
            self.logger.exception("Unexpected failure during %s analysis", operation)
            return self._failure(
                operation, scope, f"{type(exc).__name__}: {exc}", started, files_analyzed, data_points
            )

        elapsed = _elapsed_ms(started)
        self.logger.info(
            "Finished %s analysis in %d ms (%d files, %d data points)",
            operation,
            elapsed,
            files_analyzed,
            data_points,
        )
        return AnalysisResult(
            operation=operation,
            timestamp=_now(),
            success=True,
            data=payload,
            metadata=AnalysisMetadata(
                analysis_time_ms=elapsed,
                data_points=data_points,
                files_analyzed=files_analyzed,
                scope=scope,
            ),
        )

    def health_check(self) -> bool:
        """Run the architecture operation and report whether it succeeded."""
        return self.analyze("architecture").success

    def _failure(
        self,
        operation: str,
        scope: str,
        message: str,
        started: float | None = None,
        files_analyzed: int = 0,
        data_points: int = 0,
    ) -> AnalysisResult:
        if started is None:
            self.logger.warning("Rejected %s request: %s", operation, message)
        else:
            self.logger.warning("%s analysis failed: %s", operation, message)
        return AnalysisResult(
            operation=operation,
            timestamp=_now(),
            success=False,
            data=None,
            metadata=AnalysisMetadata(
                analysis_time_ms=_elapsed_ms(started) if started is not None else 0,
                data_points=data_points,
                files_analyzed=files_analyzed,
                scope=scope,
            ),
            error=message,
        )


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def run_analysis(root: Path | str, operation: str, **options: Any) -> AnalysisResult:
    """Convenience wrapper for one-off library calls."""
    scope = options.pop("scope", None)
    params = options.pop("params", None) or {}
    engine = AnalysisEngine(root, **options)
    config = AnalysisConfig(operation=operation, scope=scope or engine.settings.scope, params=params)
    return engine.analyze(operation, config)


__all__ = ["AnalysisEngine", "run_analysis"]
