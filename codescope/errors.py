"""Exception hierarchy shared by collectors, extractors and analyzers."""

from __future__ import annotations


class CodescopeError(RuntimeError):
    """Base class for all codescope failures."""


class ConfigurationError(CodescopeError):
    """Raised for unknown operations, invalid scopes or a malformed .codescope.yml."""


class CollectionError(CodescopeError):
    """Raised when project data cannot be collected at all."""


class ExtractionError(CodescopeError):
    """Raised when a single construct cannot be matched; extractors skip it."""


class AnalysisError(CodescopeError):
    """Raised by analyzers; the engine turns it into a failed result."""


__all__ = [
    "AnalysisError",
    "CodescopeError",
    "CollectionError",
    "ConfigurationError",
    "ExtractionError",
]
