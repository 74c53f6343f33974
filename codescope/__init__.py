"""codescope: architectural, quality and history analysis for source trees."""

from .engine import AnalysisEngine, run_analysis
from .errors import (
    AnalysisError,
    CodescopeError,
    CollectionError,
    ConfigurationError,
    ExtractionError,
)
from .models import OPERATIONS, SCOPES, VERSION, AnalysisConfig, AnalysisResult

__version__ = VERSION

__all__ = [
    "AnalysisConfig",
    "AnalysisEngine",
    "AnalysisError",
    "AnalysisResult",
    "CodescopeError",
    "CollectionError",
    "ConfigurationError",
    "ExtractionError",
    "OPERATIONS",
    "SCOPES",
    "__version__",
    "run_analysis",
]
