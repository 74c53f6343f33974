"""Base classes for data collectors."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class Collector(ABC):
    """Contract for collectors that gather raw project data for a scope.

    The returned mapping may carry any of the well-known keys ``files``,
    ``commits``, ``dependencies``, ``branches`` and ``contributors``, plus a
    ``metadata`` mapping. Unknown keys are kept as extras by the manager.
    """

    @abstractmethod
    def collect(self, scope: str) -> Dict[str, Any]:
        """Gather data bounded by ``scope``; degrade to empty data instead of raising."""
