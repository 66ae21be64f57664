"""Abstract base class for analyzers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from hygiene.models import StoryCluster
from hygiene.terms import TermDictionary


class BaseAnalyzer(ABC):
    """Base class for cross-article analysis steps."""

    def __init__(self, config: dict, terms: TermDictionary | None = None):
        self.config = config
        self.terms = terms

    @abstractmethod
    def analyze(self, clusters: list[StoryCluster]) -> list[Any]:
        """Run analysis and return results."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Analyzer name."""
        ...
