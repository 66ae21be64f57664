"""Abstract base class for processors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from hygiene.models import Article


class BaseProcessor(ABC):
    """Base class for per-batch article processing steps."""

    def __init__(self, config: dict):
        self.config = config

    @abstractmethod
    def process(self, articles: list[Article]) -> list[Article]:
        """Process articles and return the annotated/filtered list."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Processor name."""
        ...
