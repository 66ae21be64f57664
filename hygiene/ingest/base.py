"""Abstract base class for all source fetchers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from hygiene.models import Article


class BaseSource(ABC):
    """Base class for news source fetchers."""

    def __init__(self, config: dict):
        self.config = config

    @abstractmethod
    async def fetch(self) -> list[Article]:
        """Fetch the latest items from every configured outlet."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name."""
        ...
