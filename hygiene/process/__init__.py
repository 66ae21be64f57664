"""Processor registry for annotation and clustering."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hygiene.process.base import BaseProcessor

PROCESSORS: dict[str, type[BaseProcessor]] = {}


def register_processor(name: str):
    """Decorator to register a processor."""

    def decorator(cls):
        PROCESSORS[name] = cls
        return cls

    return decorator


from hygiene.process.annotate import AnnotateProcessor  # noqa: E402, F401
from hygiene.process.cluster import ClusterProcessor  # noqa: E402, F401
