"""Analyzer registry for triangulation and coverage balance."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hygiene.analyze.base import BaseAnalyzer

ANALYZERS: dict[str, type[BaseAnalyzer]] = {}


def register_analyzer(name: str):
    """Decorator to register an analyzer."""

    def decorator(cls):
        ANALYZERS[name] = cls
        return cls

    return decorator


from hygiene.analyze.coverage import CoverageAnalyzer  # noqa: E402, F401
from hygiene.analyze.triangulate import TriangulationAnalyzer  # noqa: E402, F401
