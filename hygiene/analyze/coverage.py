"""Coverage balance: is a story a wedge (one side covers it) or a bridge?"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from hygiene.analyze import register_analyzer
from hygiene.analyze.base import BaseAnalyzer
from hygiene.config import get_analysis_config
from hygiene.models import BUCKETS, Article, CoverageBalance, StoryCluster

logger = logging.getLogger(__name__)


def _lean_counts(coverage: Iterable[Article] | Mapping[str, int]) -> dict[str, int]:
    if isinstance(coverage, Mapping):
        return dict(coverage)
    counts: dict[str, int] = {}
    for article in coverage:
        counts[article.lean] = counts.get(article.lean, 0) + 1
    return counts


def coverage_balance(
    topic: str,
    coverage: Iterable[Article] | Mapping[str, int],
    bridge_below: float = 0.3,
    wedge_above: float = 0.6,
) -> CoverageBalance | None:
    """Compare left and right coverage volume for a topic.

    ``coverage`` is either the articles themselves or a lean -> count
    breakdown. Returns None when neither side covered the topic.
    """
    counts = _lean_counts(coverage)
    left = sum(counts.get(lean, 0) for lean in BUCKETS["left"])
    right = sum(counts.get(lean, 0) for lean in BUCKETS["right"])
    total = left + right
    if total == 0:
        return None

    imbalance = abs(left - right) / total
    if imbalance < bridge_below:
        kind = "bridge"
    elif imbalance > wedge_above:
        kind = "wedge"
    else:
        kind = "mixed"
    return CoverageBalance(
        topic=topic, left_count=left, right_count=right, imbalance=imbalance, kind=kind,
    )


@register_analyzer("coverage")
class CoverageAnalyzer(BaseAnalyzer):
    """Label each story cluster as a wedge, bridge or mixed topic."""

    @property
    def name(self) -> str:
        return "coverage"

    def analyze(self, clusters: list[StoryCluster]) -> list[CoverageBalance]:
        cfg = get_analysis_config(self.config, "coverage")
        if not cfg.get("enabled", True):
            return []

        results = []
        for cluster in clusters:
            balance = coverage_balance(
                cluster.topic, cluster.lean_breakdown,
                bridge_below=cfg["bridge_below"], wedge_above=cfg["wedge_above"],
            )
            if balance is not None:
                balance.cluster_id = cluster.id
                results.append(balance)

        wedges = sum(1 for r in results if r.kind == "wedge")
        bridges = sum(1 for r in results if r.kind == "bridge")
        logger.info(
            "Coverage balance for %d clusters: %d wedge, %d bridge",
            len(results), wedges, bridges,
        )
        return results
