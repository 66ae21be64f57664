"""Greedy keyword clustering of articles into stories."""

from __future__ import annotations

import logging
import re

from hygiene.config import get_analysis_config
from hygiene.models import Article, StoryCluster
from hygiene.process import register_processor
from hygiene.process.base import BaseProcessor

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset("""
    the a an and or but in on at to for of with by from as is was are were
    been be have has had do does did will would could should may might must
    shall can need it its this that these those i you he she we they what
    which who whom how when where why all each every both few more most other
    some such no nor not only own same so than too very just says said new
    after before now
""".split())

_PUNCT_RE = re.compile(r"[^\w\s]")


def extract_keywords(title: str | None) -> list[str]:
    """Lower-cased content words of a headline, in order."""
    if not title:
        return []
    words = _PUNCT_RE.sub("", title.lower()).split()
    return [w for w in words if len(w) > 3 and w not in STOP_WORDS]


def jaccard_similarity(a: set[str], b: set[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def title_similarity(a: Article, b: Article) -> float:
    return jaccard_similarity(
        set(extract_keywords(a.title)), set(extract_keywords(b.title)),
    )


def cluster_articles(
    articles: list[Article],
    threshold: float = 0.2,
    min_sources: int = 2,
    competing_min_leans: int = 3,
) -> list[StoryCluster]:
    """Group articles about the same story.

    Single pass in input order: each article not yet assigned becomes a seed
    and collects every later unassigned article whose keyword overlap with
    the seed reaches ``threshold``. Only groups spanning ``min_sources``
    distinct outlets are kept. Results are ordered by lean diversity, most
    diverse first.
    """
    keywords = [set(extract_keywords(a.title)) for a in articles]
    assigned = [False] * len(articles)
    clusters: list[StoryCluster] = []

    for i, seed in enumerate(articles):
        if assigned[i]:
            continue
        assigned[i] = True
        members = [seed]

        for j in range(i + 1, len(articles)):
            if assigned[j]:
                continue
            if jaccard_similarity(keywords[i], keywords[j]) >= threshold:
                members.append(articles[j])
                assigned[j] = True

        if len(members) < 2:
            continue
        if len({a.source_name for a in members}) < min_sources:
            continue

        breakdown: dict[str, int] = {}
        for article in members:
            breakdown[article.lean] = breakdown.get(article.lean, 0) + 1

        seed_keywords = extract_keywords(seed.title)
        clusters.append(StoryCluster(
            id=f"cluster-{len(clusters) + 1}",
            topic=" ".join(seed_keywords[:5]),
            keywords=seed_keywords,
            articles=members,
            lean_breakdown=breakdown,
            has_competing_narratives=len(breakdown) >= competing_min_leans,
        ))

    clusters.sort(key=lambda c: c.lean_diversity, reverse=True)
    return clusters


@register_processor("cluster")
class ClusterProcessor(BaseProcessor):
    """Group articles into story clusters by headline keyword overlap."""

    @property
    def name(self) -> str:
        return "cluster"

    def build_clusters(self, articles: list[Article]) -> list[StoryCluster]:
        cfg = get_analysis_config(self.config, "cluster")
        if not cfg.get("enabled", True) or len(articles) < 2:
            return []

        clusters = cluster_articles(
            articles,
            threshold=cfg["similarity_threshold"],
            min_sources=cfg["min_sources"],
            competing_min_leans=cfg["competing_min_leans"],
        )
        competing = sum(1 for c in clusters if c.has_competing_narratives)
        logger.info(
            "Clustered %d articles into %d stories (%d with competing narratives, "
            "threshold=%.2f)",
            len(articles), len(clusters), competing, cfg["similarity_threshold"],
        )
        return clusters

    def process(self, articles: list[Article]) -> list[Article]:
        """Return only the articles that landed in a cluster."""
        return [a for c in self.build_clusters(articles) for a in c.articles]
