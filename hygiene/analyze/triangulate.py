"""Cross-lean triangulation: agreed facts, headline framing, omissions."""

from __future__ import annotations

import hashlib
import logging
import re

from hygiene.analyze import register_analyzer
from hygiene.analyze.base import BaseAnalyzer
from hygiene.config import get_analysis_config
from hygiene.models import (
    BUCKETS,
    Article,
    FramingDiff,
    Omission,
    StoryCluster,
    TriangulatedSource,
    Triangulation,
    bucket_for,
)
from hygiene.process.narrative import analyze_article
from hygiene.terms import TermDictionary

logger = logging.getLogger(__name__)

QUOTE_RE = re.compile(r"[\"“][^\"“”]{20,150}[\"”]")
STAT_RE = re.compile(
    r"\d+(?:\.\d+)?%?\s+(?:of|percent|million|billion|people|dollars)", re.IGNORECASE,
)
ACTION_RE = re.compile(
    r"[A-Z][a-z]+ [A-Z][a-z]+\s+(?:said|announced|confirmed|denied|criticized|praised)"
)

FACTS_PER_KIND = 3
MAX_AGREED = 10
MAX_OMISSIONS = 10
# Leading characters of a fact that another bucket must repeat to "include" it
OMISSION_PREFIX_CHARS = 30


class InsufficientCoverageError(Exception):
    """Too few articles to compare coverage across leans."""

    def __init__(self, topic: str, count: int):
        self.topic = topic
        self.count = count
        super().__init__(
            f"Insufficient data for topic {topic!r}: {count} article(s), need at least 2"
        )


def group_by_bucket(articles: list[Article]) -> dict[str, list[Article]]:
    """Non-empty left/center/right groups, in that order."""
    groups: dict[str, list[Article]] = {b: [] for b in BUCKETS}
    for article in articles:
        bucket = bucket_for(article.lean)
        if bucket:
            groups[bucket].append(article)
    return {b: items for b, items in groups.items() if items}


def extract_key_facts(article: Article) -> list[str]:
    """Quotes, statistics and named actions found in an article."""
    text = f"{article.title} {article.snippet or ''} {article.content or ''}"
    facts = []
    for prefix, pattern in (("Quote", QUOTE_RE), ("Stat", STAT_RE), ("Action", ACTION_RE)):
        matches = [m.group(0) for m in pattern.finditer(text)]
        facts.extend(f"{prefix}: {m}" for m in matches[:FACTS_PER_KIND])
    return facts


def find_agreed_facts(facts_by_bucket: dict[str, list[str]]) -> list[str]:
    """Lower-cased facts that appear in at least two distinct buckets."""
    seen_in: dict[str, set[str]] = {}
    for bucket, facts in facts_by_bucket.items():
        for fact in facts:
            seen_in.setdefault(fact.lower(), set()).add(bucket)
    agreed = [fact for fact, buckets in seen_in.items() if len(buckets) >= 2]
    return agreed[:MAX_AGREED]


def find_omissions(facts_by_bucket: dict[str, list[str]]) -> list[Omission]:
    """Facts reported by exactly one bucket and missing from all the others."""
    lowered = {b: [f.lower() for f in facts] for b, facts in facts_by_bucket.items()}
    omissions: list[Omission] = []
    seen: set[str] = set()

    for bucket, facts in facts_by_bucket.items():
        others = [b for b in facts_by_bucket if b != bucket]
        if not others:
            continue
        for fact in facts:
            if fact in seen:
                continue
            prefix = fact.lower()[:OMISSION_PREFIX_CHARS]
            if any(prefix in other for b in others for other in lowered[b]):
                continue
            seen.add(fact)
            omissions.append(Omission(
                fact=fact,
                included_by=[bucket],
                omitted_by=others,
                significance="high" if len(others) >= 2 else "medium",
            ))
    return omissions[:MAX_OMISSIONS]


def _event_id(topic: str, articles: list[Article]) -> str:
    digest = hashlib.sha256(topic.encode())
    for article in articles:
        digest.update(article.url.encode())
    return "evt_" + digest.hexdigest()[:12]


def triangulate(
    topic: str, articles: list[Article], terms: TermDictionary,
) -> Triangulation:
    """Compare how left, center and right outlets covered one event.

    Raises InsufficientCoverageError for fewer than two articles.
    """
    if len(articles) < 2:
        raise InsufficientCoverageError(topic, len(articles))

    groups = group_by_bucket(articles)

    sources = []
    for article in articles:
        analysis = analyze_article(article, terms)
        sources.append(TriangulatedSource(
            article_id=article.id,
            source_name=article.source_name,
            lean=article.lean,
            content_type=analysis.content_type,
            emotional_score=analysis.emotional_score,
            loaded_terms=analysis.loaded_terms,
            headline=article.title,
        ))

    facts_by_bucket = {
        bucket: [fact for a in items for fact in extract_key_facts(a)]
        for bucket, items in groups.items()
    }

    framing = []
    if "left" in groups and "right" in groups:
        center = groups.get("center")
        framing.append(FramingDiff(
            aspect="headline framing",
            left_framing=groups["left"][0].title,
            right_framing=groups["right"][0].title,
            center_framing=center[0].title if center else None,
        ))

    result = Triangulation(
        event_id=_event_id(topic, articles),
        event_description=topic,
        sources=sources,
        agreed_facts=find_agreed_facts(facts_by_bucket),
        framing_differences=framing,
        omissions=find_omissions(facts_by_bucket),
    )
    logger.info(
        "Triangulated %r: %d sources across %s, %d agreed facts, %d omissions",
        topic, len(sources), "/".join(groups) or "no buckets",
        len(result.agreed_facts), len(result.omissions),
    )
    return result


@register_analyzer("triangulate")
class TriangulationAnalyzer(BaseAnalyzer):
    """Triangulate each story cluster with enough cross-lean coverage."""

    @property
    def name(self) -> str:
        return "triangulate"

    def analyze(self, clusters: list[StoryCluster]) -> list[Triangulation]:
        cfg = get_analysis_config(self.config, "triangulate")
        if not cfg.get("enabled", True):
            return []
        if self.terms is None:
            raise ValueError("TriangulationAnalyzer needs a term dictionary")

        min_articles = max(2, int(cfg["min_articles"]))
        results = []
        for cluster in clusters:
            if cfg["competing_only"] and not cluster.has_competing_narratives:
                continue
            if len(cluster.articles) < min_articles:
                continue
            results.append(triangulate(cluster.topic, cluster.articles, self.terms))

        logger.info("Triangulated %d of %d clusters", len(results), len(clusters))
        return results
