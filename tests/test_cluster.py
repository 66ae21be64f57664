"""Tests for keyword clustering."""

from __future__ import annotations

from hygiene.models import Article
from hygiene.process.cluster import (
    ClusterProcessor,
    cluster_articles,
    extract_keywords,
    jaccard_similarity,
    title_similarity,
)


def _article(n, title, source, lean="center"):
    return Article(url=f"https://example.com/{n}", title=title, source_name=source, lean=lean)


def test_extract_keywords_drops_stop_words_and_short_tokens():
    assert extract_keywords("The Senate passes a budget bill, says Fed") == [
        "senate", "passes", "budget", "bill",
    ]


def test_extract_keywords_empty():
    assert extract_keywords("") == []
    assert extract_keywords(None) == []


def test_jaccard_properties():
    a, b = {"senate", "budget", "bill"}, {"budget", "bill", "congress"}
    assert jaccard_similarity(a, b) == jaccard_similarity(b, a) == 0.5
    assert jaccard_similarity(a, a) == 1.0
    assert jaccard_similarity(set(), set()) == 0.0
    assert jaccard_similarity(a, set()) == 0.0


def test_related_headlines_cluster_and_unrelated_does_not():
    articles = [
        _article(1, "Senate passes budget bill", "Outlet A", "left"),
        _article(2, "Congress approves spending budget bill", "Outlet B", "right"),
        _article(3, "Local bakery wins award", "Outlet C"),
    ]
    assert title_similarity(articles[0], articles[1]) >= 0.2

    clusters = cluster_articles(articles)
    assert len(clusters) == 1
    assert [a.url for a in clusters[0].articles] == [
        "https://example.com/1", "https://example.com/2",
    ]
    assert clusters[0].topic == "senate passes budget bill"
    assert clusters[0].lean_breakdown == {"left": 1, "right": 1}
    assert not clusters[0].has_competing_narratives


def test_single_source_group_is_dropped():
    articles = [
        _article(1, "Senate passes budget bill", "Same Outlet"),
        _article(2, "Senate budget bill passes easily", "Same Outlet"),
    ]
    assert cluster_articles(articles) == []


def test_every_cluster_has_two_sources(sample_articles):
    for cluster in cluster_articles(sample_articles):
        assert len(cluster.articles) >= 2
        assert len(cluster.source_names) >= 2


def test_three_leans_mark_competing_narratives(sample_articles):
    clusters = cluster_articles(sample_articles)
    assert len(clusters) == 1
    assert clusters[0].has_competing_narratives
    assert clusters[0].lean_diversity == 3


def test_clusters_sorted_by_lean_diversity():
    articles = [
        _article(1, "Storm floods coastal towns", "A", "center"),
        _article(2, "Storm floods coastal towns overnight", "B", "center"),
        _article(3, "Tariff ruling shakes markets", "C", "left"),
        _article(4, "Tariff ruling shakes markets worldwide", "D", "right"),
    ]
    clusters = cluster_articles(articles)
    assert [c.lean_diversity for c in clusters] == [2, 1]
    assert clusters[0].id == "cluster-2"


def test_cluster_processor_uses_config(sample_config, sample_articles):
    processor = ClusterProcessor(sample_config)
    clusters = processor.build_clusters(sample_articles)
    assert len(clusters) == 1
    assert len(processor.process(sample_articles)) == 3


def test_cluster_processor_disabled(sample_articles):
    config = {"analysis": {"cluster": {"enabled": False}}}
    assert ClusterProcessor(config).build_clusters(sample_articles) == []
