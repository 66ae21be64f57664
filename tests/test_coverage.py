"""Tests for wedge/bridge coverage balance."""

from __future__ import annotations

import pytest

from hygiene.analyze.coverage import CoverageAnalyzer, coverage_balance
from hygiene.models import StoryCluster


def test_even_coverage_is_bridge():
    balance = coverage_balance("budget", {"left": 2, "lean-right": 1, "right": 1})
    assert (balance.left_count, balance.right_count) == (2, 2)
    assert balance.imbalance == 0.0
    assert balance.kind == "bridge"


def test_one_sided_coverage_is_wedge():
    balance = coverage_balance("border", {"right": 8, "lean-left": 1, "center": 5})
    assert balance.imbalance == pytest.approx(7 / 9)
    assert balance.kind == "wedge"


def test_middle_imbalance_is_mixed():
    assert coverage_balance("tariffs", {"left": 3, "right": 1}).kind == "mixed"


def test_center_only_coverage_has_no_balance():
    assert coverage_balance("weather", {"center": 4}) is None


def test_balance_from_articles(sample_articles):
    balance = coverage_balance("budget", sample_articles)
    assert (balance.left_count, balance.right_count) == (1, 1)


def test_thresholds_are_configurable():
    assert coverage_balance("x", {"left": 3, "right": 1}, wedge_above=0.4).kind == "wedge"


def test_analyzer_labels_clusters(sample_config):
    clusters = [
        StoryCluster(id="cluster-1", topic="budget", keywords=[], lean_breakdown={"left": 1, "right": 1}),
        StoryCluster(id="cluster-2", topic="weather", keywords=[], lean_breakdown={"center": 3}),
    ]
    results = CoverageAnalyzer(sample_config).analyze(clusters)
    assert [(r.topic, r.kind) for r in results] == [("budget", "bridge")]
    assert results[0].cluster_id == "cluster-1"


def test_analyzer_disabled():
    config = {"analysis": {"coverage": {"enabled": False}}}
    cluster = StoryCluster(id="c", topic="t", keywords=[], lean_breakdown={"left": 2})
    assert CoverageAnalyzer(config).analyze([cluster]) == []
