"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from hygiene.config import load_config
from hygiene.db import get_connection, init_db
from hygiene.models import Article
from hygiene.terms import load_terms


@pytest.fixture(scope="session")
def terms():
    """The bundled loaded-term dictionary."""
    return load_terms()


@pytest.fixture
def sample_config(tmp_path):
    """Minimal config for testing (no network feeds enabled)."""
    config_text = """
sources:
  rss:
    enabled: true
    max_entries_per_feed: 10
    feeds:
      - { name: "Test Left", lean: left, url: "https://left.example.com/feed.xml" }
      - { name: "Test Right", lean: right, url: "https://right.example.com/feed.xml" }

analysis:
  cluster:
    similarity_threshold: 0.2
  triangulate:
    days_back: 3
    competing_only: true

database:
  path: "DB_PATH_PLACEHOLDER"
"""
    db_path = str(tmp_path / "test.db")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text.replace("DB_PATH_PLACEHOLDER", db_path))
    return load_config(str(cfg_path))


@pytest.fixture
def db_conn(sample_config):
    """Initialized test database connection."""
    db_path = sample_config["database"]["path"]
    init_db(db_path)
    conn = get_connection(db_path)
    yield conn
    conn.close()


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def sample_articles(now):
    """Coverage of one budget story across the spectrum, plus an unrelated item."""
    return [
        Article(
            url="https://www.theguardian.com/us-news/2024/senate-budget",
            title="Senate passes budget bill after far-right holdouts cave",
            source_name="The Guardian",
            lean="left",
            snippet="The measure funds the government through September.",
            content=(
                'Senator Jane Doe said the vote was "a victory for working families across '
                'the country". The bill provides 40 billion dollars for infrastructure. '
                "Maria Lopez announced a review of the spending plan."
            ),
            published_at=now - timedelta(hours=3),
        ),
        Article(
            url="https://www.bbc.co.uk/news/world-us-canada-budget",
            title="Senate passes budget bill, averting shutdown",
            source_name="BBC",
            lean="center",
            snippet="Lawmakers approved the package late on Friday.",
            content=(
                "The bill provides 40 billion dollars for infrastructure, according to "
                "the Congressional Budget Office."
            ),
            published_at=now - timedelta(hours=2),
        ),
        Article(
            url="https://www.foxnews.com/politics/senate-budget-bill",
            title="Senate budget bill passes as radical left spending balloons",
            source_name="Fox News",
            lean="right",
            snippet="Republicans warned about the deficit.",
            content="Critics said the package adds to the national debt.",
            published_at=now - timedelta(hours=1),
        ),
        Article(
            url="https://example.com/local/bakery-award",
            title="Local bakery wins award",
            source_name="Town Crier",
            lean="center",
            published_at=now - timedelta(hours=5),
        ),
    ]
