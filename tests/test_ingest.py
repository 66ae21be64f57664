"""Tests for ingest sources."""

from __future__ import annotations

import time
from datetime import timezone
from unittest.mock import AsyncMock, patch

import pytest

from hygiene.ingest import SOURCES
from hygiene.ingest.rss import RSSSource, strip_html


class FakeEntry(dict):
    """Dict subclass that also supports attribute access (like feedparser)."""

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key)


def _feed(*entries, bozo=False):
    return type("Feed", (), {"entries": list(entries), "bozo": bozo})()


@pytest.fixture
def rss_config():
    return {
        "sources": {
            "rss": {
                "enabled": True,
                "max_entries_per_feed": 10,
                "feeds": [
                    {"name": "Test Left", "lean": "left", "url": "https://left.example.com/feed.xml"},
                ],
            }
        }
    }


@pytest.fixture
def mock_feed_data():
    """Mock feedparser result."""
    entry1 = FakeEntry(
        title="Senate Passes Budget Bill",
        link="https://left.example.com/budget",
        summary="<p>The Senate passed the bill &amp; sent it on.</p>",
        published_parsed=time.struct_time((2024, 3, 1, 12, 30, 0, 4, 61, 0)),
    )
    entry2 = FakeEntry(
        title="Opinion: The Budget Fight Is Not Over",
        link="https://left.example.com/opinion/budget",
        summary="A long summary " * 30,
    )
    return _feed(entry1, entry2)


def test_rss_is_registered():
    assert SOURCES["rss"] is RSSSource


def test_strip_html():
    assert strip_html("<b>Hello</b>&nbsp;<i>world</i>\n\n ok") == "Hello world ok"
    assert strip_html(None) == ""


@pytest.mark.asyncio
@patch("hygiene.ingest.rss.extract_content", new_callable=AsyncMock)
@patch("hygiene.ingest.rss.feedparser")
async def test_rss_fetches_articles(mock_fp, mock_extract, rss_config, mock_feed_data):
    """RSS source parses feed entries into Article objects tagged with the outlet."""
    mock_fp.parse.return_value = mock_feed_data

    articles = await RSSSource(rss_config).fetch()

    assert len(articles) == 2
    first, second = articles
    assert first.title == "Senate Passes Budget Bill"
    assert first.source_name == "Test Left"
    assert first.lean == "left"
    assert first.snippet == "The Senate passed the bill & sent it on."
    assert first.content is None
    assert first.published_at.tzinfo == timezone.utc
    assert (first.published_at.year, first.published_at.hour) == (2024, 12)

    assert second.published_at is None
    assert len(second.snippet) == 200
    # Summaries longer than the snippet stand in for the body
    assert second.content == "A long summary " * 29 + "A long summary"
    mock_extract.assert_not_called()


@pytest.mark.asyncio
@patch("hygiene.ingest.rss.extract_content", new_callable=AsyncMock)
@patch("hygiene.ingest.rss.feedparser")
async def test_rss_extracts_full_content(mock_fp, mock_extract, rss_config, mock_feed_data):
    rss_config["sources"]["rss"]["extract_content"] = True
    mock_fp.parse.return_value = mock_feed_data
    mock_extract.return_value = "Full article body."

    articles = await RSSSource(rss_config).fetch()

    assert all(a.content == "Full article body." for a in articles)
    assert mock_extract.await_count == 2


@pytest.mark.asyncio
@patch("hygiene.ingest.rss.feedparser")
async def test_rss_skips_entries_without_link_or_title(mock_fp, rss_config):
    """Entries missing link or title are skipped."""
    entry_no_link = FakeEntry(title="Has Title", link="", summary="content")
    entry_no_title = FakeEntry(title="", link="https://example.com", summary="content")
    mock_fp.parse.return_value = _feed(entry_no_link, entry_no_title)

    articles = await RSSSource(rss_config).fetch()
    assert articles == []


@pytest.mark.asyncio
@patch("hygiene.ingest.rss.feedparser")
async def test_rss_respects_entry_limit(mock_fp, rss_config):
    rss_config["sources"]["rss"]["max_entries_per_feed"] = 3
    entries = [
        FakeEntry(title=f"Story {i}", link=f"https://left.example.com/{i}", summary="s")
        for i in range(8)
    ]
    mock_fp.parse.return_value = _feed(*entries)

    articles = await RSSSource(rss_config).fetch()
    assert [a.title for a in articles] == ["Story 0", "Story 1", "Story 2"]


@pytest.mark.asyncio
@patch("hygiene.ingest.rss.feedparser")
async def test_rss_skips_feeds_with_unknown_lean(mock_fp, rss_config):
    rss_config["sources"]["rss"]["feeds"] = [
        {"name": "Mystery", "lean": "sideways", "url": "https://m.example.com/rss"},
        {"name": "No URL", "lean": "center"},
    ]

    articles = await RSSSource(rss_config).fetch()

    assert articles == []
    mock_fp.parse.assert_not_called()


@pytest.mark.asyncio
@patch("hygiene.ingest.rss.feedparser")
async def test_rss_bozo_feed_without_entries(mock_fp, rss_config):
    mock_fp.parse.return_value = _feed(bozo=True)
    assert await RSSSource(rss_config).fetch() == []


@pytest.mark.asyncio
@patch("hygiene.ingest.rss.feedparser")
async def test_rss_failing_feed_does_not_stop_others(mock_fp, rss_config, mock_feed_data):
    """One broken feed is logged and skipped; the rest still return articles."""
    rss_config["sources"]["rss"]["feeds"].append(
        {"name": "Broken", "lean": "right", "url": "https://broken.example.com/rss"},
    )

    def parse(url):
        if "broken" in url:
            raise RuntimeError("connection reset")
        return mock_feed_data

    mock_fp.parse.side_effect = parse

    articles = await RSSSource(rss_config).fetch()

    assert len(articles) == 2
    assert {a.source_name for a in articles} == {"Test Left"}
