"""RSS feed source fetcher."""

from __future__ import annotations

import asyncio
import html
import logging
import re
from datetime import datetime, timezone

import feedparser

from hygiene.ingest import register_source
from hygiene.ingest.base import BaseSource
from hygiene.ingest.scraper import extract_content
from hygiene.models import LEANS, Article

logger = logging.getLogger(__name__)

SNIPPET_CHARS = 200


def strip_html(text: str) -> str:
    """Remove HTML tags, decode entities and collapse whitespace."""
    clean = re.sub(r"<[^>]+>", " ", text or "")
    clean = html.unescape(clean)
    return re.sub(r"\s+", " ", clean).strip()


def _published(entry) -> datetime | None:
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            return datetime(*parsed[:6], tzinfo=timezone.utc)
    return None


@register_source("rss")
class RSSSource(BaseSource):
    """Fetch articles from the configured outlet feeds."""

    @property
    def name(self) -> str:
        return "rss"

    @property
    def settings(self) -> dict:
        return self.config.get("sources", {}).get("rss", {})

    async def fetch(self) -> list[Article]:
        feeds = self.settings.get("feeds", []) or []
        results = await asyncio.gather(
            *(self._fetch_feed(feed_cfg) for feed_cfg in feeds)
        )
        articles = [a for batch in results for a in batch]
        logger.info("RSS fetched %d articles from %d feeds", len(articles), len(feeds))
        return articles

    async def _fetch_feed(self, feed_cfg: dict) -> list[Article]:
        url = feed_cfg.get("url")
        source_name = feed_cfg.get("name", url)
        lean = feed_cfg.get("lean")
        if not url:
            logger.warning("Skipping feed %r: no url", source_name)
            return []
        if lean not in LEANS:
            logger.warning("Skipping feed %r: unknown lean %r", source_name, lean)
            return []
        try:
            return await self._parse_feed(url, source_name, lean)
        except Exception:
            logger.exception("Failed to fetch RSS feed: %s", url)
            return []

    async def _parse_feed(self, url: str, source_name: str, lean: str) -> list[Article]:
        """Parse a single feed and build articles from its newest entries."""
        feed = await asyncio.to_thread(feedparser.parse, url)
        if getattr(feed, "bozo", False) and not feed.entries:
            logger.warning("Unreadable feed %s: %s", url, getattr(feed, "bozo_exception", None))
            return []

        limit = int(self.settings.get("max_entries_per_feed", 10))
        want_content = bool(self.settings.get("extract_content", False))
        articles = []

        for entry in feed.entries[:limit]:
            link = entry.get("link", "")
            title = strip_html(entry.get("title", ""))
            if not link or not title:
                continue

            summary = strip_html(entry.get("summary", ""))
            content = None
            if want_content:
                content = await extract_content(link)
            if not content and len(summary) > SNIPPET_CHARS:
                content = summary

            articles.append(
                Article(
                    url=link,
                    title=title,
                    source_name=source_name,
                    lean=lean,
                    content=content,
                    snippet=summary[:SNIPPET_CHARS] or None,
                    published_at=_published(entry),
                )
            )

        logger.debug("%s: %d entries", source_name, len(articles))
        return articles
