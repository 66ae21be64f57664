#!/usr/bin/env python3
"""Live check of the configured outlet feeds.

Run from a machine with internet access (not sandboxed):

    python scripts/check_feeds.py
    python scripts/check_feeds.py --feed "Fox News"
    python scripts/check_feeds.py --lean center --classify
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from hygiene.config import get_terms_path, load_config
from hygiene.ingest.rss import RSSSource
from hygiene.process.narrative import analyze_article
from hygiene.terms import load_terms


def _print_articles(feed_name: str, articles: list, terms=None) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {feed_name}: {len(articles)} articles")
    print(f"{'=' * 60}")
    for i, a in enumerate(articles, 1):
        print(f"\n  {i}. {a.title[:80]}")
        print(f"     URL:     {a.url[:80]}")
        print(f"     Date:    {a.published_at or 'N/A'}")
        print(f"     Snippet: {(a.snippet or '')[:120]}")
        if terms is not None:
            analysis = analyze_article(a, terms)
            loaded = ", ".join(t.term for t in analysis.loaded_terms) or "-"
            print(
                f"     Type:    {analysis.content_type} ({analysis.content_type_confidence:.2f})"
                f"  emo {analysis.emotional_score:.2f}  terms: {loaded}"
            )


async def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch configured feeds and print entries")
    parser.add_argument("--feed", default=None, help="Only this feed name")
    parser.add_argument("--lean", default=None, help="Only feeds with this lean")
    parser.add_argument(
        "--classify", action="store_true",
        help="Also print content type, emotional score and loaded terms",
    )
    parser.add_argument(
        "--config", default=None,
        help="Config file path (default: config.yaml or CONFIG_PATH env)",
    )
    args = parser.parse_args()

    config = load_config(args.config or os.environ.get("CONFIG_PATH", "config.yaml"))
    terms = load_terms(get_terms_path(config)) if args.classify else None

    feeds = config.get("sources", {}).get("rss", {}).get("feeds", []) or []
    if args.feed:
        feeds = [f for f in feeds if f.get("name") == args.feed]
    if args.lean:
        feeds = [f for f in feeds if f.get("lean") == args.lean]
    if not feeds:
        print("No matching feeds configured.")
        return

    source = RSSSource(config)
    for feed_cfg in feeds:
        articles = await source._fetch_feed(feed_cfg)
        _print_articles(f"{feed_cfg.get('name')} ({feed_cfg.get('lean')})", articles, terms)

    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(main())
