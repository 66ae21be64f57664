"""Pipeline orchestrator: batch passes over the article store."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone

from hygiene.analyze import ANALYZERS
from hygiene.analyze.coverage import coverage_balance
from hygiene.analyze.triangulate import triangulate
from hygiene.config import get_active_sources, get_analysis_config, get_db_path
from hygiene.db import (
    finish_run,
    get_connection,
    get_recent_articles,
    get_topic_coverage,
    get_unclassified_articles,
    insert_articles,
    insert_run,
    search_articles_by_keywords,
    write_annotations,
)
from hygiene.ingest import SOURCES
from hygiene.models import Briefing, CoverageBalance, PipelineRun, Triangulation
from hygiene.process.annotate import AnnotateProcessor
from hygiene.process.cluster import ClusterProcessor
from hygiene.terms import TermDictionary

logger = logging.getLogger(__name__)


@contextmanager
def _tracked_run(conn: sqlite3.Connection, command: str):
    """Record a pipeline_runs row; mark it failed if the body raises."""
    run = PipelineRun(command=command)
    run.id = insert_run(conn, run)
    logger.info("Run #%d (%s) started", run.id, command)
    try:
        yield run
    except BaseException:
        logger.exception("Run #%d (%s) failed", run.id, command)
        run.status = "failed"
        run.finished_at = datetime.now(timezone.utc)
        finish_run(conn, run.id, run)
        raise
    run.status = "completed"
    run.finished_at = datetime.now(timezone.utc)
    finish_run(conn, run.id, run)
    logger.info(
        "Run #%d (%s) completed: %d articles, %d clusters",
        run.id, command, run.articles_processed, run.clusters_formed,
    )


async def run_ingest(config: dict) -> dict[str, int]:
    """Fetch every enabled source concurrently and store new articles."""
    conn = get_connection(get_db_path(config))
    try:
        with _tracked_run(conn, "ingest") as run:
            active = get_active_sources(config)
            for name in active:
                if name not in SOURCES:
                    logger.warning("Source '%s' enabled but not registered", name)
            valid = [name for name in active if name in SOURCES]

            async def _fetch(name: str) -> list:
                try:
                    return await SOURCES[name](config).fetch()
                except Exception:
                    logger.exception("Source '%s' failed", name)
                    return []

            results = await asyncio.gather(*[_fetch(name) for name in valid])
            articles = [a for batch in results for a in batch]

            inserted, skipped = insert_articles(conn, articles)
            run.articles_processed = inserted
            logger.info(
                "Ingested %d articles from %d sources (%d new, %d already stored)",
                len(articles), len(valid), inserted, skipped,
            )
            return {"fetched": len(articles), "inserted": inserted, "skipped": skipped}
    finally:
        conn.close()


def run_classification_pass(
    config: dict, terms: TermDictionary, limit: int | None = None,
) -> dict[str, int]:
    """Annotate every unclassified article. Returns counts per content type.

    Each article is written back as soon as it is analyzed, so an
    interrupted pass keeps its progress.
    """
    if limit is None:
        limit = get_analysis_config(config, "classify").get("batch_size")

    conn = get_connection(get_db_path(config))
    try:
        with _tracked_run(conn, "classify") as run:
            articles = get_unclassified_articles(conn, limit)
            logger.info("Classifying %d articles", len(articles))

            processor = AnnotateProcessor(config, terms)
            counts: dict[str, int] = {}
            for article in articles:
                analysis = processor.annotate(article)
                write_annotations(conn, article.id, analysis)
                counts[analysis.content_type] = counts.get(analysis.content_type, 0) + 1
                run.articles_processed += 1

            return counts
    finally:
        conn.close()


def run_briefing(config: dict, terms: TermDictionary) -> Briefing:
    """Cluster the recent window and run every enabled analyzer over it."""
    cfg = get_analysis_config(config, "cluster")
    conn = get_connection(get_db_path(config))
    try:
        with _tracked_run(conn, "briefing") as run:
            articles = get_recent_articles(
                conn, hours=cfg["window_hours"], limit=cfg["max_articles"],
            )
            run.articles_processed = len(articles)

            clusters = ClusterProcessor(config).build_clusters(articles)
            run.clusters_formed = len(clusters)
            briefing = Briefing(clusters=clusters)

            for name, analyzer_cls in ANALYZERS.items():
                analyzer = analyzer_cls(config, terms)
                try:
                    results = analyzer.analyze(clusters)
                except Exception:
                    logger.exception("Analyzer '%s' failed", name)
                    continue
                if name == "triangulate":
                    briefing.triangulations = results
                elif name == "coverage":
                    briefing.coverage = results

            return briefing
    finally:
        conn.close()


def topic_keywords(topic: str) -> list[str]:
    """Search words of a topic: lower-cased, longer than three characters."""
    return [w for w in topic.lower().split() if len(w) > 3]


def triangulate_topic(config: dict, topic: str, terms: TermDictionary) -> Triangulation:
    """Find recent coverage of ``topic`` and triangulate it.

    Raises InsufficientCoverageError when fewer than two articles match.
    """
    cfg = get_analysis_config(config, "triangulate")
    conn = get_connection(get_db_path(config))
    try:
        articles = search_articles_by_keywords(
            conn, topic_keywords(topic),
            days_back=cfg["days_back"], limit=cfg["max_articles"],
        )
    finally:
        conn.close()

    logger.info("Found %d articles for topic %r", len(articles), topic)
    return triangulate(topic, articles, terms)


def topic_coverage(config: dict, topic: str) -> CoverageBalance | None:
    """Left/right volume for an ad hoc topic over the triangulation window."""
    tri_cfg = get_analysis_config(config, "triangulate")
    cov_cfg = get_analysis_config(config, "coverage")
    conn = get_connection(get_db_path(config))
    try:
        breakdown = get_topic_coverage(
            conn, topic_keywords(topic), hours=tri_cfg["days_back"] * 24,
        )
    finally:
        conn.close()
    return coverage_balance(
        topic, breakdown,
        bridge_below=cov_cfg["bridge_below"], wedge_above=cov_cfg["wedge_above"],
    )
