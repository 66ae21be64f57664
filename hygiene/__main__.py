"""CLI entrypoint: python -m hygiene <command> [args]."""

from __future__ import annotations

import asyncio
import inspect
import logging
import logging.handlers
import os
import sys
from pathlib import Path

from hygiene.config import get_db_path, get_retention_days, get_terms_path, load_config
from hygiene.db import get_connection, get_recent_runs, init_db
from hygiene.terms import TermDictionary, TermDictionaryError, load_terms


def setup_logging(config: dict) -> None:
    """Configure logging with console + rotating file output."""
    root = logging.getLogger()
    root.setLevel(logging.INFO)

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    # Rotate at 5MB, keep 3 backups, next to the database
    log_dir = Path(get_db_path(config)).parent
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        str(log_dir / "hygiene.log"), maxBytes=5 * 1024 * 1024, backupCount=3,
    )
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("trafilatura").setLevel(logging.WARNING)
    logging.getLogger("feedparser").setLevel(logging.WARNING)


logger = logging.getLogger("hygiene")


def _int_arg(args: list[str], default: int | None) -> int | None:
    if not args:
        return default
    try:
        return int(args[0])
    except ValueError:
        print(f"Expected a number, got {args[0]!r}")
        sys.exit(2)


def cmd_init_db(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Initialize the SQLite database."""
    db_path = get_db_path(config)
    init_db(db_path)
    print(f"Database initialized at {db_path}")


async def cmd_ingest(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Fetch the latest items from every enabled source."""
    from hygiene.pipeline import run_ingest

    init_db(get_db_path(config))
    result = await run_ingest(config)
    print(
        f"Fetched {result['fetched']} articles: "
        f"{result['inserted']} new, {result['skipped']} already stored"
    )


def cmd_classify(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Annotate unclassified articles: classify [limit]."""
    from hygiene.pipeline import run_classification_pass
    from hygiene.synthesize.report import format_classification_summary

    counts = run_classification_pass(config, terms, limit=_int_arg(args, None))
    print(format_classification_summary(counts))


def cmd_stats(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Content-type breakdown and fact-vs-narrative share by lean."""
    from hygiene.db import count_articles, get_content_type_breakdown, get_fact_vs_narrative
    from hygiene.synthesize.report import format_content_type_stats

    conn = get_connection(get_db_path(config))
    try:
        print(format_content_type_stats(
            get_content_type_breakdown(conn), get_fact_vs_narrative(conn),
            stored=count_articles(conn),
        ))
    finally:
        conn.close()


def cmd_narrative(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Emotional language by outlet and the most common loaded terms."""
    from hygiene.db import get_emotional_by_source, get_loaded_term_rows
    from hygiene.synthesize.report import count_loaded_terms, format_narrative_stats

    conn = get_connection(get_db_path(config))
    try:
        by_source = get_emotional_by_source(conn)
        term_counts = count_loaded_terms([t for _, _, t in get_loaded_term_rows(conn)])
    finally:
        conn.close()
    print(format_narrative_stats(by_source, term_counts))


def cmd_sources(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Loaded-term usage per outlet."""
    from hygiene.db import get_loaded_term_rows
    from hygiene.synthesize.report import format_source_term_usage

    conn = get_connection(get_db_path(config))
    try:
        rows = get_loaded_term_rows(conn)
    finally:
        conn.close()
    print(format_source_term_usage(rows))


def cmd_neutralize(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Recent headlines rewritten without loaded terms: neutralize [days]."""
    from hygiene.db import get_articles_since
    from hygiene.synthesize.report import format_neutralized_headlines

    days = _int_arg(args, 2)
    conn = get_connection(get_db_path(config))
    try:
        articles = get_articles_since(conn, days)
    finally:
        conn.close()
    print(format_neutralized_headlines(articles, terms))


def cmd_briefing(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Cluster recent stories and triangulate those with competing narratives."""
    from hygiene.pipeline import run_briefing
    from hygiene.synthesize.report import format_briefing

    print(format_briefing(run_briefing(config, terms)))


def cmd_triangulate(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Compare coverage of one topic across leans: triangulate <topic...>."""
    from hygiene.analyze.triangulate import InsufficientCoverageError
    from hygiene.pipeline import topic_coverage, triangulate_topic
    from hygiene.synthesize.report import format_coverage, format_triangulation

    topic = " ".join(args).strip()
    if not topic:
        print("Usage: python -m hygiene triangulate <topic>")
        sys.exit(2)
    try:
        result = triangulate_topic(config, topic, terms)
    except InsufficientCoverageError as exc:
        print(str(exc))
        sys.exit(1)
    print(format_triangulation(result))
    balance = topic_coverage(config, topic)
    if balance:
        print()
        print(format_coverage(balance))


def cmd_search(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Full-text search over stored articles: search <query...>."""
    from hygiene.db import search_articles
    from hygiene.synthesize.report import format_search_results

    query = " ".join(args).strip()
    if not query:
        print("Usage: python -m hygiene search <query>")
        sys.exit(2)
    conn = get_connection(get_db_path(config))
    try:
        articles = search_articles(conn, query, limit=20)
    finally:
        conn.close()
    print(format_search_results(query, articles))


def cmd_prune(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Delete old articles: prune [days]."""
    from hygiene.db import prune_old_articles

    days = _int_arg(args, get_retention_days(config))
    conn = get_connection(get_db_path(config))
    try:
        removed = prune_old_articles(conn, days)
    finally:
        conn.close()
    print(f"Removed {removed} articles older than {days} days")


def cmd_runs(config: dict, terms: TermDictionary, args: list[str]) -> None:
    """Show recent pipeline runs."""
    from hygiene.synthesize.report import format_runs

    conn = get_connection(get_db_path(config))
    try:
        runs = get_recent_runs(conn, limit=10)
    finally:
        conn.close()
    print(format_runs(runs))


COMMANDS = {
    "init-db": cmd_init_db,
    "ingest": cmd_ingest,
    "classify": cmd_classify,
    "stats": cmd_stats,
    "narrative": cmd_narrative,
    "sources": cmd_sources,
    "neutralize": cmd_neutralize,
    "briefing": cmd_briefing,
    "triangulate": cmd_triangulate,
    "search": cmd_search,
    "prune": cmd_prune,
    "runs": cmd_runs,
}


def main() -> None:
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        available = ", ".join(COMMANDS)
        print(f"Usage: python -m hygiene {{{available}}} [args]")
        sys.exit(1)

    command, args = sys.argv[1], sys.argv[2:]
    config = load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
    setup_logging(config)

    try:
        terms = load_terms(get_terms_path(config))
    except TermDictionaryError as exc:
        logger.error("Term dictionary is invalid: %s", exc)
        sys.exit(1)

    handler = COMMANDS[command]
    if inspect.iscoroutinefunction(handler):
        asyncio.run(handler(config, terms, args))
    else:
        handler(config, terms, args)


if __name__ == "__main__":
    main()
