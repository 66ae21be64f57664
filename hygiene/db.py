"""SQLite database schema and query helpers."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

from hygiene.models import (
    CONTENT_TYPES,
    UNKNOWN,
    Article,
    ArticleAnalysis,
    LoadedTerm,
    PipelineRun,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS articles (
    id TEXT PRIMARY KEY,
    url TEXT UNIQUE NOT NULL,
    title TEXT NOT NULL,
    content TEXT,
    snippet TEXT,
    source_name TEXT NOT NULL,
    lean TEXT NOT NULL,
    published_at TEXT,
    fetched_at TEXT NOT NULL,
    content_type TEXT,
    content_type_confidence REAL,
    emotional_score REAL,
    loaded_terms TEXT,
    named_source_count INTEGER,
    anonymous_source_count INTEGER,
    is_primary_source INTEGER,
    classified_at TEXT
);

CREATE VIRTUAL TABLE IF NOT EXISTS articles_fts USING fts5(
    article_id UNINDEXED,
    title,
    content,
    snippet
);

CREATE TRIGGER IF NOT EXISTS articles_ai AFTER INSERT ON articles BEGIN
    INSERT INTO articles_fts (article_id, title, content, snippet)
    VALUES (new.id, new.title, new.content, new.snippet);
END;

CREATE TRIGGER IF NOT EXISTS articles_ad AFTER DELETE ON articles BEGIN
    DELETE FROM articles_fts WHERE article_id = old.id;
END;

CREATE TRIGGER IF NOT EXISTS articles_au AFTER UPDATE OF title, content, snippet
ON articles BEGIN
    DELETE FROM articles_fts WHERE article_id = old.id;
    INSERT INTO articles_fts (article_id, title, content, snippet)
    VALUES (new.id, new.title, new.content, new.snippet);
END;

CREATE TABLE IF NOT EXISTS pipeline_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    command TEXT NOT NULL,
    started_at TEXT NOT NULL,
    finished_at TEXT,
    status TEXT NOT NULL DEFAULT 'running',
    articles_processed INTEGER NOT NULL DEFAULT 0,
    clusters_formed INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_articles_source ON articles(source_name);
CREATE INDEX IF NOT EXISTS idx_articles_lean ON articles(lean);
CREATE INDEX IF NOT EXISTS idx_articles_published ON articles(published_at);
CREATE INDEX IF NOT EXISTS idx_articles_fetched ON articles(fetched_at);
CREATE INDEX IF NOT EXISTS idx_articles_content_type ON articles(content_type);
"""

LEAN_ORDER_SQL = """
    CASE lean
        WHEN 'left' THEN 1
        WHEN 'lean-left' THEN 2
        WHEN 'center' THEN 3
        WHEN 'lean-right' THEN 4
        WHEN 'right' THEN 5
        ELSE 6
    END
"""

# wire/reporting vs analysis/opinion/editorial
FACT_BASED_TYPES = CONTENT_TYPES[:2]
NARRATIVE_TYPES = CONTENT_TYPES[2:]


def get_connection(db_path: str) -> sqlite3.Connection:
    """Get a SQLite connection with WAL mode enabled."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str) -> None:
    """Create all tables and set schema version."""
    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        conn.commit()
    finally:
        conn.close()


def _dt_str(dt: datetime | None) -> str | None:
    """ISO-8601 in UTC; naive datetimes are taken to be UTC already."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def _parse_dt(s: str | None) -> datetime | None:
    if s is None:
        return None
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _cutoff(**delta) -> str:
    return _dt_str(datetime.now(timezone.utc) - timedelta(**delta))


def _terms_json(terms: list[LoadedTerm]) -> str:
    return json.dumps([t.to_dict() for t in terms])


def _parse_terms(raw: str | None) -> list[LoadedTerm]:
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed loaded_terms value: %.60s", raw)
        return []
    return [
        LoadedTerm(term=t["term"], neutral=t["neutral"], lean=t["lean"])
        for t in items
        if isinstance(t, dict) and {"term", "neutral", "lean"} <= t.keys()
    ]


# --- Article helpers ---


def insert_article(conn: sqlite3.Connection, article: Article) -> str:
    """Insert an article, returning its ID. Duplicate URLs return the existing ID."""
    try:
        conn.execute(
            """INSERT INTO articles
               (id, url, title, content, snippet, source_name, lean,
                published_at, fetched_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                article.id,
                article.url,
                article.title,
                article.content,
                article.snippet,
                article.source_name,
                article.lean,
                _dt_str(article.published_at),
                _dt_str(article.fetched_at),
            ),
        )
        conn.commit()
        return article.id
    except sqlite3.IntegrityError:
        # Duplicate URL (or id derived from it): return existing
        row = conn.execute("SELECT id FROM articles WHERE url = ?", (article.url,)).fetchone()
        return row["id"] if row else article.id


def article_exists(conn: sqlite3.Connection, url: str) -> bool:
    row = conn.execute("SELECT 1 FROM articles WHERE url = ?", (url,)).fetchone()
    return row is not None


def insert_articles(conn: sqlite3.Connection, articles: list[Article]) -> tuple[int, int]:
    """Insert a batch, returning (inserted, skipped_as_duplicate)."""
    inserted = skipped = 0
    for article in articles:
        if article_exists(conn, article.url):
            skipped += 1
            continue
        insert_article(conn, article)
        inserted += 1
    return inserted, skipped


def _row_to_article(row: sqlite3.Row) -> Article:
    primary = row["is_primary_source"]
    return Article(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        content=row["content"],
        snippet=row["snippet"],
        source_name=row["source_name"],
        lean=row["lean"],
        published_at=_parse_dt(row["published_at"]),
        fetched_at=_parse_dt(row["fetched_at"]),
        content_type=row["content_type"] or UNKNOWN,
        content_type_confidence=row["content_type_confidence"],
        emotional_score=row["emotional_score"],
        loaded_terms=_parse_terms(row["loaded_terms"]),
        named_source_count=row["named_source_count"],
        anonymous_source_count=row["anonymous_source_count"],
        is_primary_source=None if primary is None else bool(primary),
    )


def get_article(conn: sqlite3.Connection, article_id: str) -> Article | None:
    row = conn.execute("SELECT * FROM articles WHERE id = ?", (article_id,)).fetchone()
    return _row_to_article(row) if row else None


def get_unclassified_articles(
    conn: sqlite3.Connection, limit: int | None = None,
) -> list[Article]:
    """Articles never annotated, most recently published first."""
    sql = """SELECT * FROM articles
             WHERE content_type IS NULL OR content_type = ?
             ORDER BY published_at DESC"""
    params: list = [UNKNOWN]
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)
    return [_row_to_article(row) for row in conn.execute(sql, params).fetchall()]


def get_recent_articles(
    conn: sqlite3.Connection, hours: int = 24, limit: int | None = None,
) -> list[Article]:
    """Articles fetched within the last ``hours``, newest first."""
    sql = """SELECT * FROM articles
             WHERE fetched_at >= ?
             ORDER BY published_at DESC"""
    params: list = [_cutoff(hours=hours)]
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)
    return [_row_to_article(row) for row in conn.execute(sql, params).fetchall()]


def get_articles_since(conn: sqlite3.Connection, days: int) -> list[Article]:
    """Articles published (or, lacking a date, fetched) in the last ``days``."""
    rows = conn.execute(
        """SELECT * FROM articles
           WHERE COALESCE(published_at, fetched_at) >= ?
           ORDER BY COALESCE(published_at, fetched_at) DESC""",
        (_cutoff(days=days),),
    ).fetchall()
    return [_row_to_article(row) for row in rows]


def search_articles_by_keywords(
    conn: sqlite3.Connection,
    keywords: list[str],
    days_back: int | None = None,
    limit: int = 50,
) -> list[Article]:
    """Articles whose title or snippet contains any of ``keywords``."""
    keywords = [k for k in keywords if k]
    if not keywords:
        return []

    conditions = " OR ".join("(LOWER(title) LIKE ? OR LOWER(snippet) LIKE ?)" for _ in keywords)
    params: list = []
    for keyword in keywords:
        pattern = f"%{keyword.lower()}%"
        params.extend([pattern, pattern])

    sql = f"SELECT * FROM articles WHERE ({conditions})"
    if days_back is not None:
        sql += " AND COALESCE(published_at, fetched_at) >= ?"
        params.append(_cutoff(days=days_back))
    sql += " ORDER BY published_at DESC LIMIT ?"
    params.append(limit)

    return [_row_to_article(row) for row in conn.execute(sql, params).fetchall()]


def _fts_query(query: str) -> str:
    # Quote every token so user input is never parsed as FTS5 syntax
    tokens = query.split()
    return " ".join('"' + t.replace('"', '""') + '"' for t in tokens)


def search_articles(conn: sqlite3.Connection, query: str, limit: int = 50) -> list[Article]:
    """Full-text search over title, content and snippet, best match first."""
    match = _fts_query(query)
    if not match:
        return []
    rows = conn.execute(
        """SELECT a.* FROM articles_fts f
           JOIN articles a ON a.id = f.article_id
           WHERE articles_fts MATCH ?
           ORDER BY f.rank
           LIMIT ?""",
        (match, limit),
    ).fetchall()
    return [_row_to_article(row) for row in rows]


def write_annotations(
    conn: sqlite3.Connection, article_id: str, analysis: ArticleAnalysis,
) -> bool:
    """Overwrite an article's annotations. Returns False for an unknown ID."""
    cur = conn.execute(
        """UPDATE articles SET
           content_type = ?, content_type_confidence = ?, emotional_score = ?,
           loaded_terms = ?, named_source_count = ?, anonymous_source_count = ?,
           is_primary_source = ?, classified_at = ?
           WHERE id = ?""",
        (
            analysis.content_type,
            analysis.content_type_confidence,
            analysis.emotional_score,
            _terms_json(analysis.loaded_terms),
            analysis.named_source_count,
            analysis.anonymous_source_count,
            int(analysis.is_primary_source),
            _dt_str(datetime.now(timezone.utc)),
            article_id,
        ),
    )
    conn.commit()
    return cur.rowcount > 0


def prune_old_articles(conn: sqlite3.Connection, days: int) -> int:
    """Delete articles fetched more than ``days`` ago. Returns the count removed."""
    cur = conn.execute(
        "DELETE FROM articles WHERE fetched_at < ?", (_cutoff(days=days),),
    )
    conn.commit()
    if cur.rowcount:
        logger.info("Pruned %d articles older than %d days", cur.rowcount, days)
    return cur.rowcount


# --- Reporting helpers ---


def count_articles(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]


def get_content_type_breakdown(conn: sqlite3.Connection) -> list[dict]:
    """Count and mean emotional score per content type."""
    rows = conn.execute(
        """SELECT content_type, COUNT(*) AS count,
                  AVG(emotional_score) AS avg_emotional
           FROM articles
           WHERE content_type IS NOT NULL AND content_type != ?
           GROUP BY content_type
           ORDER BY count DESC""",
        (UNKNOWN,),
    ).fetchall()
    return [dict(row) for row in rows]


def get_fact_vs_narrative(conn: sqlite3.Connection) -> list[dict]:
    """Per lean: wire/reporting items vs analysis/opinion/editorial items."""
    fact_marks = ", ".join("?" for _ in FACT_BASED_TYPES)
    narrative_marks = ", ".join("?" for _ in NARRATIVE_TYPES)
    rows = conn.execute(
        f"""SELECT lean,
                  SUM(CASE WHEN content_type IN ({fact_marks})
                      THEN 1 ELSE 0 END) AS fact_based,
                  SUM(CASE WHEN content_type IN ({narrative_marks})
                      THEN 1 ELSE 0 END) AS narrative_heavy,
                  COUNT(*) AS total
           FROM articles
           WHERE content_type IS NOT NULL AND content_type != ?
           GROUP BY lean
           ORDER BY {LEAN_ORDER_SQL}""",
        (*FACT_BASED_TYPES, *NARRATIVE_TYPES, UNKNOWN),
    ).fetchall()
    return [dict(row) for row in rows]


def get_emotional_by_source(
    conn: sqlite3.Connection, min_articles: int = 5, limit: int = 15,
) -> list[dict]:
    """Mean emotional score per outlet, most emotional first."""
    rows = conn.execute(
        """SELECT source_name, lean,
                  AVG(emotional_score) AS avg_emotional,
                  COUNT(*) AS count
           FROM articles
           WHERE emotional_score IS NOT NULL
           GROUP BY source_name
           HAVING COUNT(*) >= ?
           ORDER BY avg_emotional DESC
           LIMIT ?""",
        (min_articles, limit),
    ).fetchall()
    return [dict(row) for row in rows]


def get_loaded_term_rows(conn: sqlite3.Connection) -> list[tuple[str, str, list[LoadedTerm]]]:
    """(source_name, lean, loaded_terms) for every article with at least one hit."""
    rows = conn.execute(
        """SELECT source_name, lean, loaded_terms FROM articles
           WHERE loaded_terms IS NOT NULL AND loaded_terms != '[]'"""
    ).fetchall()
    return [
        (row["source_name"], row["lean"], _parse_terms(row["loaded_terms"]))
        for row in rows
    ]


def get_topic_coverage(
    conn: sqlite3.Connection, keywords: list[str], hours: int | None = None,
) -> dict[str, int]:
    """Lean -> count of articles whose title or snippet mentions any keyword."""
    keywords = [k for k in keywords if k]
    if not keywords:
        return {}
    conditions = " OR ".join("(LOWER(title) LIKE ? OR LOWER(snippet) LIKE ?)" for _ in keywords)
    params: list = []
    for keyword in keywords:
        pattern = f"%{keyword.lower()}%"
        params.extend([pattern, pattern])

    sql = f"SELECT lean, COUNT(*) AS count FROM articles WHERE ({conditions})"
    if hours is not None:
        sql += " AND fetched_at >= ?"
        params.append(_cutoff(hours=hours))
    sql += " GROUP BY lean"
    return {row["lean"]: row["count"] for row in conn.execute(sql, params).fetchall()}


# --- PipelineRun helpers ---


def insert_run(conn: sqlite3.Connection, run: PipelineRun) -> int:
    cur = conn.execute(
        "INSERT INTO pipeline_runs (command, started_at, status) VALUES (?, ?, ?)",
        (run.command, _dt_str(run.started_at), run.status),
    )
    conn.commit()
    return cur.lastrowid


def finish_run(conn: sqlite3.Connection, run_id: int, run: PipelineRun) -> None:
    conn.execute(
        """UPDATE pipeline_runs SET
           finished_at = ?, status = ?, articles_processed = ?, clusters_formed = ?
           WHERE id = ?""",
        (
            _dt_str(run.finished_at),
            run.status,
            run.articles_processed,
            run.clusters_formed,
            run_id,
        ),
    )
    conn.commit()


def get_recent_runs(conn: sqlite3.Connection, limit: int = 10) -> list[dict]:
    """Fetch recent pipeline runs for stats display."""
    rows = conn.execute(
        "SELECT * FROM pipeline_runs ORDER BY started_at DESC, id DESC LIMIT ?", (limit,)
    ).fetchall()
    return [dict(row) for row in rows]
