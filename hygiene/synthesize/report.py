"""Format analysis results as plain-text reports for the terminal."""

from __future__ import annotations

from hygiene.models import (
    UNKNOWN,
    Article,
    Briefing,
    CoverageBalance,
    LoadedTerm,
    Triangulation,
    bucket_for,
)
from hygiene.terms import TermDictionary

RULE = "=" * 60
THIN_RULE = "-" * 60

TERM_LEAN_MARK = {"left": "(L)", "right": "(R)", "sensational": "(S)"}


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def _pct(part: int, total: int) -> float:
    return 100.0 * part / total if total else 0.0


def format_classification_summary(counts: dict[str, int]) -> str:
    total = sum(counts.values())
    if not total:
        return "No unclassified articles."
    lines = [f"Classified {total} articles:"]
    for content_type, count in sorted(counts.items(), key=lambda kv: -kv[1]):
        lines.append(f"  {content_type:<12} {count:>5}")
    return "\n".join(lines)


def format_content_type_stats(
    breakdown: list[dict], fact_vs_narrative: list[dict], stored: int | None = None,
) -> str:
    """Content-type breakdown plus fact-based vs narrative share per lean."""
    lines = ["CONTENT TYPE BREAKDOWN", RULE]
    total = sum(row["count"] for row in breakdown)
    if stored is not None:
        lines.append(f"  {total} of {stored} stored articles classified")
    if not total:
        lines.append("  No classified articles yet.")
        return "\n".join(lines)

    for row in breakdown:
        emotional = row["avg_emotional"]
        emo = f"{emotional:.2f}" if emotional is not None else "n/a"
        lines.append(
            f"  {row['content_type']:<12} {row['count']:>5} "
            f"({_pct(row['count'], total):5.1f}%)  emo: {emo}"
        )

    lines += ["", "FACT VS NARRATIVE BY LEAN", RULE]
    for row in fact_vs_narrative:
        lines.append(
            f"  {row['lean']:<12} fact: {_pct(row['fact_based'], row['total']):3.0f}%  "
            f"narrative: {_pct(row['narrative_heavy'], row['total']):3.0f}%  "
            f"({row['total']} articles)"
        )
    return "\n".join(lines)


def count_loaded_terms(term_lists: list[list[LoadedTerm]]) -> list[tuple[LoadedTerm, int]]:
    """Usage count of each loaded term, most used first."""
    counts: dict[str, int] = {}
    first: dict[str, LoadedTerm] = {}
    for terms in term_lists:
        for term in terms:
            counts[term.term] = counts.get(term.term, 0) + 1
            first.setdefault(term.term, term)
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [(first[name], count) for name, count in ranked]


def format_narrative_stats(
    by_source: list[dict], term_counts: list[tuple[LoadedTerm, int]], top: int = 15,
) -> str:
    lines = ["NARRATIVE & EMOTIONAL LANGUAGE", RULE]
    if by_source:
        lines.append("Most emotional outlets:")
        for row in by_source[:10]:
            lines.append(
                f"  {row['avg_emotional']:.3f}  {row['source_name']} "
                f"({row['lean']}, {row['count']} articles)"
            )
        lines.append("")
        lines.append("Most neutral outlets:")
        for row in list(reversed(by_source))[:5]:
            lines.append(f"  {row['avg_emotional']:.3f}  {row['source_name']} ({row['lean']})")
    else:
        lines.append("  Not enough scored articles per outlet yet.")

    lines += ["", "Most common loaded terms:"]
    if not term_counts:
        lines.append("  none")
    for term, count in term_counts[:top]:
        lines.append(f"  {TERM_LEAN_MARK.get(term.lean, '')} \"{term.term}\" x{count}")
    return "\n".join(lines)


def format_source_term_usage(rows: list[tuple[str, str, list[LoadedTerm]]], top: int = 20) -> str:
    """Loaded-term totals per outlet, split by the term's lean."""
    stats: dict[str, dict] = {}
    for source_name, lean, terms in rows:
        if not terms:
            continue
        entry = stats.setdefault(source_name, {
            "lean": lean, "articles": 0, "total": 0,
            "left": 0, "right": 0, "sensational": 0, "terms": {},
        })
        entry["articles"] += 1
        for term in terms:
            entry["total"] += 1
            entry[term.lean] = entry.get(term.lean, 0) + 1
            entry["terms"][term.term] = entry["terms"].get(term.term, 0) + 1

    lines = ["LOADED TERM USAGE BY SOURCE", RULE]
    if not stats:
        lines.append("  No loaded terms recorded yet.")
        return "\n".join(lines)

    lines.append(f"  {'Source':<24} {'Lean':<11} {'Terms':>5} {'Art':>4} {'L':>3} {'R':>3} {'S':>3}")
    lines.append("  " + THIN_RULE)
    ranked = sorted(stats.items(), key=lambda kv: -kv[1]["total"])
    for name, s in ranked[:top]:
        top_terms = sorted(s["terms"].items(), key=lambda kv: -kv[1])[:3]
        lines.append(
            f"  {_truncate(name, 24):<24} {s['lean']:<11} {s['total']:>5} {s['articles']:>4} "
            f"{s['left']:>3} {s['right']:>3} {s['sensational']:>3}"
        )
        lines.append(f"      top: {', '.join(t for t, _ in top_terms)}")
    return "\n".join(lines)


def format_neutralized_headlines(
    articles: list[Article], terms: TermDictionary, per_bucket: int = 6,
) -> str:
    """Headlines containing loaded terms, shown beside a neutral rewrite."""
    grouped: dict[str, list[tuple[Article, str, list]]] = {"left": [], "center": [], "right": []}
    for article in articles:
        neutral, used = terms.neutralize(article.title)
        if used:
            grouped[bucket_for(article.lean) or "center"].append((article, neutral, used))

    found = sum(len(items) for items in grouped.values())
    lines = ["NEUTRALIZED HEADLINES", RULE, f"{len(articles)} headlines checked, {found} with loaded terms", ""]
    for bucket, items in grouped.items():
        if not items:
            continue
        lines.append(f"{bucket.upper()} SOURCES ({len(items)} headlines)")
        lines.append(THIN_RULE)
        for article, neutral, used in items[:per_bucket]:
            lines.append(f"[{article.source_name}] ({article.lean})")
            lines.append(f"  original:    {_truncate(article.title, 70)}")
            lines.append(f"  neutralized: {_truncate(neutral, 70)}")
            lines.append("  terms: " + ", ".join(f'"{e.phrase}" -> "{e.neutral}"' for e in used))
            lines.append("")
    return "\n".join(lines).rstrip()


def format_triangulation(result: Triangulation) -> str:
    lines = [f"COVERAGE ANALYSIS: {result.event_description}", RULE, f"Event {result.event_id}", ""]

    lines.append("Sources by lean:")
    by_lean: dict[str, list] = {}
    for source in result.sources:
        by_lean.setdefault(source.lean, []).append(source)
    for lean, sources in by_lean.items():
        lines.append(f"  {lean.upper()}:")
        for source in sources[:3]:
            lines.append(
                f"    [{source.content_type}, emo {source.emotional_score:.2f}] "
                f"{source.source_name}: {_truncate(source.headline, 60)}"
            )

    if result.agreed_facts:
        lines += ["", "Agreed facts (reported across leans):"]
        lines += [f"  * {_truncate(fact, 80)}" for fact in result.agreed_facts[:5]]

    for diff in result.framing_differences:
        lines += ["", f"Framing ({diff.aspect}):"]
        lines.append(f"  left:   {diff.left_framing}")
        if diff.center_framing:
            lines.append(f"  center: {diff.center_framing}")
        lines.append(f"  right:  {diff.right_framing}")

    if result.omissions:
        lines += ["", "Potential omissions:"]
        for omission in result.omissions[:5]:
            mark = "!" if omission.significance == "high" else "?"
            lines.append(f"  {mark} {_truncate(omission.fact, 60)}")
            lines.append(
                f"      included by: {', '.join(omission.included_by)}; "
                f"omitted by: {', '.join(omission.omitted_by)}"
            )

    loaded = {t.term: t for s in result.sources for t in s.loaded_terms}
    if loaded:
        lines += ["", "Loaded terms used:"]
        for term in loaded.values():
            lines.append(f"  {TERM_LEAN_MARK.get(term.lean, '')} \"{term.term}\" -> \"{term.neutral}\"")

    return "\n".join(lines)


def format_coverage(balance: CoverageBalance) -> str:
    return (
        f"coverage: {balance.kind} (left {balance.left_count}, right {balance.right_count}, "
        f"imbalance {balance.imbalance:.2f})"
    )


def format_search_results(query: str, articles: list[Article]) -> str:
    if not articles:
        return f"No stored articles match {query!r}."
    lines = [f"SEARCH: {query} ({len(articles)} matches)", RULE]
    for article in articles:
        ctype = article.content_type if article.content_type != UNKNOWN else "unclassified"
        lines.append(f"[{article.source_name}] ({article.lean}, {ctype})")
        lines.append(f"  {_truncate(article.title, 76)}")
        lines.append(f"  {article.url}")
    return "\n".join(lines)


def format_briefing(briefing: Briefing) -> str:
    """Story clusters with their coverage balance and triangulations."""
    if not briefing.clusters:
        return "No multi-source stories in the current window."

    balance = {c.cluster_id: c for c in briefing.coverage}
    lines = [f"BRIEFING: {len(briefing.clusters)} stories", RULE]
    for cluster in briefing.clusters:
        flag = " [competing narratives]" if cluster.has_competing_narratives else ""
        lines.append(f"{cluster.topic}{flag}")
        leans = ", ".join(f"{lean} {n}" for lean, n in cluster.lean_breakdown.items())
        lines.append(f"  {len(cluster.articles)} articles from {len(cluster.source_names)} outlets ({leans})")
        cov = balance.get(cluster.id)
        if cov:
            lines.append(f"  {format_coverage(cov)}")
        for article in cluster.articles[:3]:
            lines.append(f"    - [{article.source_name}] {_truncate(article.title, 70)}")
        lines.append("")

    for result in briefing.triangulations:
        lines += [format_triangulation(result), ""]
    return "\n".join(lines).rstrip()


def format_runs(runs: list[dict]) -> str:
    if not runs:
        return "No pipeline runs yet."
    lines = [
        f"{'Run':>4} {'Command':<10} {'Status':<10} {'Articles':<10} {'Clusters':<10} Started",
        THIN_RULE,
    ]
    for r in runs:
        lines.append(
            f"{r['id']:>4} {r['command']:<10} {r['status']:<10} "
            f"{r['articles_processed']:<10} {r['clusters_formed']:<10} {r['started_at']}"
        )
    return "\n".join(lines)
