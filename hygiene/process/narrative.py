"""Narrative analysis: loaded terms, emotional language, and sourcing quality."""

from __future__ import annotations

import re

from hygiene.models import (
    Article,
    ArticleAnalysis,
    NarrativeSignals,
    PrimarySourceResult,
    SourceCounts,
)
from hygiene.process.classifier import classify_content_type
from hygiene.terms import TermDictionary

SENSATIONAL_WEIGHT = 0.15
PARTISAN_WEIGHT = 0.08

# (family, pattern, weight per match)
EMOTIONAL_PATTERNS = [
    ("shock", re.compile(r"\b(shocking|stunning|alarming|terrifying|horrifying)\b", re.I), 0.10),
    ("outrage", re.compile(r"\b(outrag\w*|furious|enraged|livid)", re.I), 0.08),
    ("destructive", re.compile(r"\b(destroy|demolish|eviscerate|annihilate)\w*", re.I), 0.08),
    ("hero_villain", re.compile(r"\b(hero|villain|monster|angel)\w*", re.I), 0.06),
    ("exclamation", re.compile(r"!{2,}"), 0.05),
    ("question", re.compile(r"\?{2,}"), 0.03),
]

NAMED_SOURCE_PATTERNS = [
    re.compile(r"([A-Z][a-z]+ [A-Z][a-z]+),?\s+(said|stated|told|confirmed|argued|noted)\b"),
    re.compile(r"according to ([A-Z][a-z]+ [A-Z][a-z]+)"),
]

ANONYMOUS_SOURCE_PATTERNS = [
    re.compile(
        r"\b(a|an|one|two|three|several|multiple) (source|official|insider|person|people)s?"
        r" (who|familiar|close)",
        re.I,
    ),
    re.compile(r"\bsources (say|said|told|confirmed)\b", re.I),
    re.compile(r"according to (a|an|one|two|three|several) (source|official|person)", re.I),
    re.compile(r"\b(spoke|speaking) on (the )?condition of anonymity", re.I),
]

EXCLUSIVE_RE = re.compile(r"exclusive|investigation|documents (obtained|reviewed|show)", re.I)
INTERVIEW_RE = re.compile(r"interviewed|spoke (with|to)|in an interview", re.I)
DOCUMENT_RE = re.compile(
    r"according to (documents|records|data)|documents show|records reveal", re.I,
)
WIRE_ATTRIBUTION_RE = re.compile(
    r"\b(AP|Reuters|AFP|Associated Press) (reports?|contributed)", re.I,
)


def analyze_narrative(
    title: str | None, content: str | None, terms: TermDictionary,
) -> NarrativeSignals:
    """Score loaded and emotional language in a title plus optional body."""
    text = f"{title or ''} {content or ''}".lower()
    signals: list[str] = []
    score = 0.0

    loaded = []
    for entry in terms.find(text):
        loaded.append(entry.as_loaded_term())
        signals.append(f'Loaded term: "{entry.phrase}" ({entry.lean}) -> "{entry.neutral}"')
        score += SENSATIONAL_WEIGHT if entry.lean == "sensational" else PARTISAN_WEIGHT

    for family, pattern, weight in EMOTIONAL_PATTERNS:
        matches = [m.group(0) for m in pattern.finditer(text)]
        if matches:
            score += weight * len(matches)
            shown = ", ".join(matches[:3]) + ("..." if len(matches) > 3 else "")
            signals.append(f"Emotional pattern ({family}): {shown}")

    return NarrativeSignals(
        emotional_score=min(1.0, max(0.0, score)),
        loaded_terms=loaded,
        signals=signals,
    )


def count_sources(content: str | None) -> SourceCounts:
    """Count named vs anonymous source attributions."""
    if not content:
        return SourceCounts()

    named = sum(len(p.findall(content)) for p in NAMED_SOURCE_PATTERNS)
    anonymous = sum(len(p.findall(content)) for p in ANONYMOUS_SOURCE_PATTERNS)

    signals = []
    if named:
        signals.append(f"Named sources: {named}")
    if anonymous:
        signals.append(f"Anonymous sources: {anonymous}")
    return SourceCounts(named_count=named, anonymous_count=anonymous, signals=signals)


def is_primary_source(content: str | None, url: str = "") -> PrimarySourceResult:
    """Score whether an item looks like original, primary-source reporting.

    Only the body text is scored; ``url`` is not a signal.
    """
    content = content or ""
    score = 0
    signals = []
    if EXCLUSIVE_RE.search(content):
        score += 2
        signals.append("Exclusive/investigation language")
    if INTERVIEW_RE.search(content):
        score += 1
        signals.append("Original interview content")
    if DOCUMENT_RE.search(content):
        score += 1
        signals.append("Document citations")
    if WIRE_ATTRIBUTION_RE.search(content):
        score -= 1
        signals.append("Wire service attribution (secondary)")

    return PrimarySourceResult(is_primary=score >= 2, score=score, signals=signals)


def analyze_article(
    article: Article, terms: TermDictionary, max_chars: int | None = None,
) -> ArticleAnalysis:
    """Run every per-item analysis and collect the annotations."""
    content = article.content
    if content and max_chars:
        content = content[:max_chars]

    classification = classify_content_type(
        article.url, article.source_name, article.title, content,
    )
    narrative = analyze_narrative(article.title, content, terms)

    sources = SourceCounts()
    primary = PrimarySourceResult()
    if content:
        sources = count_sources(content)
        primary = is_primary_source(content, article.url)

    return ArticleAnalysis(
        content_type=classification.content_type,
        content_type_confidence=classification.confidence,
        emotional_score=narrative.emotional_score,
        loaded_terms=narrative.loaded_terms,
        named_source_count=sources.named_count,
        anonymous_source_count=sources.anonymous_count,
        is_primary_source=primary.is_primary,
        signals=[
            *classification.signals,
            *narrative.signals,
            *sources.signals,
            *primary.signals,
        ],
    )
