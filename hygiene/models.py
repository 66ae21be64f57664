"""Core data models for the analysis pipeline."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone

# Ordered from left to right
LEANS = ("left", "lean-left", "center", "lean-right", "right")

BUCKETS = {
    "left": ("left", "lean-left"),
    "center": ("center",),
    "right": ("lean-right", "right"),
}

# Least to most interpretive framing
CONTENT_TYPES = ("wire", "reporting", "analysis", "opinion", "editorial")
UNKNOWN = "unknown"


def bucket_for(lean: str) -> str | None:
    """Map a lean category to its left/center/right bucket."""
    for bucket, leans in BUCKETS.items():
        if lean in leans:
            return bucket
    return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LoadedTerm:
    """A dictionary hit: the phrase, its neutral rephrasing and lean tag."""

    term: str
    neutral: str
    lean: str  # left, right, sensational

    def to_dict(self) -> dict:
        return {"term": self.term, "neutral": self.neutral, "lean": self.lean}


@dataclass
class Article:
    """A single news item harvested from a feed."""

    url: str
    title: str
    source_name: str
    lean: str  # one of LEANS
    content: str | None = None
    snippet: str | None = None
    published_at: datetime | None = None
    fetched_at: datetime = field(default_factory=_utcnow)
    id: str = ""

    # Annotations, overwritten on every classification pass
    content_type: str = UNKNOWN
    content_type_confidence: float | None = None
    emotional_score: float | None = None
    loaded_terms: list[LoadedTerm] = field(default_factory=list)
    named_source_count: int | None = None
    anonymous_source_count: int | None = None
    is_primary_source: bool | None = None

    def __post_init__(self):
        if not self.id and self.url:
            self.id = hashlib.sha256(self.url.encode()).hexdigest()[:16]


@dataclass
class ClassificationResult:
    content_type: str
    confidence: float
    signals: list[str] = field(default_factory=list)


@dataclass
class NarrativeSignals:
    emotional_score: float
    loaded_terms: list[LoadedTerm] = field(default_factory=list)
    signals: list[str] = field(default_factory=list)


@dataclass
class SourceCounts:
    named_count: int = 0
    anonymous_count: int = 0
    signals: list[str] = field(default_factory=list)


@dataclass
class PrimarySourceResult:
    is_primary: bool = False
    score: int = 0
    signals: list[str] = field(default_factory=list)


@dataclass
class ArticleAnalysis:
    """Every annotation computed for one article."""

    content_type: str
    content_type_confidence: float
    emotional_score: float
    loaded_terms: list[LoadedTerm]
    named_source_count: int
    anonymous_source_count: int
    is_primary_source: bool
    signals: list[str] = field(default_factory=list)

    def apply_to(self, article: Article) -> Article:
        """Overwrite the article's annotation fields with this analysis."""
        article.content_type = self.content_type
        article.content_type_confidence = self.content_type_confidence
        article.emotional_score = self.emotional_score
        article.loaded_terms = list(self.loaded_terms)
        article.named_source_count = self.named_source_count
        article.anonymous_source_count = self.anonymous_source_count
        article.is_primary_source = self.is_primary_source
        return article


@dataclass
class StoryCluster:
    """A group of articles that likely describe the same story."""

    id: str
    topic: str
    keywords: list[str]
    articles: list[Article] = field(default_factory=list)
    lean_breakdown: dict[str, int] = field(default_factory=dict)
    has_competing_narratives: bool = False

    @property
    def lean_diversity(self) -> int:
        return sum(1 for count in self.lean_breakdown.values() if count > 0)

    @property
    def source_names(self) -> set[str]:
        return {a.source_name for a in self.articles}


@dataclass
class TriangulatedSource:
    """One article's coverage of an event, with its annotations."""

    article_id: str
    source_name: str
    lean: str
    content_type: str
    emotional_score: float
    loaded_terms: list[LoadedTerm]
    headline: str


@dataclass
class FramingDiff:
    aspect: str
    left_framing: str
    right_framing: str
    center_framing: str | None = None


@dataclass
class Omission:
    fact: str
    included_by: list[str]
    omitted_by: list[str]
    significance: str  # low, medium, high


@dataclass
class Triangulation:
    """Cross-bucket comparison of coverage for one event."""

    event_id: str
    event_description: str
    sources: list[TriangulatedSource] = field(default_factory=list)
    agreed_facts: list[str] = field(default_factory=list)
    framing_differences: list[FramingDiff] = field(default_factory=list)
    omissions: list[Omission] = field(default_factory=list)


@dataclass
class CoverageBalance:
    """Left/right coverage volume for a topic."""

    topic: str
    left_count: int
    right_count: int
    imbalance: float
    kind: str  # wedge, bridge, mixed
    cluster_id: str | None = None


@dataclass
class Briefing:
    clusters: list[StoryCluster] = field(default_factory=list)
    triangulations: list[Triangulation] = field(default_factory=list)
    coverage: list[CoverageBalance] = field(default_factory=list)


@dataclass
class PipelineRun:
    """Record of a single batch pass."""

    command: str  # ingest, classify, briefing
    started_at: datetime = field(default_factory=_utcnow)
    finished_at: datetime | None = None
    status: str = "running"  # running, completed, failed
    articles_processed: int = 0
    clusters_formed: int = 0
    id: int | None = None
