"""Per-article annotation: content type, loaded language, sourcing."""

from __future__ import annotations

import logging

from hygiene.config import get_analysis_config
from hygiene.models import Article, ArticleAnalysis
from hygiene.process import register_processor
from hygiene.process.base import BaseProcessor
from hygiene.process.narrative import analyze_article
from hygiene.terms import TermDictionary

logger = logging.getLogger(__name__)


@register_processor("annotate")
class AnnotateProcessor(BaseProcessor):
    """Classify and score each article, writing results onto the article."""

    def __init__(self, config: dict, terms: TermDictionary):
        super().__init__(config)
        self.terms = terms

    @property
    def name(self) -> str:
        return "annotate"

    def annotate(self, article: Article) -> ArticleAnalysis:
        """Analyze one article and write the results onto it."""
        max_chars = get_analysis_config(self.config, "classify").get("max_text_chars")
        analysis = analyze_article(article, self.terms, max_chars=max_chars)
        analysis.apply_to(article)
        logger.debug(
            "%s: %s (%.2f), emotional %.2f, %d loaded terms",
            article.id, analysis.content_type, analysis.content_type_confidence,
            analysis.emotional_score, len(analysis.loaded_terms),
        )
        return analysis

    def process(self, articles: list[Article]) -> list[Article]:
        for article in articles:
            self.annotate(article)
        logger.info("Annotated %d articles", len(articles))
        return articles
