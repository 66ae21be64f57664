"""Content-type classifier: wire / reporting / analysis / opinion / editorial.

Classification is an ordered list of independent rules. Each rule's check
returns a human-readable signal (or None); the first rule that fires decides
the content type and confidence.
"""

from __future__ import annotations

import re
from typing import Callable, NamedTuple
from urllib.parse import urlparse

from hygiene.models import Article, ClassificationResult

# Outlets that always produce one kind of content
SOURCE_CONTENT_TYPES = {
    "AP News": "wire",
    "Reuters": "wire",
    "PBS NewsHour": "reporting",
    "AllSides": "analysis",
}

WIRE_SERVICE_DOMAINS = ("apnews.com", "reuters.com", "afp.com")

URL_PATTERNS = {
    "reporting": [r"investigation", r"exclusive", r"documents-show"],
    "analysis": [r"analysis", r"explainer", r"what-to-know", r"breakdown"],
    "opinion": [r"opinion", r"op-ed", r"oped", r"commentary", r"perspective", r"column"],
    "editorial": [r"editorial", r"editors", r"our-view", r"the-board"],
}

TITLE_PATTERNS = {
    "reporting": [r"exclusive:", r"investigation:", r"documents show", r"records reveal"],
    "analysis": [r"analysis:", r"explainer:", r"what to know", r"explained:", r"^\s*(why|how)\s"],
    "opinion": [r"opinion:", r"op-ed:", r"commentary:", r"column:", r"my view:"],
    "editorial": [r"editorial:", r"our view:", r"the board:"],
}

FIRST_PERSON = re.compile(r"\bI\s+(think|believe|argue|feel|contend)\b", re.IGNORECASE)
EXPLANATORY = re.compile(
    r"this (means|suggests|indicates|shows)|here's (why|what|how)"
    r"|the (takeaway|bottom line)",
    re.IGNORECASE,
)
ATTRIBUTION = re.compile(
    r"according to|said in (a|an) (statement|interview)"
    r"|officials (said|confirmed)|documents (show|reveal)",
    re.IGNORECASE,
)

MIN_CONTENT_CHARS = 100


class ArticleText(NamedTuple):
    url: str
    source_name: str
    title: str
    content: str


class ClassificationRule(NamedTuple):
    """A single predicate -> (content_type, confidence) rule."""

    name: str
    check: Callable[[ArticleText], str | None]
    content_type: str
    confidence: float


def _compile_all(patterns: dict[str, list[str]]) -> dict[str, list[re.Pattern]]:
    return {
        ctype: [re.compile(p, re.IGNORECASE) for p in plist]
        for ctype, plist in patterns.items()
    }


_URL_RES = _compile_all(URL_PATTERNS)
_TITLE_RES = _compile_all(TITLE_PATTERNS)


def _host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def _path(url: str) -> str:
    try:
        parsed = urlparse(url)
    except ValueError:
        return ""
    return f"{parsed.path}?{parsed.query}".lower() if parsed.query else parsed.path.lower()


def _known_source(content_type: str) -> Callable[[ArticleText], str | None]:
    def check(text: ArticleText) -> str | None:
        if SOURCE_CONTENT_TYPES.get(text.source_name) == content_type:
            return f"Known source type: {text.source_name} -> {content_type}"
        return None

    return check


def _wire_domain(text: ArticleText) -> str | None:
    host = _host(text.url)
    for domain in WIRE_SERVICE_DOMAINS:
        if host == domain or host.endswith("." + domain):
            return f"Wire service domain: {domain}"
    return None


def _url_pattern(content_type: str) -> Callable[[ArticleText], str | None]:
    def check(text: ArticleText) -> str | None:
        path = _path(text.url)
        for pattern in _URL_RES[content_type]:
            if pattern.search(path):
                return f"URL pattern match: {pattern.pattern} -> {content_type}"
        return None

    return check


def _title_pattern(content_type: str) -> Callable[[ArticleText], str | None]:
    def check(text: ArticleText) -> str | None:
        for pattern in _TITLE_RES[content_type]:
            if pattern.search(text.title):
                return f"Title pattern: {pattern.pattern} -> {content_type}"
        return None

    return check


def _long_enough(text: ArticleText) -> bool:
    return len(text.content) >= MIN_CONTENT_CHARS


def _first_person(text: ArticleText) -> str | None:
    if not _long_enough(text):
        return None
    count = len(FIRST_PERSON.findall(text.content))
    if count >= 2:
        return f"First-person opinion language ({count} instances)"
    return None


def _explanatory(text: ArticleText) -> str | None:
    if not _long_enough(text):
        return None
    count = len(EXPLANATORY.findall(text.content))
    if count >= 2:
        return f"Explanatory/analysis language ({count} instances)"
    return None


def _attribution(text: ArticleText) -> str | None:
    if not _long_enough(text):
        return None
    count = len(ATTRIBUTION.findall(text.content))
    if count >= 3:
        return f"Strong attribution ({count} instances)"
    return None


def _default(text: ArticleText) -> str:
    return "Default classification: reporting"


def _build_rules() -> list[ClassificationRule]:
    rules = [
        ClassificationRule(f"known_source_{ctype}", _known_source(ctype), ctype, 0.9)
        for ctype in dict.fromkeys(SOURCE_CONTENT_TYPES.values())
    ]
    rules.append(ClassificationRule("wire_domain", _wire_domain, "wire", 0.85))
    rules.extend(
        ClassificationRule(f"url_{ctype}", _url_pattern(ctype), ctype, 0.75)
        for ctype in URL_PATTERNS
    )
    rules.extend(
        ClassificationRule(f"title_{ctype}", _title_pattern(ctype), ctype, 0.7)
        for ctype in TITLE_PATTERNS
    )
    rules.extend([
        ClassificationRule("content_first_person", _first_person, "opinion", 0.7),
        ClassificationRule("content_explanatory", _explanatory, "analysis", 0.65),
        ClassificationRule("content_attribution", _attribution, "reporting", 0.6),
        ClassificationRule("default", _default, "reporting", 0.3),
    ])
    return rules


RULES: list[ClassificationRule] = _build_rules()


def classify_content_type(
    url: str,
    source_name: str,
    title: str,
    content: str | None = None,
    rules: list[ClassificationRule] | None = None,
) -> ClassificationResult:
    """Classify an item by source, URL, title and (optionally) full text."""
    text = ArticleText(url or "", source_name or "", title or "", content or "")
    for rule in rules if rules is not None else RULES:
        signal = rule.check(text)
        if signal:
            return ClassificationResult(
                content_type=rule.content_type,
                confidence=rule.confidence,
                signals=[signal],
            )
    return ClassificationResult("reporting", 0.3, [_default(text)])


def classify(article: Article) -> ClassificationResult:
    return classify_content_type(
        article.url, article.source_name, article.title, article.content,
    )
