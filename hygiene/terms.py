"""Loaded-term dictionary: load, validate and match against text."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml

from hygiene.models import LoadedTerm

logger = logging.getLogger(__name__)

DEFAULT_TERMS_PATH = Path(__file__).parent / "data" / "loaded_terms.yaml"

TERM_LEANS = ("left", "right", "sensational")


class TermDictionaryError(ValueError):
    """The term dictionary is malformed and cannot be used."""


@dataclass(frozen=True)
class TermEntry:
    phrase: str
    neutral: str
    lean: str  # left, right, sensational

    def as_loaded_term(self) -> LoadedTerm:
        return LoadedTerm(term=self.phrase, neutral=self.neutral, lean=self.lean)


class TermDictionary(Mapping):
    """Read-only, ordered mapping of phrase -> TermEntry.

    All phrases are compiled into one case-insensitive alternation, longest
    first, so at any position the longest phrase wins and a phrase contained
    in a longer match is never counted on its own.
    """

    def __init__(self, entries: list[TermEntry], version: int | None = None):
        self.version = version
        self._entries: dict[str, TermEntry] = {}
        self._by_key: dict[str, TermEntry] = {}
        for entry in entries:
            key = entry.phrase.lower()
            if key in self._by_key:
                raise TermDictionaryError(f"Duplicate phrase: {entry.phrase!r}")
            self._entries[entry.phrase] = entry
            self._by_key[key] = entry
        self._pattern = self._compile()

    def _compile(self) -> re.Pattern | None:
        if not self._by_key:
            return None
        # Stable sort keeps file order among equal lengths
        phrases = sorted(self._by_key, key=len, reverse=True)
        alternation = "|".join(re.escape(p) for p in phrases)
        try:
            return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)
        except re.error as exc:
            raise TermDictionaryError(f"Cannot compile term matcher: {exc}") from exc

    def __getitem__(self, phrase: str) -> TermEntry:
        return self._entries[phrase]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, text: str) -> TermEntry | None:
        """Case-insensitive lookup of a matched span."""
        return self._by_key.get(text.lower())

    def find(self, text: str) -> list[TermEntry]:
        """Return the distinct entries hit in ``text``, in order of first occurrence."""
        if not text or self._pattern is None:
            return []
        found: dict[str, TermEntry] = {}
        for match in self._pattern.finditer(text):
            entry = self.lookup(match.group(0))
            if entry is not None and entry.phrase not in found:
                found[entry.phrase] = entry
        return list(found.values())

    def neutralize(self, text: str) -> tuple[str, list[TermEntry]]:
        """Replace every loaded phrase with ``[neutral]``."""
        if not text or self._pattern is None:
            return text, []
        used: dict[str, TermEntry] = {}

        def _swap(match: re.Match) -> str:
            entry = self.lookup(match.group(0))
            if entry is None:
                return match.group(0)
            used.setdefault(entry.phrase, entry)
            return f"[{entry.neutral}]"

        return self._pattern.sub(_swap, text), list(used.values())


def _parse_entry(phrase, data) -> TermEntry:
    if not isinstance(phrase, str) or not phrase.strip():
        raise TermDictionaryError(f"Invalid phrase: {phrase!r}")
    if not isinstance(data, dict):
        raise TermDictionaryError(f"Entry for {phrase!r} must be a mapping")
    neutral = data.get("neutral")
    if not isinstance(neutral, str) or not neutral.strip():
        raise TermDictionaryError(f"Entry for {phrase!r} has no neutral rephrasing")
    lean = data.get("lean")
    if lean not in TERM_LEANS:
        raise TermDictionaryError(
            f"Entry for {phrase!r} has invalid lean {lean!r} "
            f"(expected one of {', '.join(TERM_LEANS)})"
        )
    return TermEntry(phrase=phrase.strip(), neutral=neutral.strip(), lean=lean)


def parse_terms(raw) -> TermDictionary:
    """Build a TermDictionary from already-parsed YAML data."""
    if not isinstance(raw, dict):
        raise TermDictionaryError("Term dictionary must be a mapping")
    terms = raw.get("terms")
    if not isinstance(terms, dict):
        raise TermDictionaryError("Term dictionary has no 'terms' mapping")
    version = raw.get("version")
    entries = [_parse_entry(phrase, data) for phrase, data in terms.items()]
    return TermDictionary(entries, version=version)


def load_terms(path: str | Path | None = None) -> TermDictionary:
    """Load and validate the term dictionary. Raises TermDictionaryError."""
    path = Path(path) if path else DEFAULT_TERMS_PATH
    if not path.is_file():
        raise TermDictionaryError(f"Term dictionary not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise TermDictionaryError(f"Cannot parse {path}: {exc}") from exc

    terms = parse_terms(raw)
    logger.info(
        "Loaded %d terms from %s (version %s)", len(terms), path, terms.version,
    )
    return terms
