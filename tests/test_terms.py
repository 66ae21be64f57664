"""Tests for the loaded-term dictionary."""

from __future__ import annotations

import pytest

from hygiene.terms import (
    TermDictionary,
    TermDictionaryError,
    TermEntry,
    load_terms,
    parse_terms,
)


def test_bundled_dictionary_loads(terms):
    """The shipped dictionary is valid and tagged with every lean."""
    assert len(terms) > 500
    assert terms.version == 1
    assert {e.lean for e in terms.values()} == {"left", "right", "sensational"}


def test_entries_have_neutral_rephrasing(terms):
    entry = terms["ai doomers"]
    assert entry.neutral == "AI safety advocates"
    assert entry.lean == "right"


def test_find_prefers_longest_phrase(terms):
    """'ai doomers' wins over the shorter 'doomers' it contains."""
    found = terms.find("ai doomers warn of existential risk from superintelligence")
    assert [e.phrase for e in found] == ["ai doomers", "existential risk", "superintelligence"]


def test_find_is_case_insensitive_and_word_bounded():
    d = TermDictionary([TermEntry("regime", "government", "right")])
    assert [e.phrase for e in d.find("The REGIME responded")] == ["regime"]
    assert d.find("A new regimen of tests") == []


def test_find_reports_each_entry_once():
    d = TermDictionary([TermEntry("slams", "criticizes", "sensational")])
    assert len(d.find("He slams them, she slams back")) == 1


def test_find_handles_empty_text(terms):
    assert terms.find("") == []


def test_neutralize_replaces_phrases(terms):
    text, used = terms.neutralize("AI doomers warn of existential risk")
    assert text == "[AI safety advocates] warn of [significant risk]"
    assert [e.phrase for e in used] == ["ai doomers", "existential risk"]


def test_neutralize_leaves_clean_text_alone(terms):
    text, used = terms.neutralize("Senate passes budget bill")
    assert text == "Senate passes budget bill"
    assert used == []


def test_parse_rejects_unknown_lean():
    with pytest.raises(TermDictionaryError, match="invalid lean"):
        parse_terms({"terms": {"thing": {"neutral": "other", "lean": "purple"}}})


def test_parse_rejects_missing_neutral():
    with pytest.raises(TermDictionaryError, match="no neutral"):
        parse_terms({"terms": {"thing": {"lean": "left"}}})


def test_parse_rejects_case_folded_duplicates():
    raw = {"terms": {
        "Regime": {"neutral": "government", "lean": "right"},
        "regime": {"neutral": "government", "lean": "right"},
    }}
    with pytest.raises(TermDictionaryError, match="Duplicate"):
        parse_terms(raw)


def test_parse_rejects_missing_terms_mapping():
    with pytest.raises(TermDictionaryError):
        parse_terms({"version": 1})
    with pytest.raises(TermDictionaryError):
        parse_terms(["not", "a", "mapping"])


def test_load_terms_missing_file(tmp_path):
    with pytest.raises(TermDictionaryError, match="not found"):
        load_terms(tmp_path / "missing.yaml")


def test_load_terms_bad_yaml(tmp_path):
    path = tmp_path / "terms.yaml"
    path.write_text("terms: {unclosed: [\n")
    with pytest.raises(TermDictionaryError, match="Cannot parse"):
        load_terms(path)


def test_load_terms_custom_file(tmp_path):
    path = tmp_path / "terms.yaml"
    path.write_text(
        "version: 7\n"
        "terms:\n"
        '  "job killer": {neutral: "costly regulation", lean: right}\n'
    )
    d = load_terms(path)
    assert d.version == 7
    assert list(d) == ["job killer"]
