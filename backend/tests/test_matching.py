"""Unit tests for team-name normalization and fuzzy matching."""
from __future__ import annotations

import pytest

from resolution.matching import TeamNameMatcher, matches, normalize, similarity
from resolution.vocabulary import AliasRule, Vocabulary, default_vocabulary


# ── normalize ───────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "name",
    [
        "Wolverhampton Wanderers",
        "Brighton & Hove Albion",
        "Atlético Madrid",
        "Bodø/Glimt",
        "St. Louis Blues",
        "  Montréal   Canadiens ",
        "Paris Saint-Germain",
        "\u01fe",
        "\u210c",
        "\u1d2c",
        "\u01festerg\u00f6tland \u210cAMMARBY",
        "",
    ],
)
def test_normalize_is_idempotent(name: str) -> None:
    once = normalize(name)
    assert normalize(once) == once


def test_normalize_folds_compatibility_letters_in_one_pass() -> None:
    assert normalize("Ǿ") == "o"
    assert normalize("ℌ") == "h"
    assert normalize("ᴬ") == "a"


def test_normalize_aliases_wolves() -> None:
    assert normalize("Wolverhampton Wanderers") == normalize("Wolves") == "wolves"


def test_normalize_strips_diacritics_and_punctuation() -> None:
    assert normalize("Atlético Madrid") == "atletico madrid"
    assert normalize("Bodø/Glimt") == "bodo glimt"
    assert normalize("Borussia Mönchengladbach") == "borussia monchengladbach"


def test_normalize_brighton_variants() -> None:
    assert normalize("Brighton & Hove Albion") == "brighton"
    assert normalize("Brighton and Hove Albion") == "brighton"


def test_normalize_st_louis() -> None:
    assert normalize("St. Louis Blues") == "st louis blues"
    assert normalize("St.Louis Blues") == "st louis blues"


def test_normalize_alias_needs_word_boundary() -> None:
    # "wolverhamptonx" is not the alias target
    assert normalize("Wolverhamptonx") == "wolverhamptonx"


# ── matches ─────────────────────────────────────────────────────────────

def test_empty_names_never_match() -> None:
    assert matches("", "Chelsea") is False
    assert matches("Chelsea", "") is False
    assert matches("  ", "  ") is False


def test_containment_matches() -> None:
    assert matches("FC Barcelona", "Barcelona")
    assert matches("Chicago Bulls", "Bulls")


def test_alias_matches() -> None:
    assert matches("Wolves", "Wolverhampton Wanderers")
    assert matches("Tottenham", "Tottenham Hotspur")


def test_long_token_overlap_matches() -> None:
    assert matches("Los Angeles Lakers", "LA Lakers")


def test_short_tokens_do_not_match() -> None:
    assert not matches("AC Milan", "AC Sparta")


def test_unrelated_names_do_not_match() -> None:
    assert not matches("Liverpool", "Chelsea")


# ── similarity ──────────────────────────────────────────────────────────

def test_similarity_identical_after_normalization() -> None:
    assert similarity("Atlético Madrid", "Atletico Madrid") == 100.0


def test_similarity_ranks_closer_name_higher() -> None:
    assert similarity("Real Madrid CF", "Real Madrid") > similarity("Real Sociedad", "Real Madrid")


def test_similarity_empty_is_zero() -> None:
    assert similarity("", "Chelsea") == 0.0


# ── injected vocabulary ─────────────────────────────────────────────────

def test_custom_vocabulary_aliases() -> None:
    vocab = Vocabulary(aliases=[AliasRule(pattern="inter milan", replacement="internazionale")])
    m = TeamNameMatcher(vocab)
    assert m.normalize("Inter Milan") == "internazionale"
    assert m.matches("Internazionale", "Inter Milan")


def test_packaged_vocabulary_loads() -> None:
    vocab = default_vocabulary()
    assert vocab.version >= 1
    assert "epl" in vocab.soccer_tags
    assert vocab.compiled_aliases
