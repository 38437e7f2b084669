"""
Team-name normalization and fuzzy comparison.

Provider names differ from recorded names by diacritics, punctuation,
sponsor suffixes and historical forms ("Wolverhampton Wanderers" vs
"Wolves"). Everything here is pure: no I/O, no logging on the hot path.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Optional

from rapidfuzz import fuzz

from resolution.vocabulary import Vocabulary, default_vocabulary

_NON_WORD = re.compile(r"[\W_]+", re.UNICODE)
_SPACES = re.compile(r"\s+")

# Tokens at or below this length are too generic to match on ("fc", "city", "st").
MIN_TOKEN_LEN = 4


def _strip_marks(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class TeamNameMatcher:
    """Normalizes and compares team or fighter names using an injected vocabulary."""

    def __init__(self, vocabulary: Optional[Vocabulary] = None) -> None:
        self._vocab = vocabulary or default_vocabulary()

    @property
    def vocabulary(self) -> Vocabulary:
        return self._vocab

    def normalize(self, name: str) -> str:
        """
        Strip diacritics, casefold, transliterate, turn punctuation into
        spaces, collapse whitespace, then apply the alias table. Idempotent.
        """
        if not name:
            return ""
        # Decompose before folding: NFKD can yield uppercase ("ℌ" -> "H") or
        # transliterable letters ("Ǿ" -> "Ø")
        text = _strip_marks(name).casefold().translate(self._vocab.translit_table)
        text = _strip_marks(text)
        text = _SPACES.sub(" ", _NON_WORD.sub(" ", text)).strip()
        for pattern, replacement in self._vocab.compiled_aliases:
            text = pattern.sub(replacement, text)
        return _SPACES.sub(" ", text).strip()

    def matches(self, provider_name: str, search_name: str) -> bool:
        """True if the two names plausibly refer to the same team."""
        api = self.normalize(provider_name)
        search = self.normalize(search_name)
        if not api or not search:
            return False
        if api in search or search in api:
            return True

        api_words = api.split(" ")
        search_words = search.split(" ")
        for a in api_words:
            if len(a) < MIN_TOKEN_LEN:
                continue
            for s in search_words:
                if len(s) >= MIN_TOKEN_LEN and (a == s or a in s or s in a):
                    return True

        # Nickname fallback ("Bulls" / "Chicago Bulls")
        api_last, search_last = api_words[-1], search_words[-1]
        return len(api_last) >= MIN_TOKEN_LEN and api_last == search_last

    def similarity(self, a: str, b: str) -> float:
        """Token-set ratio (0-100) over normalized names; used for ranking only."""
        na, nb = self.normalize(a), self.normalize(b)
        if not na or not nb:
            return 0.0
        return float(fuzz.token_set_ratio(na, nb))

    def keyword_in(self, keyword: str, name: str) -> bool:
        """Whole-word test of a vocabulary keyword against a name."""
        normalized = self.normalize(name)
        if not normalized or not keyword:
            return False
        return f" {keyword} " in f" {normalized} "


# ── Module-level helpers over the packaged vocabulary ──────────────────
_default: Optional[TeamNameMatcher] = None


def default_matcher() -> TeamNameMatcher:
    global _default
    if _default is None:
        _default = TeamNameMatcher()
    return _default


def normalize(name: str) -> str:
    return default_matcher().normalize(name)


def matches(provider_name: str, search_name: str) -> bool:
    return default_matcher().matches(provider_name, search_name)


def similarity(a: str, b: str) -> float:
    return default_matcher().similarity(a, b)
