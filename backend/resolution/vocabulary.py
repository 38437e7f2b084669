"""
Static, versioned lookup tables used by team matching and sport classification.
Loaded from resolution/data/vocabulary.json; pass a custom Vocabulary to override.
"""
from __future__ import annotations

import json
import re
from functools import cached_property, lru_cache
from importlib import resources

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.models.enums import SportDomain
from shared.utils.logging import get_logger

logger = get_logger(__name__)

VOCABULARY_RESOURCE = "vocabulary.json"


class AliasRule(BaseModel):
    """Regex applied to a normalized name, replaced at word boundaries."""
    model_config = ConfigDict(frozen=True)

    pattern: str
    replacement: str

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"invalid alias pattern {v!r}: {exc}") from exc
        return v


class Vocabulary(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: int = 1
    aliases: list[AliasRule] = Field(default_factory=list)
    soccer_tags: list[str] = Field(default_factory=list)
    domain_tags: dict[SportDomain, list[str]] = Field(default_factory=dict)
    team_keywords: dict[SportDomain, list[str]] = Field(default_factory=dict)
    transliterations: dict[str, str] = Field(default_factory=dict)

    @cached_property
    def compiled_aliases(self) -> list[tuple[re.Pattern[str], str]]:
        return [
            (re.compile(rf"\b(?:{rule.pattern})\b"), rule.replacement)
            for rule in self.aliases
        ]

    @cached_property
    def translit_table(self) -> dict[int, str]:
        return str.maketrans(self.transliterations)

    def tags_for(self, domain: SportDomain) -> list[str]:
        return self.domain_tags.get(domain, [])

    def keywords_for(self, domain: SportDomain) -> list[str]:
        return self.team_keywords.get(domain, [])


def load_vocabulary(raw: str | None = None) -> Vocabulary:
    """Parse a vocabulary document; defaults to the packaged JSON."""
    if raw is None:
        raw = resources.files("resolution").joinpath("data").joinpath(VOCABULARY_RESOURCE).read_text(encoding="utf-8")
    vocab = Vocabulary.model_validate(json.loads(raw))
    logger.debug(
        "vocabulary_loaded",
        version=vocab.version,
        aliases=len(vocab.aliases),
        domains=len(vocab.team_keywords),
    )
    return vocab


@lru_cache
def default_vocabulary() -> Vocabulary:
    return load_vocabulary()
