"""
Sport/league classification for forecasts with missing or vague tags.
"""
from __future__ import annotations

from typing import Optional

from shared.models.domain import Forecast
from shared.models.enums import SportDomain
from shared.utils.logging import get_logger

from resolution.matching import TeamNameMatcher, default_matcher

logger = get_logger(__name__)

# Order matters: "jets"/"panthers" exist in both NFL and NHL, and Euroleague
# clubs share city names with NBA vocabulary.
DOMAIN_PRIORITY: tuple[SportDomain, ...] = (
    SportDomain.AMERICAN_FOOTBALL,
    SportDomain.EUROLEAGUE,
    SportDomain.BASKETBALL,
    SportDomain.HOCKEY,
    SportDomain.MMA,
)


class SportClassifier:
    """Explicit tags first, then team-name vocabulary, then UNKNOWN."""

    def __init__(self, matcher: Optional[TeamNameMatcher] = None) -> None:
        self._matcher = matcher or default_matcher()
        self._vocab = self._matcher.vocabulary

    def classify(self, forecast: Forecast) -> SportDomain:
        tag_text = f"{forecast.sport_tag or ''} {forecast.league or ''}".lower()

        if any(tag in tag_text for tag in self._vocab.soccer_tags):
            return SportDomain.SOCCER

        for domain in DOMAIN_PRIORITY:
            if any(tag in tag_text for tag in self._vocab.tags_for(domain)):
                return domain

        names = (forecast.recorded_home_team, forecast.recorded_away_team)
        for domain in DOMAIN_PRIORITY:
            keywords = self._vocab.keywords_for(domain)
            if any(self._matcher.keyword_in(kw, name) for kw in keywords for name in names):
                return domain
            # Competition names ("UFC 310") usually live in the tag, not the fighter names
            if domain is SportDomain.MMA and any(kw in tag_text for kw in keywords):
                return domain

        logger.info(
            "sport_unclassified",
            forecast_id=str(forecast.id),
            match_label=forecast.match_label,
            sport_tag=forecast.sport_tag,
        )
        return SportDomain.UNKNOWN
