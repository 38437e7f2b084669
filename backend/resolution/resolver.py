"""
Turns a matched provider event into a ResolvedMatch in provider orientation.
"""
from __future__ import annotations

from typing import Optional

from shared.models.domain import RawProviderEvent, ResolvedMatch
from shared.models.enums import SportDomain
from shared.utils.logging import get_logger

from resolution.matching import TeamNameMatcher, default_matcher
from resolution.status import is_terminal

logger = get_logger(__name__)


class OutcomeResolver:
    def __init__(self, matcher: Optional[TeamNameMatcher] = None) -> None:
        self._matcher = matcher or default_matcher()

    def resolve(
        self,
        domain: SportDomain,
        home: str,
        away: str,
        event: RawProviderEvent,
    ) -> Optional[ResolvedMatch]:
        """
        Final score for (home, away) as recorded on the forecast.

        Teams and scores are reported exactly as the provider lists them;
        orientation_swapped says whether the provider's home side is the
        forecast's recorded away side. Returns None for unfinished events,
        events that match neither pairing, or non-MMA events without scores.
        """
        if not is_terminal(domain, event.status_code):
            return None

        m = self._matcher
        if m.matches(event.provider_home_name, home) and m.matches(event.provider_away_name, away):
            swapped = False
        elif m.matches(event.provider_home_name, away) and m.matches(event.provider_away_name, home):
            swapped = True
        else:
            return None

        if domain is SportDomain.MMA:
            home_score, away_score = self._mma_scores(event)
        else:
            if event.home_score is None or event.away_score is None:
                logger.warning(
                    "terminal_event_without_score",
                    domain=domain.value,
                    provider_event_id=event.provider_event_id,
                    status=event.status_code,
                )
                return None
            home_score, away_score = event.home_score, event.away_score

        return ResolvedMatch(
            actual_home_team=event.provider_home_name,
            actual_away_team=event.provider_away_name,
            home_score=home_score,
            away_score=away_score,
            orientation_swapped=swapped,
        )

    @staticmethod
    def _mma_scores(event: RawProviderEvent) -> tuple[int, int]:
        """Winner 1, loser 0; no winner or a draw method is 0-0."""
        if not event.winner_id or "draw" in (event.method or "").lower():
            return 0, 0
        if event.winner_id == event.home_id:
            return 1, 0
        if event.winner_id == event.away_id:
            return 0, 1
        return 0, 0
