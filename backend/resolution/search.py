"""
Date-window event search.

Recorded kickoffs drift from the provider's event date (timezones, manual
entry), so a miss on the kickoff date is retried on nearby dates, one fresh
provider query per offset, stopping at the first date that yields a match.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Sequence

from shared.models.domain import RawProviderEvent
from shared.models.enums import SportDomain
from shared.utils.logging import get_logger
from shared.utils.metrics import AMBIGUOUS_MATCHES

from resolution.matching import TeamNameMatcher, default_matcher
from resolution.sources.registry import SourceRegistry
from resolution.status import is_terminal

logger = get_logger(__name__)

DEFAULT_OFFSETS: tuple[int, ...] = (1, 2, 3, -1)


class DateWindowSearch:
    """Finds the finished provider event for a fixture around its recorded date."""

    def __init__(
        self,
        registry: SourceRegistry,
        matcher: Optional[TeamNameMatcher] = None,
        offsets: Sequence[int] = DEFAULT_OFFSETS,
        min_score: float = 0.0,
    ) -> None:
        self._registry = registry
        self._matcher = matcher or default_matcher()
        self._offsets = tuple(offsets)
        self._min_score = min_score

    @property
    def offsets(self) -> tuple[int, ...]:
        """Day offsets in query order, starting with the kickoff date itself."""
        return (0, *(o for o in self._offsets if o != 0))

    async def find_event(
        self,
        domain: SportDomain,
        home: str,
        away: str,
        kickoff_date: date,
    ) -> Optional[RawProviderEvent]:
        """
        Return the best finished event for (home, away) or None if no date in
        the window has one. Provider errors propagate.
        """
        source = self._registry.get(domain)
        if source is None:
            logger.warning("no_source_for_domain", domain=domain.value)
            return None

        for offset in self.offsets:
            day = kickoff_date + timedelta(days=offset)
            events = await source.fetch(day)
            event = self.select(domain, home, away, events)
            if event is not None:
                logger.info(
                    "event_matched",
                    domain=domain.value,
                    home=home,
                    away=away,
                    offset=offset,
                    provider_home=event.provider_home_name,
                    provider_away=event.provider_away_name,
                )
                return event
            logger.debug("no_event_on_date", domain=domain.value, date=day.isoformat(), candidates=len(events))
        return None

    def pair_score(self, home: str, away: str, event: RawProviderEvent) -> Optional[float]:
        """
        Best score over the two orientations that pass `matches` on both sides;
        each orientation scores as its weaker side. None if neither orientation matches.
        """
        m = self._matcher
        best: Optional[float] = None
        for ev_home, ev_away in (
            (event.provider_home_name, event.provider_away_name),
            (event.provider_away_name, event.provider_home_name),
        ):
            if m.matches(ev_home, home) and m.matches(ev_away, away):
                score = min(m.similarity(ev_home, home), m.similarity(ev_away, away))
                if best is None or score > best:
                    best = score
        return best

    def select(
        self,
        domain: SportDomain,
        home: str,
        away: str,
        events: Sequence[RawProviderEvent],
    ) -> Optional[RawProviderEvent]:
        best_event: Optional[RawProviderEvent] = None
        best_score = -1.0
        tied: list[RawProviderEvent] = []

        for event in events:
            if not is_terminal(domain, event.status_code):
                continue
            score = self.pair_score(home, away, event)
            if score is None or score < self._min_score:
                continue
            if score > best_score:
                best_event, best_score, tied = event, score, [event]
            elif score == best_score:
                tied.append(event)

        if len(tied) > 1:
            AMBIGUOUS_MATCHES.labels(domain=domain.value).inc()
            logger.warning(
                "ambiguous_event_match",
                domain=domain.value,
                home=home,
                away=away,
                score=best_score,
                candidates=[f"{e.provider_home_name} vs {e.provider_away_name}" for e in tied],
            )
        return best_event
