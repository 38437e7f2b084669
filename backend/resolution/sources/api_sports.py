"""
API-Sports adapters (football v3, basketball/hockey/american-football/mma v1).

Each family has its own host, payload shape and season convention; all are
normalized to RawProviderEvent in provider orientation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from shared.models.domain import RawProviderEvent
from shared.models.enums import ProviderName, SportDomain
from shared.utils.http_client import ProviderHTTPClient
from shared.utils.logging import get_logger

from resolution.errors import ProviderError
from resolution.sources.base import ProviderSource

logger = get_logger(__name__)

API_KEY_HEADER = "x-apisports-key"


# ── Seasons ─────────────────────────────────────────────────────────────

def football_season(day: date) -> str:
    """European football seasons start in August."""
    return str(day.year if day.month >= 8 else day.year - 1)


def nba_season(day: date) -> str:
    start = day.year if day.month >= 10 else day.year - 1
    return f"{start}-{start + 1}"


def start_year_season(start_month: int) -> Callable[[date], str]:
    """
    Season named by its starting year. NHL and Euroleague start in October;
    the NFL season runs through February, so March onward is the new year.
    """
    def _season(day: date) -> str:
        return str(day.year if day.month >= start_month else day.year - 1)
    return _season


nhl_season = start_year_season(10)
euroleague_season = start_year_season(10)
nfl_season = start_year_season(3)


# ── Payload helpers ─────────────────────────────────────────────────────

def _dig(obj: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _as_date(value: Any) -> Optional[date]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None


def _as_id(value: Any) -> Optional[str]:
    return None if value is None else str(value)


# ── Parsers (one per payload shape) ─────────────────────────────────────

def parse_football(item: dict[str, Any]) -> RawProviderEvent:
    return RawProviderEvent(
        provider_home_name=_dig(item, "teams", "home", "name") or "",
        provider_away_name=_dig(item, "teams", "away", "name") or "",
        status_code=_dig(item, "fixture", "status", "short") or "",
        home_score=_as_int(_dig(item, "goals", "home")),
        away_score=_as_int(_dig(item, "goals", "away")),
        event_date=_as_date(_dig(item, "fixture", "date")),
        provider_event_id=_as_id(_dig(item, "fixture", "id")),
        home_id=_as_id(_dig(item, "teams", "home", "id")),
        away_id=_as_id(_dig(item, "teams", "away", "id")),
    )


def parse_basketball(item: dict[str, Any]) -> RawProviderEvent:
    return RawProviderEvent(
        provider_home_name=_dig(item, "teams", "home", "name") or "",
        provider_away_name=_dig(item, "teams", "away", "name") or "",
        status_code=_dig(item, "status", "short") or "",
        home_score=_as_int(_dig(item, "scores", "home", "total")),
        away_score=_as_int(_dig(item, "scores", "away", "total")),
        event_date=_as_date(item.get("date")),
        provider_event_id=_as_id(item.get("id")),
        home_id=_as_id(_dig(item, "teams", "home", "id")),
        away_id=_as_id(_dig(item, "teams", "away", "id")),
    )


def parse_hockey(item: dict[str, Any]) -> RawProviderEvent:
    # Hockey scores are plain numbers, not {total: n}
    return RawProviderEvent(
        provider_home_name=_dig(item, "teams", "home", "name") or "",
        provider_away_name=_dig(item, "teams", "away", "name") or "",
        status_code=_dig(item, "status", "short") or "",
        home_score=_as_int(_dig(item, "scores", "home")),
        away_score=_as_int(_dig(item, "scores", "away")),
        event_date=_as_date(item.get("date")),
        provider_event_id=_as_id(item.get("id")),
        home_id=_as_id(_dig(item, "teams", "home", "id")),
        away_id=_as_id(_dig(item, "teams", "away", "id")),
    )


def parse_american_football(item: dict[str, Any]) -> RawProviderEvent:
    return RawProviderEvent(
        provider_home_name=_dig(item, "teams", "home", "name") or "",
        provider_away_name=_dig(item, "teams", "away", "name") or "",
        status_code=_dig(item, "game", "status", "short") or "",
        home_score=_as_int(_dig(item, "scores", "home", "total")),
        away_score=_as_int(_dig(item, "scores", "away", "total")),
        event_date=_as_date(_dig(item, "game", "date", "date")),
        provider_event_id=_as_id(_dig(item, "game", "id")),
        home_id=_as_id(_dig(item, "teams", "home", "id")),
        away_id=_as_id(_dig(item, "teams", "away", "id")),
    )


def parse_mma(item: dict[str, Any]) -> RawProviderEvent:
    # First fighter is treated as "home"; scores are derived later from winner_id
    return RawProviderEvent(
        provider_home_name=_dig(item, "fighters", "first", "name") or "",
        provider_away_name=_dig(item, "fighters", "second", "name") or "",
        status_code=_dig(item, "status", "short") or "",
        event_date=_as_date(item.get("date")),
        provider_event_id=_as_id(item.get("id")),
        home_id=_as_id(_dig(item, "fighters", "first", "id")),
        away_id=_as_id(_dig(item, "fighters", "second", "id")),
        winner_id=_as_id(_dig(item, "winner", "id")),
        method=_dig(item, "result", "method") or _dig(item, "winner", "method"),
    )


# ── Families ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ApiSportsFamily:
    provider: ProviderName
    base_url: str
    path: str
    parse: Callable[[dict[str, Any]], RawProviderEvent]
    league_id: Optional[str] = None
    season: Optional[Callable[[date], str]] = None
    extra_params: dict[str, str] = field(default_factory=dict)


FAMILIES: dict[SportDomain, ApiSportsFamily] = {
    SportDomain.SOCCER: ApiSportsFamily(
        provider=ProviderName.API_FOOTBALL,
        base_url="https://v3.football.api-sports.io",
        path="/fixtures",
        parse=parse_football,
        season=football_season,
        extra_params={"status": "FT"},
    ),
    SportDomain.BASKETBALL: ApiSportsFamily(
        provider=ProviderName.API_BASKETBALL,
        base_url="https://v1.basketball.api-sports.io",
        path="/games",
        parse=parse_basketball,
        league_id="12",
        season=nba_season,
    ),
    SportDomain.EUROLEAGUE: ApiSportsFamily(
        provider=ProviderName.API_BASKETBALL,
        base_url="https://v1.basketball.api-sports.io",
        path="/games",
        parse=parse_basketball,
        league_id="120",
        season=euroleague_season,
    ),
    SportDomain.HOCKEY: ApiSportsFamily(
        provider=ProviderName.API_HOCKEY,
        base_url="https://v1.hockey.api-sports.io",
        path="/games",
        parse=parse_hockey,
        league_id="57",
        season=nhl_season,
    ),
    SportDomain.AMERICAN_FOOTBALL: ApiSportsFamily(
        provider=ProviderName.API_AMERICAN_FOOTBALL,
        base_url="https://v1.american-football.api-sports.io",
        path="/games",
        parse=parse_american_football,
        league_id="1",
        season=nfl_season,
    ),
    SportDomain.MMA: ApiSportsFamily(
        provider=ProviderName.API_MMA,
        base_url="https://v1.mma.api-sports.io",
        path="/fights",
        parse=parse_mma,
    ),
}


class ApiSportsSource(ProviderSource):
    """One API-Sports family bound to one domain's league and season rules."""

    def __init__(
        self,
        family: ApiSportsFamily,
        api_key: str,
        timeout_s: float = 10.0,
        max_retries: int = 2,
        retry_base_delay_s: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._family = family
        self._client = ProviderHTTPClient(
            provider_name=family.provider.value,
            base_url=family.base_url,
            headers={API_KEY_HEADER: api_key},
            timeout_s=timeout_s,
            max_retries=max_retries,
            retry_base_delay_s=retry_base_delay_s,
            transport=transport,
        )

    @property
    def provider_name(self) -> str:
        return self._family.provider.value

    async def start(self) -> None:
        await self._client.start()

    async def close(self) -> None:
        await self._client.close()

    def build_params(self, day: date, league: Optional[str] = None) -> dict[str, str]:
        family = self._family
        params: dict[str, str] = {"date": day.isoformat()}
        league_id = league or family.league_id
        if league_id:
            params["league"] = league_id
            if family.season:
                params["season"] = family.season(day)
        params.update(family.extra_params)
        return params

    async def fetch(self, day: date, league: Optional[str] = None) -> list[RawProviderEvent]:
        params = self.build_params(day, league)
        try:
            payload = await self._client.get_json(self._family.path, params=params)
        except httpx.HTTPStatusError as exc:
            raise ProviderError(self.provider_name, str(exc), exc.response.status_code) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError(self.provider_name, f"{type(exc).__name__}: {exc}") from exc

        items = self._unwrap(payload)
        events: list[RawProviderEvent] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                event = self._family.parse(item)
            except (ValidationError, TypeError, ValueError) as exc:
                raise ProviderError(self.provider_name, f"malformed event payload: {exc}") from exc
            if not event.provider_home_name or not event.provider_away_name:
                logger.debug("provider_event_skipped", provider=self.provider_name, reason="missing_names")
                continue
            events.append(event)

        logger.debug(
            "provider_events_fetched",
            provider=self.provider_name,
            date=params["date"],
            league=params.get("league"),
            count=len(events),
        )
        return events

    def _unwrap(self, payload: Any) -> list[Any]:
        if not isinstance(payload, dict):
            raise ProviderError(self.provider_name, "payload is not a JSON object")
        # API-Sports reports auth/quota problems with HTTP 200 and a non-empty "errors"
        errors = payload.get("errors")
        if errors:
            raise ProviderError(self.provider_name, f"provider errors: {errors}")
        items = payload.get("response")
        if items is None:
            return []
        if not isinstance(items, list):
            raise ProviderError(self.provider_name, "'response' is not a list")
        return items
