"""
Pydantic v2 domain models shared across the settlement services.
These are the canonical wire/internal representations, NOT ORM models.
"""
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.models.enums import ForecastState, Outcome, Side

MATCH_LABEL_SEPARATOR = " vs "


# ── Base ────────────────────────────────────────────────────────────────
class DomainModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# ── Forecast ────────────────────────────────────────────────────────────
class Forecast(DomainModel):
    """A recorded prediction about one fixture, awaiting or past settlement."""
    id: uuid.UUID
    match_label: str
    sport_tag: str = ""
    league: str = ""
    kickoff: datetime
    forecast_text: str = ""
    selection: Optional[str] = None
    value_bet_side: Optional[Side] = None
    value_bet_odds: Optional[float] = Field(default=None, ge=1.0)
    state: ForecastState = ForecastState.PENDING
    actual_result: Optional[str] = None
    actual_score: Optional[str] = None
    value_bet_outcome: Optional[Outcome] = None
    value_bet_profit: Optional[float] = None
    resolved_at: Optional[datetime] = None
    attempt_count: int = 0
    last_attempt_at: Optional[datetime] = None

    @property
    def recorded_home_team(self) -> str:
        return _split_label(self.match_label)[0]

    @property
    def recorded_away_team(self) -> str:
        return _split_label(self.match_label)[1]


def _split_label(label: str) -> tuple[str, str]:
    home, sep, away = (label or "").partition(MATCH_LABEL_SEPARATOR)
    if not sep:
        return home.strip(), ""
    return home.strip(), away.strip()


# ── Provider data ───────────────────────────────────────────────────────
class RawProviderEvent(DomainModel):
    """One fixture as returned by a provider for a given date. Never persisted."""
    provider_home_name: str
    provider_away_name: str
    status_code: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    event_date: Optional[date] = None
    provider_event_id: Optional[str] = None
    # MMA bouts carry a winner instead of a score
    home_id: Optional[str] = None
    away_id: Optional[str] = None
    winner_id: Optional[str] = None
    method: Optional[str] = None


class ResolvedMatch(DomainModel):
    """Final result in the provider's own home/away orientation."""
    actual_home_team: str
    actual_away_team: str
    home_score: int
    away_score: int
    orientation_swapped: bool = False

    @property
    def winner(self) -> Side:
        if self.home_score > self.away_score:
            return Side.HOME
        if self.away_score > self.home_score:
            return Side.AWAY
        return Side.DRAW


# ── Settlement ──────────────────────────────────────────────────────────
class SettlementResult(DomainModel):
    outcome: Outcome
    actual_result: str
    actual_score: str
    actual_winner: Side
    value_bet_outcome: Optional[Outcome] = None
    value_bet_profit: Optional[float] = None


class ManualResult(DomainModel):
    """Administrative score entry for one forecast, in its recorded orientation."""
    home_score: int
    away_score: int
