"""
Settlement of a forecast against a resolved final score.

All comparisons happen in the forecast's recorded orientation: when the
provider lists the fixture the other way round, the winner is flipped
before anything is compared, so "home" always means the recorded home team.
"""
from __future__ import annotations

import re
from typing import Optional

from shared.models.domain import Forecast, ResolvedMatch, SettlementResult
from shared.models.enums import Outcome, Side
from shared.utils.logging import get_logger

from resolution.errors import InvalidScore, SettlementConflict
from resolution.matching import TeamNameMatcher, default_matcher

logger = get_logger(__name__)

_TOTALS = re.compile(r"\b(over|under)\s*(\d+(?:\.\d+)?)")
_BTTS = ("btts", "both teams to score")


def value_bet_profit(odds: float, won: bool) -> float:
    """Unit-stake profit: odds - 1 on a win, -1 on a loss."""
    return round(odds - 1.0, 2) if won else -1.0


def validate_manual_scores(home_score: object, away_score: object) -> None:
    for value in (home_score, away_score):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidScore(f"score must be an integer, got {value!r}")
        if value < 0:
            raise InvalidScore("scores cannot be negative")


class SettlementEngine:
    def __init__(self, matcher: Optional[TeamNameMatcher] = None) -> None:
        self._matcher = matcher or default_matcher()

    def settle(self, forecast: Forecast, resolved: ResolvedMatch) -> SettlementResult:
        """Pure evaluation; the caller persists the result."""
        if resolved.orientation_swapped:
            home_score, away_score = resolved.away_score, resolved.home_score
        else:
            home_score, away_score = resolved.home_score, resolved.away_score
        winner = resolved.winner.flipped if resolved.orientation_swapped else resolved.winner

        accurate = self._evaluate(forecast, winner, home_score, away_score)

        vb_outcome: Optional[Outcome] = None
        vb_profit: Optional[float] = None
        if forecast.value_bet_side is not None and forecast.value_bet_odds is not None:
            won = forecast.value_bet_side == winner
            vb_outcome = Outcome.HIT if won else Outcome.MISS
            vb_profit = value_bet_profit(forecast.value_bet_odds, won)

        return SettlementResult(
            outcome=Outcome.HIT if accurate else Outcome.MISS,
            actual_result=winner.result_label,
            actual_score=f"{home_score}-{away_score}",
            actual_winner=winner,
            value_bet_outcome=vb_outcome,
            value_bet_profit=vb_profit,
        )

    def settle_manual(self, forecast: Forecast, home_score: int, away_score: int) -> SettlementResult:
        """
        Settle from an admin-entered score given in the forecast's recorded
        orientation. Forecasts in NEEDS_MANUAL_REVIEW are accepted.

        Raises:
            InvalidScore: negative or non-integer scores.
            SettlementConflict: the forecast is already HIT/MISS.
        """
        validate_manual_scores(home_score, away_score)
        if forecast.state.is_settled:
            raise SettlementConflict(str(forecast.id), forecast.state.value)

        resolved = ResolvedMatch(
            actual_home_team=forecast.recorded_home_team,
            actual_away_team=forecast.recorded_away_team,
            home_score=home_score,
            away_score=away_score,
        )
        return self.settle(forecast, resolved)

    # ── Evaluation ──────────────────────────────────────────────────────

    def _evaluate(self, forecast: Forecast, winner: Side, home_score: int, away_score: int) -> bool:
        text = (forecast.forecast_text or "").lower().strip()
        selection = (forecast.selection or "").lower().strip()

        side = _phrase_side(text, selection)
        if side is not None:
            return side == winner

        totals = _TOTALS.search(text)
        if totals:
            line = float(totals.group(2))
            total = home_score + away_score
            return total > line if totals.group(1) == "over" else total < line
        if any(marker in text for marker in _BTTS):
            return home_score > 0 and away_score > 0

        side = self._team_side(forecast, text, selection)
        if side is not None:
            return side == winner

        logger.info(
            "forecast_not_evaluable",
            forecast_id=str(forecast.id),
            forecast_text=forecast.forecast_text,
            selection=forecast.selection,
        )
        return False

    def _team_side(self, forecast: Forecast, text: str, selection: str) -> Optional[Side]:
        home = forecast.recorded_home_team
        away = forecast.recorded_away_team

        if selection:
            on_home = bool(home) and self._matcher.matches(selection, home)
            on_away = bool(away) and self._matcher.matches(selection, away)
            if on_home and not on_away:
                return Side.HOME
            if on_away and not on_home:
                return Side.AWAY

        home_kw = _last_token(home)
        if len(home_kw) > 2 and home_kw in text:
            return Side.HOME
        away_kw = _last_token(away)
        if len(away_kw) > 2 and away_kw in text:
            return Side.AWAY
        return None


def _phrase_side(text: str, selection: str) -> Optional[Side]:
    if "home win" in text or "home victory" in text or text == "home" or selection == "home":
        return Side.HOME
    if "away win" in text or "away victory" in text or text == "away" or selection == "away":
        return Side.AWAY
    if "draw" in text or selection == "draw":
        return Side.DRAW
    return None


def _last_token(name: str) -> str:
    parts = (name or "").lower().split()
    return parts[-1] if parts else ""
