"""Unit tests for SettlementEngine."""
from __future__ import annotations

import pytest

from shared.models.domain import ResolvedMatch
from shared.models.enums import ForecastState, Outcome, Side

from fakes import make_forecast
from resolution.errors import InvalidScore, SettlementConflict
from resolution.settlement import SettlementEngine, value_bet_profit


@pytest.fixture
def engine() -> SettlementEngine:
    return SettlementEngine()


def _resolved(home: int, away: int, swapped: bool = False) -> ResolvedMatch:
    if swapped:
        return ResolvedMatch(actual_home_team="Liverpool", actual_away_team="Chelsea",
                             home_score=home, away_score=away, orientation_swapped=True)
    return ResolvedMatch(actual_home_team="Chelsea", actual_away_team="Liverpool",
                         home_score=home, away_score=away)


# ── 1X2 phrases ─────────────────────────────────────────────────────────

def test_home_win_hit(engine: SettlementEngine) -> None:
    result = engine.settle(make_forecast(forecast_text="Home Win"), _resolved(3, 1))
    assert result.outcome == Outcome.HIT
    assert result.actual_result == "Home Win"
    assert result.actual_score == "3-1"
    assert result.actual_winner == Side.HOME


def test_draw_miss(engine: SettlementEngine) -> None:
    result = engine.settle(make_forecast(forecast_text="Draw"), _resolved(2, 1))
    assert result.outcome == Outcome.MISS
    assert result.actual_result == "Home Win"


def test_away_victory_phrase(engine: SettlementEngine) -> None:
    result = engine.settle(make_forecast(forecast_text="Away victory expected"), _resolved(0, 1))
    assert result.outcome == Outcome.HIT


def test_bare_selection_keyword(engine: SettlementEngine) -> None:
    f = make_forecast(forecast_text="Value pick", selection="away")
    assert engine.settle(f, _resolved(1, 2)).outcome == Outcome.HIT
    assert engine.settle(f, _resolved(2, 1)).outcome == Outcome.MISS


# ── Value bet ───────────────────────────────────────────────────────────

def test_value_bet_win(engine: SettlementEngine) -> None:
    f = make_forecast(forecast_text="Draw", value_bet_side=Side.AWAY, value_bet_odds=2.50)
    result = engine.settle(f, _resolved(1, 2))
    assert result.value_bet_outcome == Outcome.HIT
    assert result.value_bet_profit == pytest.approx(1.50)


def test_value_bet_loss(engine: SettlementEngine) -> None:
    f = make_forecast(forecast_text="Draw", value_bet_side=Side.AWAY, value_bet_odds=2.50)
    result = engine.settle(f, _resolved(2, 1))
    assert result.value_bet_outcome == Outcome.MISS
    assert result.value_bet_profit == -1.0


def test_value_bet_absent_without_odds(engine: SettlementEngine) -> None:
    f = make_forecast(value_bet_side=Side.HOME, value_bet_odds=None)
    result = engine.settle(f, _resolved(1, 0))
    assert result.value_bet_outcome is None
    assert result.value_bet_profit is None


def test_value_bet_profit_rounds_to_cents() -> None:
    assert value_bet_profit(2.333, True) == 1.33
    assert value_bet_profit(2.333, False) == -1.0


# ── Orientation ─────────────────────────────────────────────────────────

def test_swapped_orientation_aligns_to_recorded_teams(engine: SettlementEngine) -> None:
    # Recorded "Chelsea vs Liverpool"; provider lists Liverpool at home and Chelsea won 2-0
    f = make_forecast(forecast_text="Home Win", value_bet_side=Side.HOME, value_bet_odds=1.80)
    result = engine.settle(f, _resolved(0, 2, swapped=True))

    assert result.outcome == Outcome.HIT
    assert result.actual_winner == Side.HOME
    assert result.actual_result == "Home Win"
    assert result.actual_score == "2-0"
    assert result.value_bet_outcome == Outcome.HIT
    assert result.value_bet_profit == pytest.approx(0.80)


def test_swapped_orientation_away_forecast_misses(engine: SettlementEngine) -> None:
    f = make_forecast(forecast_text="Away Win")
    result = engine.settle(f, _resolved(0, 2, swapped=True))
    assert result.outcome == Outcome.MISS


# ── Totals / BTTS ───────────────────────────────────────────────────────

def test_over_total_hit(engine: SettlementEngine) -> None:
    assert engine.settle(make_forecast(forecast_text="Over 2.5 goals"), _resolved(2, 1)).outcome == Outcome.HIT


def test_under_total_miss(engine: SettlementEngine) -> None:
    assert engine.settle(make_forecast(forecast_text="Under 2.5"), _resolved(2, 1)).outcome == Outcome.MISS


def test_over_total_without_space(engine: SettlementEngine) -> None:
    assert engine.settle(make_forecast(forecast_text="over1.5"), _resolved(1, 0)).outcome == Outcome.MISS


def test_btts(engine: SettlementEngine) -> None:
    f = make_forecast(forecast_text="BTTS - Yes")
    assert engine.settle(f, _resolved(1, 1)).outcome == Outcome.HIT
    assert engine.settle(f, _resolved(2, 0)).outcome == Outcome.MISS


# ── Team-name fallback ──────────────────────────────────────────────────

def test_selection_names_recorded_away_team(engine: SettlementEngine) -> None:
    f = make_forecast(forecast_text="Value pick", selection="Liverpool")
    assert engine.settle(f, _resolved(0, 1)).outcome == Outcome.HIT


def test_selection_with_accents_matches_recorded_team(engine: SettlementEngine) -> None:
    f = make_forecast(match_label="Montreal Canadiens vs Boston Bruins", forecast_text="Pick", selection="Montréal Canadiens")
    resolved = ResolvedMatch(actual_home_team="Montreal Canadiens", actual_away_team="Boston Bruins",
                             home_score=4, away_score=2)
    assert engine.settle(f, resolved).outcome == Outcome.HIT


def test_team_keyword_in_forecast_text(engine: SettlementEngine) -> None:
    f = make_forecast(match_label="Arsenal vs Chelsea", forecast_text="Arsenal to edge it")
    resolved = ResolvedMatch(actual_home_team="Arsenal", actual_away_team="Chelsea", home_score=2, away_score=0)
    assert engine.settle(f, resolved).outcome == Outcome.HIT


def test_unevaluable_text_is_miss(engine: SettlementEngine) -> None:
    f = make_forecast(forecast_text="Tight game expected")
    result = engine.settle(f, _resolved(1, 0))
    assert result.outcome == Outcome.MISS
    assert result.actual_result == "Home Win"


# ── Manual override ─────────────────────────────────────────────────────

def test_manual_settlement_uses_recorded_orientation(engine: SettlementEngine) -> None:
    f = make_forecast(forecast_text="Away Win", value_bet_side=Side.AWAY, value_bet_odds=3.0)
    result = engine.settle_manual(f, 0, 1)
    assert result.outcome == Outcome.HIT
    assert result.actual_score == "0-1"
    assert result.value_bet_profit == pytest.approx(2.0)


def test_manual_rejects_negative_scores(engine: SettlementEngine) -> None:
    with pytest.raises(InvalidScore):
        engine.settle_manual(make_forecast(), -1, 0)


def test_manual_rejects_already_settled(engine: SettlementEngine) -> None:
    with pytest.raises(SettlementConflict):
        engine.settle_manual(make_forecast(state=ForecastState.HIT), 1, 0)


def test_manual_accepts_needs_review(engine: SettlementEngine) -> None:
    f = make_forecast(state=ForecastState.NEEDS_MANUAL_REVIEW)
    assert engine.settle_manual(f, 1, 0).outcome == Outcome.HIT
