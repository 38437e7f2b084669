"""Unit tests for sport/league classification."""
from __future__ import annotations

import pytest

from shared.models.enums import SportDomain

from fakes import make_forecast
from resolution.classifier import SportClassifier
from resolution.matching import TeamNameMatcher
from resolution.vocabulary import Vocabulary


@pytest.fixture
def classifier() -> SportClassifier:
    return SportClassifier()


def test_explicit_soccer_tag_beats_nfl_keyword(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="New York Jets vs Chelsea", sport_tag="soccer_epl")
    assert classifier.classify(f) == SportDomain.SOCCER


def test_soccer_tag_in_league_field(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Lyon vs Monaco", sport_tag="", league="ligue_1")
    assert classifier.classify(f) == SportDomain.SOCCER


def test_nfl_keywords_win_over_nhl(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="New York Jets vs Carolina Panthers", sport_tag="", league="")
    assert classifier.classify(f) == SportDomain.AMERICAN_FOOTBALL


def test_hockey_tag_beats_shared_nfl_keyword(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Winnipeg Jets vs Minnesota Wild", sport_tag="icehockey_nhl", league="")
    assert classifier.classify(f) == SportDomain.HOCKEY


def test_hockey_by_team_names(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Boston Bruins vs Toronto Maple Leafs", sport_tag="", league="")
    assert classifier.classify(f) == SportDomain.HOCKEY


def test_euroleague_before_nba(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Real Madrid vs Olympiacos", sport_tag="", league="")
    assert classifier.classify(f) == SportDomain.EUROLEAGUE


def test_euroleague_tag_beats_basketball_tag(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Fenerbahce vs Partizan", sport_tag="basketball_euroleague", league="")
    assert classifier.classify(f) == SportDomain.EUROLEAGUE


def test_nba_by_team_names(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Los Angeles Lakers vs Boston Celtics", sport_tag="", league="")
    assert classifier.classify(f) == SportDomain.BASKETBALL


def test_kings_alone_classifies_as_nba(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Sacramento Kings vs Portland", sport_tag="", league="")
    assert classifier.classify(f) == SportDomain.BASKETBALL


def test_kings_with_hockey_tag_stays_hockey(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Los Angeles Kings vs Anaheim Ducks", sport_tag="icehockey_nhl", league="")
    assert classifier.classify(f) == SportDomain.HOCKEY


def test_mma_by_tag(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Jon Jones vs Stipe Miocic", sport_tag="mixed_martial_arts", league="")
    assert classifier.classify(f) == SportDomain.MMA


def test_mma_by_weight_class_in_league(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Jon Jones vs Stipe Miocic", sport_tag="", league="Heavyweight Title Bout")
    assert classifier.classify(f) == SportDomain.MMA


def test_unknown_when_nothing_matches(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Arsenal vs Everton", sport_tag="", league="")
    assert classifier.classify(f) == SportDomain.UNKNOWN


def test_diacritics_in_team_names_still_classify(classifier: SportClassifier) -> None:
    f = make_forecast(match_label="Montréal Canadiens vs Ottawa Senators", sport_tag="", league="")
    assert classifier.classify(f) == SportDomain.HOCKEY


def test_injected_vocabulary() -> None:
    vocab = Vocabulary(team_keywords={SportDomain.HOCKEY: ["testers"]})
    classifier = SportClassifier(TeamNameMatcher(vocab))
    f = make_forecast(match_label="City Testers vs Town Rovers", sport_tag="", league="")
    assert classifier.classify(f) == SportDomain.HOCKEY
