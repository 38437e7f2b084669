"""Domain enumerations for forecast resolution and settlement."""
from __future__ import annotations

from enum import Enum


class SportDomain(str, Enum):
    SOCCER = "soccer"
    BASKETBALL = "basketball"
    HOCKEY = "hockey"
    AMERICAN_FOOTBALL = "american_football"
    EUROLEAGUE = "euroleague"
    MMA = "mma"
    UNKNOWN = "unknown"

    @property
    def is_resolvable(self) -> bool:
        return self != SportDomain.UNKNOWN


class ForecastState(str, Enum):
    PENDING = "PENDING"
    HIT = "HIT"
    MISS = "MISS"
    NEEDS_MANUAL_REVIEW = "NEEDS_MANUAL_REVIEW"

    @property
    def is_settled(self) -> bool:
        return self in (ForecastState.HIT, ForecastState.MISS)


class Outcome(str, Enum):
    HIT = "HIT"
    MISS = "MISS"


class Side(str, Enum):
    """Winner of a fixture, or the side a bet was placed on."""
    HOME = "HOME"
    AWAY = "AWAY"
    DRAW = "DRAW"

    @property
    def flipped(self) -> "Side":
        if self == Side.HOME:
            return Side.AWAY
        if self == Side.AWAY:
            return Side.HOME
        return Side.DRAW

    @property
    def result_label(self) -> str:
        return {
            Side.HOME: "Home Win",
            Side.AWAY: "Away Win",
            Side.DRAW: "Draw",
        }[self]


class ProviderName(str, Enum):
    API_FOOTBALL = "api_football"
    API_BASKETBALL = "api_basketball"
    API_HOCKEY = "api_hockey"
    API_AMERICAN_FOOTBALL = "api_american_football"
    API_MMA = "api_mma"
