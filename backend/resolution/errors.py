"""Exceptions raised by the resolution and settlement pipeline."""
from __future__ import annotations

from typing import Optional


class ResolutionError(Exception):
    """Base for all resolution/settlement failures."""


class ProviderError(ResolutionError):
    """A provider fetch failed (transport, HTTP status or malformed payload)."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class SettlementConflict(ResolutionError):
    """The forecast was no longer in a settleable state when the write ran."""

    def __init__(self, forecast_id: str, state: Optional[str] = None) -> None:
        super().__init__(f"forecast {forecast_id} is not settleable (state={state})")
        self.forecast_id = forecast_id
        self.state = state


class InvalidScore(ResolutionError):
    """Manually entered score rejected (negative or non-integer)."""
