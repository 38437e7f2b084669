"""
Provider-fetch contract.
Every sport family is consumed through fetch(date, league) -> list[RawProviderEvent].
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from shared.models.domain import RawProviderEvent


class ProviderSource(ABC):
    """Base for per-domain provider adapters."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    async def start(self) -> None:
        """Open any underlying connections. No-op by default."""

    async def close(self) -> None:
        """Release underlying connections. No-op by default."""

    @abstractmethod
    async def fetch(self, day: date, league: Optional[str] = None) -> list[RawProviderEvent]:
        """
        Return every event the provider lists for `day`, in provider order,
        regardless of status. Raise ProviderError on transport or payload failure;
        an empty list means the provider has nothing for that date.
        """
        pass
