"""
Domain -> provider source lookup, with shared start/close lifecycle.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from shared.models.enums import SportDomain
from shared.utils.logging import get_logger

from resolution.config import ResolverSettings, get_resolver_settings
from resolution.sources.api_sports import FAMILIES, ApiSportsSource
from resolution.sources.base import ProviderSource

logger = get_logger(__name__)


class SourceRegistry:
    """Holds one ProviderSource per resolvable SportDomain."""

    def __init__(self, sources: Mapping[SportDomain, ProviderSource]) -> None:
        self._sources = dict(sources)

    def get(self, domain: SportDomain) -> Optional[ProviderSource]:
        return self._sources.get(domain)

    def __contains__(self, domain: object) -> bool:
        return domain in self._sources

    async def start(self) -> None:
        for source in self._sources.values():
            await source.start()

    async def close(self) -> None:
        for source in self._sources.values():
            await source.close()

    async def __aenter__(self) -> "SourceRegistry":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def build_registry(settings: ResolverSettings | None = None) -> SourceRegistry:
    """Wire the API-Sports family for every resolvable domain."""
    settings = settings or get_resolver_settings()
    if not settings.api_sports_key:
        logger.warning("api_sports_key_missing")
    sources: dict[SportDomain, ProviderSource] = {
        domain: ApiSportsSource(
            family,
            api_key=settings.api_sports_key,
            timeout_s=settings.fetch_timeout_s,
            max_retries=settings.retry_max_attempts,
            retry_base_delay_s=settings.retry_base_delay_s,
        )
        for domain, family in FAMILIES.items()
    }
    return SourceRegistry(sources)
