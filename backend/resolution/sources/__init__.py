from resolution.sources.api_sports import ApiSportsSource
from resolution.sources.base import ProviderSource
from resolution.sources.registry import SourceRegistry, build_registry

__all__ = [
    "ApiSportsSource",
    "ProviderSource",
    "SourceRegistry",
    "build_registry",
]
