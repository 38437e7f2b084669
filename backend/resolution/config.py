"""
Resolver service configuration.
Uses MS_RESOLVER_ prefix; Redis/DB settings come from shared.config.get_settings().
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResolverSettings(BaseSettings):
    """Resolver-specific settings; use get_settings() for Redis/DB."""

    model_config = SettingsConfigDict(
        env_prefix="MS_RESOLVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider access
    api_sports_key: str = Field(default="", description="API-Sports key, sent as x-apisports-key")
    fetch_timeout_s: float = Field(default=10.0, description="HTTP timeout per provider request")
    retry_max_attempts: int = Field(default=2, description="Attempts per request on 429/5xx/timeout")
    retry_base_delay_s: float = Field(default=1.0, description="Base delay between retries")

    # Pass shape
    batch_size: int = Field(default=50, ge=1, description="Max forecasts selected per pass")
    resolve_after_kickoff_s: int = Field(default=3 * 3600, description="Minimum age of kickoff before a forecast is due")
    inter_forecast_delay_s: float = Field(default=0.1, ge=0.0, description="Pause between forecasts in a pass")
    date_offsets: list[int] = Field(
        default_factory=lambda: [1, 2, 3, -1],
        description="Day offsets tried after the kickoff date, in order",
    )

    # Dead-lettering
    max_attempts: int = Field(default=12, ge=1, description="Unsuccessful attempts before NEEDS_MANUAL_REVIEW")
    max_days_pending: int = Field(default=7, ge=1, description="Days past kickoff before NEEDS_MANUAL_REVIEW")
    stuck_after_s: int = Field(default=24 * 3600, description="PENDING this long past kickoff counts as stuck")

    # Coordination
    lease_ttl_s: int = Field(default=120, ge=1, description="TTL for lease:forecast:{id}")

    # Matching
    match_min_score: float = Field(default=0.0, ge=0.0, le=100.0, description="Minimum pair similarity for a candidate")


def get_resolver_settings() -> ResolverSettings:
    """Load resolver settings. Call get_settings() separately for Redis/DB."""
    return ResolverSettings()
