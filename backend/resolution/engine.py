"""
Resolution pass: select due forecasts, then classify -> search -> resolve ->
settle -> persist each one in turn.

Failures are contained per forecast: a provider error or an unresolvable
fixture records an attempt and leaves the forecast PENDING until its retry
budget runs out, at which point it moves to NEEDS_MANUAL_REVIEW.
Anything else that goes wrong with one forecast is logged and counted, and
the pass moves on to the next.
"""
from __future__ import annotations

import asyncio
import json
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from redis.exceptions import RedisError

from shared.models.domain import Forecast
from shared.models.enums import Outcome
from shared.utils.logging import forecast_context, get_logger
from shared.utils.metrics import (
    DEAD_LETTERED,
    LEASE_CONFLICTS,
    PASS_DURATION,
    RESOLUTION_ATTEMPTS,
    SETTLEMENTS,
    STUCK_FORECASTS,
)
from shared.utils.redis_manager import RedisManager

from resolution.classifier import SportClassifier
from resolution.config import ResolverSettings, get_resolver_settings
from resolution.errors import ProviderError, SettlementConflict
from resolution.matching import TeamNameMatcher, default_matcher
from resolution.resolver import OutcomeResolver
from resolution.search import DateWindowSearch
from resolution.settlement import SettlementEngine
from resolution.sources.registry import SourceRegistry
from resolution.store import ForecastStore

logger = get_logger(__name__)


@dataclass
class PassSummary:
    started_at: str = ""
    selected: int = 0
    settled: int = 0
    hits: int = 0
    misses: int = 0
    unresolved: int = 0
    skipped_unknown: int = 0
    skipped_leased: int = 0
    provider_errors: int = 0
    conflicts: int = 0
    errors: int = 0
    dead_lettered: int = 0
    stuck: int = 0
    duration_s: float = 0.0
    failures: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at,
            "selected": self.selected,
            "settled": self.settled,
            "hits": self.hits,
            "misses": self.misses,
            "unresolved": self.unresolved,
            "skipped_unknown": self.skipped_unknown,
            "skipped_leased": self.skipped_leased,
            "provider_errors": self.provider_errors,
            "conflicts": self.conflicts,
            "errors": self.errors,
            "dead_lettered": self.dead_lettered,
            "stuck": self.stuck,
            "duration_s": self.duration_s,
            "failures": self.failures,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def kickoff_date(forecast: Forecast) -> date:
    kickoff = forecast.kickoff
    if kickoff.tzinfo is not None:
        kickoff = kickoff.astimezone(timezone.utc)
    return kickoff.date()


class ResolutionEngine:
    """Runs resolution passes over the forecast store."""

    def __init__(
        self,
        store: ForecastStore,
        registry: SourceRegistry,
        redis: Optional[RedisManager] = None,
        settings: Optional[ResolverSettings] = None,
        matcher: Optional[TeamNameMatcher] = None,
        owner_id: Optional[str] = None,
    ) -> None:
        self._store = store
        self._redis = redis
        self._settings = settings or get_resolver_settings()
        matcher = matcher or default_matcher()
        self._classifier = SportClassifier(matcher)
        self._search = DateWindowSearch(
            registry,
            matcher,
            offsets=self._settings.date_offsets,
            min_score=self._settings.match_min_score,
        )
        self._resolver = OutcomeResolver(matcher)
        self._settlement = SettlementEngine(matcher)
        self._owner = owner_id or f"resolver-{uuid.uuid4().hex[:12]}"

    @property
    def settlement(self) -> SettlementEngine:
        return self._settlement

    async def run_pass(self, now: Optional[datetime] = None) -> PassSummary:
        """One sequential pass over due forecasts. Never raises for a single forecast's failure."""
        started = time.perf_counter()
        now = now or _utcnow()
        s = self._settings
        summary = PassSummary(started_at=now.isoformat())

        forecasts = await self._store.list_due(now, s.batch_size, s.resolve_after_kickoff_s)
        summary.selected = len(forecasts)
        logger.info("resolution_pass_started", due=len(forecasts), owner=self._owner)

        for i, forecast in enumerate(forecasts):
            if i and s.inter_forecast_delay_s > 0:
                await asyncio.sleep(s.inter_forecast_delay_s)
            await self._process_leased(forecast, now, summary)

        summary.stuck = await self._store.count_stuck(now, s.stuck_after_s)
        STUCK_FORECASTS.set(summary.stuck)

        elapsed = time.perf_counter() - started
        summary.duration_s = round(elapsed, 3)
        PASS_DURATION.observe(elapsed)
        await self._publish(summary)

        logger.info(
            "resolution_pass_finished",
            selected=summary.selected,
            settled=summary.settled,
            unresolved=summary.unresolved,
            provider_errors=summary.provider_errors,
            errors=summary.errors,
            dead_lettered=summary.dead_lettered,
            stuck=summary.stuck,
            duration_s=summary.duration_s,
        )
        return summary

    async def _process_leased(self, forecast: Forecast, now: datetime, summary: PassSummary) -> None:
        fid = str(forecast.id)
        try:
            with forecast_context(fid, owner=self._owner):
                await self._process_with_lease(forecast, now, summary)
        except Exception as exc:
            # Store, Redis or parsing failures stay with this forecast; the pass moves on
            summary.errors += 1
            summary.failures.append({"forecast_id": fid, "reason": f"{type(exc).__name__}: {exc}"})
            RESOLUTION_ATTEMPTS.labels(domain="unknown", result="error").inc()
            logger.exception("forecast_processing_failed", forecast_id=fid, error=str(exc))

    async def _process_with_lease(self, forecast: Forecast, now: datetime, summary: PassSummary) -> None:
        fid = str(forecast.id)
        if self._redis is not None:
            acquired = await self._redis.try_acquire_lease(fid, self._owner, self._settings.lease_ttl_s)
            if not acquired:
                summary.skipped_leased += 1
                LEASE_CONFLICTS.inc()
                logger.info("forecast_lease_held", forecast_id=fid)
                return
        try:
            await self.process(forecast, now, summary)
        finally:
            if self._redis is not None:
                await self._redis.release_lease(fid, self._owner)

    async def process(self, forecast: Forecast, now: datetime, summary: PassSummary) -> None:
        fid = str(forecast.id)
        domain = self._classifier.classify(forecast)
        if not domain.is_resolvable:
            summary.skipped_unknown += 1
            RESOLUTION_ATTEMPTS.labels(domain=domain.value, result="unknown_domain").inc()
            await self._record_failure(forecast, now, summary, "unknown sport domain")
            return

        home, away = forecast.recorded_home_team, forecast.recorded_away_team
        if not home or not away:
            summary.unresolved += 1
            RESOLUTION_ATTEMPTS.labels(domain=domain.value, result="bad_label").inc()
            await self._record_failure(forecast, now, summary, f"unparseable match label: {forecast.match_label!r}")
            return

        try:
            event = await self._search.find_event(domain, home, away, kickoff_date(forecast))
        except (ProviderError, httpx.HTTPError) as exc:
            summary.provider_errors += 1
            RESOLUTION_ATTEMPTS.labels(domain=domain.value, result="provider_error").inc()
            summary.failures.append({"forecast_id": fid, "reason": str(exc)})
            logger.warning(
                "forecast_resolution_failed",
                forecast_id=fid,
                domain=domain.value,
                error=str(exc),
            )
            await self._record_failure(forecast, now, summary, f"provider error: {exc}")
            return

        resolved = self._resolver.resolve(domain, home, away, event) if event else None
        if resolved is None:
            summary.unresolved += 1
            RESOLUTION_ATTEMPTS.labels(domain=domain.value, result="not_found").inc()
            await self._record_failure(forecast, now, summary, "no finished event found")
            return

        result = self._settlement.settle(forecast, resolved)
        try:
            await self._store.record_settlement(forecast.id, result, now)
        except SettlementConflict as exc:
            summary.conflicts += 1
            RESOLUTION_ATTEMPTS.labels(domain=domain.value, result="conflict").inc()
            logger.warning("settlement_conflict", forecast_id=fid, state=exc.state)
            return

        RESOLUTION_ATTEMPTS.labels(domain=domain.value, result="settled").inc()
        SETTLEMENTS.labels(outcome=result.outcome.value, path="auto").inc()
        summary.settled += 1
        if result.outcome is Outcome.HIT:
            summary.hits += 1
        else:
            summary.misses += 1
        if resolved.orientation_swapped:
            logger.info("orientation_swapped", forecast_id=fid, provider_home=resolved.actual_home_team)

    async def _record_failure(self, forecast: Forecast, now: datetime, summary: PassSummary, reason: str) -> None:
        attempts = await self._store.record_attempt(forecast.id, now, reason)
        s = self._settings
        dead_reason: Optional[str] = None
        if attempts >= s.max_attempts:
            dead_reason = "max_attempts"
        elif now - forecast.kickoff > timedelta(days=s.max_days_pending):
            dead_reason = "max_age"
        if dead_reason is None:
            return
        if await self._store.mark_needs_review(forecast.id, now, f"{dead_reason}: {reason}"):
            summary.dead_lettered += 1
            DEAD_LETTERED.labels(reason=dead_reason).inc()

    async def _publish(self, summary: PassSummary) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.record_pass(json.dumps(summary.to_dict()))
        except RedisError as exc:
            logger.warning("pass_summary_publish_failed", error=str(exc))
