"""
Forecast persistence on the async SQLAlchemy engine.

Settlement writes are conditional on the row still being settleable, so two
overlapping passes (or a pass racing an admin override) can never settle the
same forecast twice.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select, update

from shared.models.domain import Forecast, SettlementResult
from shared.models.enums import ForecastState
from shared.models.orm import ForecastORM
from shared.utils.database import DatabaseManager
from shared.utils.logging import get_logger

from resolution.errors import SettlementConflict

logger = get_logger(__name__)

_ERROR_MAX_LEN = 1000


class ForecastStore:
    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def list_due(self, now: datetime, limit: int, resolve_after_s: int) -> list[Forecast]:
        """PENDING forecasts whose kickoff is at least resolve_after_s in the past, oldest first."""
        cutoff = now - timedelta(seconds=resolve_after_s)
        async with self._db.read_session() as session:
            result = await session.execute(
                select(ForecastORM)
                .where(ForecastORM.state == ForecastState.PENDING.value)
                .where(ForecastORM.kickoff <= cutoff)
                .order_by(ForecastORM.kickoff.asc())
                .limit(limit)
            )
            return [Forecast.model_validate(row) for row in result.scalars().all()]

    async def get(self, forecast_id: uuid.UUID) -> Optional[Forecast]:
        async with self._db.read_session() as session:
            row = await session.get(ForecastORM, forecast_id)
            return Forecast.model_validate(row) if row else None

    async def record_settlement(
        self,
        forecast_id: uuid.UUID,
        result: SettlementResult,
        now: datetime,
        allow_review: bool = False,
    ) -> None:
        """
        Write-once settlement. Only rows still PENDING (or NEEDS_MANUAL_REVIEW
        when allow_review is set) are updated.

        Raises:
            SettlementConflict: the row was already settled or does not exist.
        """
        allowed = [ForecastState.PENDING.value]
        if allow_review:
            allowed.append(ForecastState.NEEDS_MANUAL_REVIEW.value)

        async with self._db.write_session() as session:
            res = await session.execute(
                update(ForecastORM)
                .where(ForecastORM.id == forecast_id)
                .where(ForecastORM.state.in_(allowed))
                .values(
                    state=result.outcome.value,
                    actual_result=result.actual_result,
                    actual_score=result.actual_score,
                    value_bet_outcome=result.value_bet_outcome.value if result.value_bet_outcome else None,
                    value_bet_profit=result.value_bet_profit,
                    resolved_at=now,
                    last_error=None,
                    updated_at=now,
                )
            )
            if res.rowcount == 0:
                current = await session.scalar(select(ForecastORM.state).where(ForecastORM.id == forecast_id))
                raise SettlementConflict(str(forecast_id), current)

        logger.info(
            "forecast_settled",
            forecast_id=str(forecast_id),
            outcome=result.outcome.value,
            actual_score=result.actual_score,
            value_bet_outcome=result.value_bet_outcome.value if result.value_bet_outcome else None,
        )

    async def record_attempt(self, forecast_id: uuid.UUID, now: datetime, error: Optional[str] = None) -> int:
        """Bump attempt_count on a PENDING forecast; returns the new count (0 if not PENDING)."""
        async with self._db.write_session() as session:
            res = await session.execute(
                update(ForecastORM)
                .where(ForecastORM.id == forecast_id)
                .where(ForecastORM.state == ForecastState.PENDING.value)
                .values(
                    attempt_count=ForecastORM.attempt_count + 1,
                    last_attempt_at=now,
                    last_error=error[:_ERROR_MAX_LEN] if error else None,
                    updated_at=now,
                )
                .returning(ForecastORM.attempt_count)
            )
            count = res.scalar_one_or_none()
        return count or 0

    async def mark_needs_review(self, forecast_id: uuid.UUID, now: datetime, reason: str) -> bool:
        """Dead-letter a PENDING forecast. False if it had already left PENDING."""
        async with self._db.write_session() as session:
            res = await session.execute(
                update(ForecastORM)
                .where(ForecastORM.id == forecast_id)
                .where(ForecastORM.state == ForecastState.PENDING.value)
                .values(
                    state=ForecastState.NEEDS_MANUAL_REVIEW.value,
                    last_error=reason[:_ERROR_MAX_LEN],
                    updated_at=now,
                )
            )
            moved = res.rowcount > 0
        if moved:
            logger.warning("forecast_needs_review", forecast_id=str(forecast_id), reason=reason)
        return moved

    async def count_stuck(self, now: datetime, stuck_after_s: int) -> int:
        cutoff = now - timedelta(seconds=stuck_after_s)
        async with self._db.read_session() as session:
            count = await session.scalar(
                select(func.count())
                .select_from(ForecastORM)
                .where(ForecastORM.state == ForecastState.PENDING.value)
                .where(ForecastORM.kickoff <= cutoff)
            )
        return int(count or 0)

    async def list_needs_review(self, limit: int = 100, offset: int = 0) -> list[Forecast]:
        async with self._db.read_session() as session:
            result = await session.execute(
                select(ForecastORM)
                .where(ForecastORM.state == ForecastState.NEEDS_MANUAL_REVIEW.value)
                .order_by(ForecastORM.kickoff.asc())
                .offset(offset)
                .limit(limit)
            )
            return [Forecast.model_validate(row) for row in result.scalars().all()]
