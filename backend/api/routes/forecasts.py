"""
Forecast administration endpoints.

PATCH /v1/admin/forecasts/{id}/result  Manual score entry (400 invalid, 404 unknown, 409 settled).
GET   /v1/admin/forecasts/review       Forecasts dead-lettered to NEEDS_MANUAL_REVIEW.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from shared.models.domain import ManualResult
from shared.utils.logging import get_logger
from shared.utils.metrics import SETTLEMENTS

from api.dependencies import get_settlement_engine, get_store
from resolution.settlement import SettlementEngine, validate_manual_scores
from resolution.store import ForecastStore

logger = get_logger(__name__)
router = APIRouter(prefix="/v1/admin/forecasts", tags=["admin"])


@router.patch("/{forecast_id}/result")
async def set_forecast_result(
    forecast_id: uuid.UUID,
    body: ManualResult,
    store: ForecastStore = Depends(get_store),
    settlement: SettlementEngine = Depends(get_settlement_engine),
) -> dict[str, Any]:
    """
    Settle a forecast from an admin-entered final score.

    Scores are in the forecast's recorded orientation (home team first in
    match_label). Works on PENDING and NEEDS_MANUAL_REVIEW forecasts.
    """
    validate_manual_scores(body.home_score, body.away_score)

    forecast = await store.get(forecast_id)
    if forecast is None:
        raise HTTPException(status_code=404, detail="Forecast not found")

    result = settlement.settle_manual(forecast, body.home_score, body.away_score)
    await store.record_settlement(forecast_id, result, datetime.now(timezone.utc), allow_review=True)
    SETTLEMENTS.labels(outcome=result.outcome.value, path="manual").inc()

    logger.info(
        "forecast_manually_settled",
        forecast_id=str(forecast_id),
        score=result.actual_score,
        outcome=result.outcome.value,
    )
    return {
        "id": str(forecast_id),
        "state": result.outcome.value,
        **result.model_dump(mode="json"),
    }


@router.get("/review")
async def list_review_queue(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: ForecastStore = Depends(get_store),
) -> dict[str, Any]:
    forecasts = await store.list_needs_review(limit=limit, offset=offset)
    return {
        "count": len(forecasts),
        "forecasts": [f.model_dump(mode="json") for f in forecasts],
    }
