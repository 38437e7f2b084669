"""
Scheduler trigger.

POST /v1/cron/resolve  Run one resolution pass and return its summary.
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from shared.utils.logging import get_logger

from api.dependencies import get_engine, require_cron_secret
from resolution.engine import ResolutionEngine

logger = get_logger(__name__)
router = APIRouter(prefix="/v1/cron", tags=["cron"], dependencies=[Depends(require_cron_secret)])


@router.post("/resolve")
async def trigger_resolution(engine: ResolutionEngine = Depends(get_engine)) -> dict[str, Any]:
    summary = await engine.run_pass()
    return summary.to_dict()
