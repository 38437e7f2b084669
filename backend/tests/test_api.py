"""API route tests. Lifespan disabled; store, engine and settings overridden per test."""
from __future__ import annotations

import uuid
from typing import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from shared.config import Settings, get_settings
from shared.models.enums import ForecastState

from api.app import create_app
from api.dependencies import get_engine, get_settlement_engine, get_store
from fakes import make_forecast
from resolution.engine import PassSummary
from resolution.errors import SettlementConflict
from resolution.settlement import SettlementEngine


@pytest.fixture
def store() -> MagicMock:
    store = MagicMock()
    store.get = AsyncMock(return_value=None)
    store.record_settlement = AsyncMock(return_value=None)
    store.list_needs_review = AsyncMock(return_value=[])
    return store


@pytest.fixture
def engine() -> MagicMock:
    engine = MagicMock()
    engine.run_pass = AsyncMock(return_value=PassSummary(started_at="2025-03-02T12:00:00+00:00", selected=2, settled=1))
    return engine


@pytest.fixture
def client(store: MagicMock, engine: MagicMock) -> Iterator[TestClient]:
    """Test client with lifespan disabled so routes run without DB/Redis."""
    app = create_app(use_lifespan=False)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_settlement_engine] = lambda: SettlementEngine()
    app.dependency_overrides[get_settings] = lambda: Settings(cron_secret="s3cret")
    with TestClient(app) as c:
        yield c


def _url(forecast_id: uuid.UUID) -> str:
    return f"/v1/admin/forecasts/{forecast_id}/result"


# ── System ──────────────────────────────────────────────────────────────

def test_health_returns_ok(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "api"}


def test_request_id_is_echoed(client: TestClient) -> None:
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"


# ── Manual result entry ─────────────────────────────────────────────────

def test_manual_result_unknown_forecast_404(client: TestClient) -> None:
    r = client.patch(_url(uuid.uuid4()), json={"home_score": 1, "away_score": 0})
    assert r.status_code == 404


def test_manual_result_negative_score_400(client: TestClient, store: MagicMock) -> None:
    r = client.patch(_url(uuid.uuid4()), json={"home_score": -1, "away_score": 0})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_score"
    store.get.assert_not_awaited()


def test_manual_result_non_integer_400(client: TestClient) -> None:
    r = client.patch(_url(uuid.uuid4()), json={"home_score": "two", "away_score": 0})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_request"


def test_manual_result_bad_id_400(client: TestClient) -> None:
    r = client.patch("/v1/admin/forecasts/not-a-uuid/result", json={"home_score": 1, "away_score": 0})
    assert r.status_code == 400


def test_manual_result_already_settled_409(client: TestClient, store: MagicMock) -> None:
    forecast = make_forecast(state=ForecastState.MISS)
    store.get = AsyncMock(return_value=forecast)

    r = client.patch(_url(forecast.id), json={"home_score": 1, "away_score": 0})

    assert r.status_code == 409
    assert r.json()["error"] == "already_settled"
    store.record_settlement.assert_not_awaited()


def test_manual_result_settles_in_recorded_orientation(client: TestClient, store: MagicMock) -> None:
    forecast = make_forecast(forecast_text="Away Win", state=ForecastState.NEEDS_MANUAL_REVIEW)
    store.get = AsyncMock(return_value=forecast)

    r = client.patch(_url(forecast.id), json={"home_score": 0, "away_score": 2})

    assert r.status_code == 200
    data = r.json()
    assert data["id"] == str(forecast.id)
    assert data["state"] == "HIT"
    assert data["actual_score"] == "0-2"
    assert data["actual_result"] == "Away Win"
    store.record_settlement.assert_awaited_once()
    assert store.record_settlement.await_args.kwargs["allow_review"] is True


def test_manual_result_lost_race_409(client: TestClient, store: MagicMock) -> None:
    forecast = make_forecast()
    store.get = AsyncMock(return_value=forecast)
    store.record_settlement = AsyncMock(side_effect=SettlementConflict(str(forecast.id), "HIT"))

    r = client.patch(_url(forecast.id), json={"home_score": 1, "away_score": 0})

    assert r.status_code == 409


# ── Review queue ────────────────────────────────────────────────────────

def test_review_queue_lists_dead_lettered(client: TestClient, store: MagicMock) -> None:
    store.list_needs_review = AsyncMock(return_value=[make_forecast(state=ForecastState.NEEDS_MANUAL_REVIEW)])

    r = client.get("/v1/admin/forecasts/review", params={"limit": 10, "offset": 5})

    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 1
    assert data["forecasts"][0]["state"] == "NEEDS_MANUAL_REVIEW"
    store.list_needs_review.assert_awaited_once_with(limit=10, offset=5)


# ── Scheduler trigger ───────────────────────────────────────────────────

def test_cron_requires_secret(client: TestClient, engine: MagicMock) -> None:
    r = client.post("/v1/cron/resolve")
    assert r.status_code == 401
    engine.run_pass.assert_not_awaited()


def test_cron_rejects_wrong_secret(client: TestClient) -> None:
    r = client.post("/v1/cron/resolve", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


def test_cron_runs_pass(client: TestClient, engine: MagicMock) -> None:
    r = client.post("/v1/cron/resolve", headers={"Authorization": "Bearer s3cret"})
    assert r.status_code == 200
    data = r.json()
    assert data["selected"] == 2
    assert data["settled"] == 1
    engine.run_pass.assert_awaited_once()
