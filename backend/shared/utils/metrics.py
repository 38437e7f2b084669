"""
Metrics collection for the settlement services.
Counters, histograms and gauges on prometheus_client, served from a side port.
"""
from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, start_http_server

from shared.config import get_settings
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Counters ────────────────────────────────────────────────────────────
PROVIDER_REQUESTS = Counter(
    "ms_provider_requests_total",
    "Total provider HTTP requests",
    ["provider", "status"],
)
RESOLUTION_ATTEMPTS = Counter(
    "ms_resolution_attempts_total",
    "Forecast resolution attempts by result",
    ["domain", "result"],
)
SETTLEMENTS = Counter(
    "ms_settlements_total",
    "Forecasts settled, by outcome and path (auto or manual)",
    ["outcome", "path"],
)
AMBIGUOUS_MATCHES = Counter(
    "ms_ambiguous_matches_total",
    "Provider responses where several events tied for the best match",
    ["domain"],
)
DEAD_LETTERED = Counter(
    "ms_dead_lettered_total",
    "Forecasts moved to NEEDS_MANUAL_REVIEW",
    ["reason"],
)
LEASE_CONFLICTS = Counter(
    "ms_lease_conflicts_total",
    "Forecasts skipped because another run held the lease",
)

# ── Histograms ──────────────────────────────────────────────────────────
PROVIDER_LATENCY = Histogram(
    "ms_provider_latency_seconds",
    "Provider request latency in seconds",
    ["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
PASS_DURATION = Histogram(
    "ms_resolution_pass_seconds",
    "Wall time of one resolution pass",
    buckets=(1, 5, 15, 30, 60, 120, 300, 600),
)

# ── Gauges ──────────────────────────────────────────────────────────────
STUCK_FORECASTS = Gauge(
    "ms_stuck_forecasts",
    "Forecasts still PENDING more than 24h after kickoff",
)


def start_metrics_server(port: int | None = None) -> None:
    """Start the Prometheus metrics HTTP server."""
    settings = get_settings()
    if not settings.metrics_enabled:
        return
    metrics_port = port or settings.metrics_port
    try:
        start_http_server(metrics_port)
        logger.info("metrics_server_started", port=metrics_port)
    except OSError as exc:
        logger.warning("metrics_server_failed", error=str(exc), port=metrics_port)
