"""
Lightweight metrics collection for match validation.
Wraps prometheus_client with sync and async latency helpers.
"""
from __future__ import annotations

import time
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator

from prometheus_client import Counter, Gauge, Histogram, start_http_server

from shared.config import get_settings
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Counters ────────────────────────────────────────────────────────────
MATCHES_VALIDATED = Counter(
    "mv_matches_validated_total",
    "Total match validations by resulting status",
    ["status"],
)
DISCREPANCIES = Counter(
    "mv_discrepancies_total",
    "Total discrepancies found by severity and category",
    ["severity", "category"],
)
BATCH_RUNS = Counter(
    "mv_batch_runs_total",
    "Event-wide validation runs by outcome",
    ["outcome"],
)

# ── Histograms ──────────────────────────────────────────────────────────
VALIDATION_LATENCY = Histogram(
    "mv_validation_seconds",
    "Time to validate a single match",
    ["phase"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
)

# ── Gauges ──────────────────────────────────────────────────────────────
BATCH_IN_PROGRESS = Gauge(
    "mv_batch_in_progress",
    "Event-wide validation runs currently executing",
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Iterator[None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        histogram.labels(**labels).observe(elapsed)


@asynccontextmanager
async def atrack_latency(histogram: Histogram, **labels: str) -> AsyncIterator[None]:
    """Async context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        histogram.labels(**labels).observe(elapsed)


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
