"""
backend/nerdfootball/monitoring/recompute_metrics.py

Purpose:
    Prometheus metrics for recompute runs and standings cache traffic.

Dependencies:
    - prometheus_client
"""

from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter

from prometheus_client import Counter, Histogram

METRIC_RECOMPUTE_RUNS = Counter(
    "nerdfootball_recompute_runs_total",
    "Recompute runs by kind and outcome (complete/partial).",
    ["kind", "outcome"],
)
METRIC_USERS_WRITTEN = Counter(
    "nerdfootball_recompute_users_written_total",
    "User results written by recompute runs.",
    ["kind"],
)
METRIC_USERS_FAILED = Counter(
    "nerdfootball_recompute_users_failed_total",
    "Users left for the next run after a store error.",
    ["kind"],
)
METRIC_DISCARDED_PICKS = Counter(
    "nerdfootball_discarded_picks_total",
    "Malformed confidence picks excluded from scoring.",
)
METRIC_CACHE_LOOKUPS = Counter(
    "nerdfootball_standings_cache_lookups_total",
    "Standings cache lookups by kind and result (hit/miss).",
    ["kind", "result"],
)
METRIC_RECOMPUTE_LATENCY = Histogram(
    "nerdfootball_recompute_latency_seconds",
    "Latency of one recompute run.",
    ["kind"],
)


@contextmanager
def observe_latency(metric):
    start = perf_counter()
    try:
        yield
    finally:
        metric.observe(perf_counter() - start)


def record_run(summary) -> None:
    """Count a finished run from its RecomputeSummary."""
    outcome = "complete" if summary.complete else "partial"
    METRIC_RECOMPUTE_RUNS.labels(kind=summary.kind, outcome=outcome).inc()
    METRIC_USERS_WRITTEN.labels(kind=summary.kind).inc(summary.users_written)
    METRIC_USERS_FAILED.labels(kind=summary.kind).inc(len(summary.failed_users))
    if summary.discarded_picks:
        METRIC_DISCARDED_PICKS.inc(summary.discarded_picks)
