"""Prometheus metrics for report generation, health scoring and the settings cache"""

from prometheus_client import Counter, Histogram

# Aggregation metrics
aggregation_duration_histogram = Histogram(
    "ledger_aggregation_duration_seconds",
    "Time spent building monthly summaries",
    ["report"],  # summaries | comparison | breakdown | trend | health_score
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

months_aggregated_counter = Counter(
    "ledger_months_aggregated_total",
    "Monthly summaries produced",
)

# Health score metrics
health_score_counter = Counter(
    "ledger_health_score_calculations_total",
    "Health scores calculated",
    ["scope"],  # user | group
)

health_score_histogram = Histogram(
    "ledger_health_score",
    "Distribution of composite health scores",
    buckets=[10, 20, 30, 40, 50, 60, 70, 75, 80, 90, 100],
)

health_score_level_counter = Counter(
    "ledger_health_score_level_total",
    "Health scores by level",
    ["level"],  # excellent | good | fair | poor
)

# Settings cache metrics
settings_cache_counter = Counter(
    "ledger_settings_cache_total",
    "Settings cache lookups",
    ["result"],  # hit | miss | invalidated
)

settings_refresh_histogram = Histogram(
    "ledger_settings_refresh_seconds",
    "Settings backing-store refresh time",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)


def record_health_score(scope: str, score: float, level: str) -> None:
    """Record health score metrics for distribution and level monitoring"""
    health_score_counter.labels(scope=scope).inc()
    health_score_histogram.observe(score)
    health_score_level_counter.labels(level=level).inc()


def record_summaries(report: str, months: int, duration_seconds: float) -> None:
    aggregation_duration_histogram.labels(report=report).observe(duration_seconds)
    months_aggregated_counter.inc(months)
