"""Prometheus metrics for ingestion throughput and risk statistics requests"""

from prometheus_client import Counter, Histogram

# Ingestion metrics
ingest_rows_counter = Counter(
    "pension_ingest_rows_total",
    "Spreadsheet rows processed by the ingestion pipeline",
    ["outcome"],  # accepted | rejected
)

ingest_duration_histogram = Histogram(
    "pension_ingest_duration_seconds",
    "Wall time of a full workbook ingestion",
    buckets=[0.5, 1.0, 5.0, 15.0, 60.0, 300.0, 900.0],
)

ingest_failures_counter = Counter(
    "pension_ingest_failures_total",
    "Ingestions aborted because the source could not be read",
)

# Risk statistics metrics
risk_stats_counter = Counter(
    "pension_risk_stats_requests_total",
    "Risk level statistics requests",
    ["outcome"],  # ok | error
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ingestion(accepted_count: int, rejected_count: int, duration_seconds: float) -> None:
    """Record per-row outcomes and duration of one ingestion"""
    ingest_rows_counter.labels(outcome="accepted").inc(accepted_count)
    ingest_rows_counter.labels(outcome="rejected").inc(rejected_count)
    ingest_duration_histogram.observe(duration_seconds)
