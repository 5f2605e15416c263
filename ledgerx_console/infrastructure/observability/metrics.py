"""Prometheus metrics for LedgerX calls, readiness probing and transfer batches"""

from prometheus_client import Counter, Histogram, Gauge

from ledgerx_console.domain.models import BackendState, BatchSummary

# Upstream LedgerX calls
upstream_latency_histogram = Histogram(
    "ledgerx_upstream_latency_seconds",
    "LedgerX API response time",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0],
)

upstream_failure_counter = Counter(
    "ledgerx_upstream_failures_total",
    "Failed LedgerX API calls",
    ["operation", "code"],
)

# Readiness
health_probe_counter = Counter(
    "ledgerx_health_probes_total",
    "Health probe attempts",
    ["result"],  # ok | not_ok | timeout | error
)

backend_state_gauge = Gauge(
    "ledgerx_backend_state",
    "1 for the current backend state, 0 otherwise",
    ["state"],
)

# Transfers
transfer_outcome_counter = Counter(
    "ledgerx_transfer_outcomes_total",
    "Transfer submissions by outcome",
    ["outcome"],  # succeeded | conflict | insufficient_funds | other_error
)

batch_duration_histogram = Histogram(
    "ledgerx_batch_duration_seconds",
    "Stress-test batch wall time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Console service
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_backend_state(state: BackendState) -> None:
    """Flip the state gauge so exactly one label reads 1"""
    for candidate in BackendState:
        backend_state_gauge.labels(state=candidate.value).set(1 if candidate is state else 0)


def record_batch(summary: BatchSummary) -> None:
    """Record batch metrics for monitoring conflict and overdraft rates"""
    transfer_outcome_counter.labels(outcome="succeeded").inc(summary.succeeded)
    transfer_outcome_counter.labels(outcome="conflict").inc(summary.conflicts)
    transfer_outcome_counter.labels(outcome="insufficient_funds").inc(summary.insufficient_funds)
    transfer_outcome_counter.labels(outcome="other_error").inc(summary.other_errors)
    batch_duration_histogram.observe(summary.duration_ms / 1000)
