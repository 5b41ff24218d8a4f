"""Prometheus metrics for agency calculations, lifecycle transitions and budgets"""

from prometheus_client import Counter, Histogram

# Agency metrics
agency_snapshot_counter = Counter(
    "agency_snapshot_total",
    "Total agency snapshots calculated",
    ["outcome"],  # constrained | backed | credit_only
)

credit_agency_histogram = Histogram(
    "agency_credit_agency_cents",
    "Credit agency per calculated snapshot",
    buckets=[0, 10_000, 50_000, 100_000, 250_000, 500_000, 1_000_000, 2_500_000],
)

# Lifecycle metrics
state_transition_counter = Counter(
    "state_transition_total",
    "Successful lifecycle transitions",
    ["entity", "to_status"],
)

state_transition_conflict_counter = Counter(
    "state_transition_conflicts_total",
    "Rejected lifecycle transitions (illegal or stale)",
    ["entity"],
)

# Budget metrics
category_budget_status_counter = Counter(
    "category_budget_status_total",
    "Category budget evaluations by status",
    ["status"],  # ok | warning | over
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_snapshot(credit_agency_cents: int, backed_agency_cents: int) -> None:
    """Record snapshot metrics for monitoring how often users run without headroom"""
    if backed_agency_cents > 0:
        outcome = "backed"
    elif credit_agency_cents > 0:
        outcome = "credit_only"
    else:
        outcome = "constrained"

    agency_snapshot_counter.labels(outcome=outcome).inc()
    credit_agency_histogram.observe(credit_agency_cents)
