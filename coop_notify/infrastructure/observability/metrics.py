"""Prometheus metrics for reminder creation, read-status changes and cache efficiency"""

from prometheus_client import Counter, Histogram

# Reminder metrics
reminders_created_counter = Counter(
    "coop_reminders_created_total",
    "Installment reminders created",
    ["kind"],  # today | upcoming
)

reconcile_failures_counter = Counter(
    "coop_reconcile_failures_total",
    "Loans whose reminder reconciliation failed",
)

# Read-status metrics
mark_read_counter = Counter(
    "coop_mark_read_total",
    "Mark-as-read attempts",
    ["source", "outcome"],  # transaction | global | unknown ; success | not_found | unauthorized | error
)

# Cache metrics
cache_lookup_counter = Counter(
    "coop_cache_lookups_total",
    "Fetch cache lookups",
    ["cache", "result"],  # notifications | transactions ; hit | miss
)

aggregation_fallback_counter = Counter(
    "coop_aggregation_fallback_total",
    "Server function reads answered by the direct-query fallback",
    ["read"],
)

# Remote store metrics
remote_store_failures_counter = Counter(
    "coop_remote_store_failures_total",
    "Failed remote store calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_mark_read(source: str, outcome: str) -> None:
    """Record one mark-as-read attempt by the collection it resolved to"""
    mark_read_counter.labels(source=source, outcome=outcome).inc()
