"""
Prometheus metrics for KV access, catalog activity, and auth failures.
Exposed via /metrics endpoint for Prometheus scraping.
"""

from prometheus_client import Counter, Histogram

# KV store metrics
kv_operations_total = Counter(
    "recipe_catalog_kv_operations_total",
    "Total KV store operations",
    ["backend", "operation"],  # get, set, delete, scan
)
kv_errors_total = Counter(
    "recipe_catalog_kv_errors_total",
    "KV store operations that failed",
    ["backend", "operation"],
)
kv_scan_duration_seconds = Histogram(
    "recipe_catalog_kv_scan_duration_seconds",
    "Prefix scan duration in seconds",
    ["backend"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Catalog activity
ratings_submitted_total = Counter(
    "recipe_catalog_ratings_submitted_total",
    "Ratings written (first submission or overwrite)",
    ["outcome"],  # created, replaced
)
comments_added_total = Counter(
    "recipe_catalog_comments_added_total",
    "Comments appended",
)

# Identity
auth_failures_total = Counter(
    "recipe_catalog_auth_failures_total",
    "Rejected requests by reason",
    ["reason"],  # missing_token, invalid_token, forbidden
)


def record_kv_operation(backend: str, operation: str) -> None:
    kv_operations_total.labels(backend=backend, operation=operation).inc()


def record_kv_error(backend: str, operation: str) -> None:
    kv_errors_total.labels(backend=backend, operation=operation).inc()


def record_scan_duration(backend: str, seconds: float) -> None:
    kv_scan_duration_seconds.labels(backend=backend).observe(seconds)


def record_rating(replaced: bool) -> None:
    """Record a rating write; replaced=True when it overwrote an earlier rating."""
    ratings_submitted_total.labels(outcome="replaced" if replaced else "created").inc()


def record_comment() -> None:
    comments_added_total.inc()


def record_auth_failure(reason: str) -> None:
    auth_failures_total.labels(reason=reason).inc()
