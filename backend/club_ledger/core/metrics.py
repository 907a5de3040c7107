"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'ledger_booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, invalid, not_found, pricing_unavailable, exhausted, error
)

booking_latency = Histogram(
    'ledger_booking_latency_seconds',
    'Booking creation latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_reference_collisions = Counter(
    'ledger_booking_reference_collisions_total',
    'Booking inserts retried because the generated reference already existed'
)

booking_status_changes = Counter(
    'ledger_booking_status_changes_total',
    'Booking payment status transitions',
    ['status']
)

# Revenue metrics
revenue_entries = Counter(
    'ledger_revenue_entries_total',
    'Manual revenue entry mutations',
    ['operation']  # create, update, delete
)

# Configuration metrics
settings_updates = Counter(
    'ledger_settings_updates_total',
    'Configuration store writes',
    ['result']  # committed, rolled_back
)

# Idempotency cache metrics
idempotency_lookups = Counter(
    'ledger_idempotency_lookups_total',
    'Idempotency key lookups for booking re-submission',
    ['result']  # hit, miss, error
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    booking_attempts.labels(status=status).inc()


def record_reference_collision():
    booking_reference_collisions.inc()


def record_status_change(status: str):
    booking_status_changes.labels(status=status).inc()


def record_revenue_entry(operation: str):
    revenue_entries.labels(operation=operation).inc()


def record_settings_update(committed: bool):
    settings_updates.labels(result="committed" if committed else "rolled_back").inc()


def record_idempotency_lookup(result: str):
    idempotency_lookups.labels(result=result).inc()
