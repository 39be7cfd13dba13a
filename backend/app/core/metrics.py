"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking create/modify attempts',
    ['operation', 'status']  # create/modify x success/conflict/rejected/error
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking create/modify latency including the reservation guard',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_transitions = Counter(
    'booking_transitions_total',
    'Booking status transitions',
    ['to_status']  # confirmed, cancelled
)

# Availability metrics
availability_checks = Counter(
    'availability_checks_total',
    'Availability checks',
    ['result']  # available, booked
)

# Database metrics
db_retries = Counter(
    'db_retry_attempts_total',
    'Booking retries due to car version conflicts'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)

reservation_guard_fallbacks = Counter(
    'reservation_guard_fallbacks_total',
    'Reservation guard failed open to optimistic locking'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(operation: str, status: str):
    """Record booking attempt. Status: success, conflict, rejected, error"""
    booking_attempts.labels(operation=operation, status=status).inc()


def record_transition(to_status: str):
    booking_transitions.labels(to_status=to_status).inc()


def record_availability_check(available: bool):
    availability_checks.labels(result="available" if available else "booked").inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
