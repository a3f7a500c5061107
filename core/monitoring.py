"""
Recipe Share Monitoring
Prometheus metrics for requests, policy decisions and maintenance passes
"""

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

# Prometheus Metrics Registry
registry = CollectorRegistry()

# Application Metrics
http_requests_total = Counter(
    'recipeshare_http_requests_total',
    'Total HTTP requests',
    ['method', 'status'],
    registry=registry
)

http_request_duration_seconds = Histogram(
    'recipeshare_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method'],
    registry=registry
)

# Authorization Metrics
policy_denials_total = Counter(
    'recipeshare_policy_denials_total',
    'Operations refused by the authorization policy',
    ['entity_type', 'operation', 'reason'],
    registry=registry
)

# Authentication Metrics
auth_failed_total = Counter(
    'recipeshare_auth_failed_total',
    'Total failed authentication attempts',
    ['reason'],
    registry=registry
)

# Maintenance Metrics
expired_conversations_total = Counter(
    'recipeshare_expired_conversations_total',
    'Guest conversations handled by the expiry sweep',
    ['outcome'],
    registry=registry
)

counters_reconciled_total = Counter(
    'recipeshare_counters_reconciled_total',
    'Derived counters found out of step and recomputed',
    ['counter'],
    registry=registry
)


def record_request(method: str, status_code: int, duration: float) -> None:
    http_requests_total.labels(method=method, status=str(status_code)).inc()
    http_request_duration_seconds.labels(method=method).observe(duration)


def record_denial(entity_type: str, operation: str, reason: str) -> None:
    policy_denials_total.labels(entity_type=entity_type, operation=operation, reason=reason).inc()


def record_sweep(deleted: int, failed: int) -> None:
    if deleted:
        expired_conversations_total.labels(outcome="deleted").inc(deleted)
    if failed:
        expired_conversations_total.labels(outcome="failed").inc(failed)


def record_reconciled(counter: str, fixed: int) -> None:
    if fixed:
        counters_reconciled_total.labels(counter=counter).inc(fixed)


def get_metrics() -> bytes:
    """Get Prometheus metrics in exposition format"""
    return generate_latest(registry)


__all__ = [
    "registry",
    "CONTENT_TYPE_LATEST",
    "record_request",
    "record_denial",
    "record_sweep",
    "record_reconciled",
    "get_metrics",
]
