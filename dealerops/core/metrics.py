"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry
import time
from functools import wraps
from typing import Callable

from dealerops.core.exceptions import DealerOpsError

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

sale_operations = Counter(
    'sale_operations_total',
    'Sale coordinator operations by outcome',
    ['operation', 'status'],
    registry=registry
)

sale_operation_duration = Histogram(
    'sale_operation_duration_seconds',
    'Sale coordinator operation duration in seconds',
    ['operation'],
    registry=registry
)

vehicle_transitions = Counter(
    'vehicle_transitions_total',
    'Vehicle status transitions applied',
    ['event', 'to_status'],
    registry=registry
)

transaction_rollbacks = Counter(
    'transaction_rollbacks_total',
    'Units of work rolled back',
    ['operation', 'reason'],
    registry=registry
)

rate_limit_exceeded = Counter(
    'rate_limit_exceeded_total',
    'Total rate limit exceeded events',
    ['user_id'],
    registry=registry
)

webhook_deliveries = Counter(
    'webhook_deliveries_total',
    'Total webhook delivery attempts',
    ['status', 'event'],
    registry=registry
)

audit_logs_created = Counter(
    'audit_logs_created_total',
    'Total audit logs created',
    ['action'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)

db_connected = Gauge(
    'db_connected',
    'Database connection status (1=connected, 0=disconnected)',
    registry=registry
)


def track_sale_operation(operation: str):
    """Decorator to track coordinator operation outcomes and latency"""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = await func(*args, **kwargs)
                sale_operations.labels(operation=operation, status='success').inc()
                return result
            except DealerOpsError as e:
                sale_operations.labels(operation=operation, status=e.kind).inc()
                raise
            except Exception:
                sale_operations.labels(operation=operation, status='error').inc()
                raise
            finally:
                sale_operation_duration.labels(operation=operation).observe(time.time() - start_time)
        return wrapper
    return decorator


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    from prometheus_client import generate_latest
    return generate_latest(registry).decode('utf-8')
