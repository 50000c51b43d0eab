"""
Prometheus Metrics Configuration
HTTP request metrics plus workflow-engine business counters
"""

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

# Request metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

ACTIVE_CONNECTIONS = Gauge("active_connections", "Number of active connections")

# Business metrics
WORKFLOW_TRANSITIONS = Counter(
    "efiling_workflow_transitions_total",
    "Workflow state changes by action and outcome",
    ["action", "outcome"],
)

NOTIFICATIONS_WRITTEN = Counter(
    "efiling_notifications_written_total",
    "Notification rows written",
    ["type"],
)

NOTIFICATION_FAILURES = Counter(
    "efiling_notification_failures_total",
    "Notification writes that failed and were skipped",
    ["type"],
)

RATE_LIMITED_REQUESTS = Counter(
    "efiling_rate_limited_requests_total",
    "Requests rejected by the rate limiter",
    ["endpoint"],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP metrics"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        ACTIVE_CONNECTIONS.inc()

        try:
            response = await call_next(request)

            # Route template keeps label cardinality bounded
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)

            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=response.status_code,
            ).inc()
            REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(
                time.time() - start_time
            )
            return response
        finally:
            ACTIVE_CONNECTIONS.dec()


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format"""
    return generate_latest()


def record_workflow_transition(action: str, outcome: str):
    WORKFLOW_TRANSITIONS.labels(action=action, outcome=outcome).inc()


def record_notifications_written(notification_type: str, count: int):
    if count:
        NOTIFICATIONS_WRITTEN.labels(type=notification_type).inc(count)


def record_notification_failure(notification_type: str):
    NOTIFICATION_FAILURES.labels(type=notification_type).inc()


def record_rate_limited(endpoint: str):
    RATE_LIMITED_REQUESTS.labels(endpoint=endpoint).inc()


__all__ = [
    "CONTENT_TYPE_LATEST",
    "MetricsMiddleware",
    "get_metrics",
    "record_workflow_transition",
    "record_notifications_written",
    "record_notification_failure",
    "record_rate_limited",
]
