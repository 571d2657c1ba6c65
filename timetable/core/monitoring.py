"""
Prometheus metrics for the timetable API and its schedule engine.

Request-level metrics are collected by MetricsMiddleware; the schedule
service records writes, detected conflicts and calendar expansion time.
"""
import logging
import time
from collections import defaultdict
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from timetable.core.config import settings

logger = logging.getLogger(__name__)

REQUEST_COUNT = Counter(
    'timetable_api_requests_total',
    'Total number of requests',
    ['method', 'endpoint', 'status']
)

REQUEST_DURATION = Histogram(
    'timetable_api_request_duration_seconds',
    'Request duration in seconds',
    ['method', 'endpoint']
)

ACTIVE_REQUESTS = Gauge(
    'timetable_api_active_requests',
    'Number of requests currently being processed'
)

SCHEDULE_WRITES = Counter(
    'timetable_schedule_writes_total',
    'Schedule write attempts',
    ['operation', 'outcome']  # save|update, ok|conflict
)

SCHEDULE_CONFLICTS = Counter(
    'timetable_schedule_conflicts_total',
    'Conflicting schedules found by conflict checks',
    ['kind']  # group, teacher
)

EXPANSION_DURATION = Histogram(
    'timetable_date_range_expansion_seconds',
    'Time spent expanding weekly schedules into calendar dates'
)


class EndpointStats:
    """In-memory per-endpoint counters backing the /stats dashboard."""

    def __init__(self, max_slow_requests: int = 10):
        self.endpoints = defaultdict(lambda: {'count': 0, 'total': 0.0, 'max': 0.0, 'errors': 0})
        self.slow_requests = []
        self.max_slow_requests = max_slow_requests

    def record(self, method: str, path: str, duration: float, status: int):
        stats = self.endpoints[f"{method} {path}"]
        stats['count'] += 1
        stats['total'] += duration
        stats['max'] = max(stats['max'], duration)
        if status >= 400:
            stats['errors'] += 1
        if duration > settings.slow_request_seconds:
            self.slow_requests.append({'method': method, 'path': path, 'duration': duration, 'status': status, 'timestamp': time.time()})
            del self.slow_requests[:-self.max_slow_requests]

    def summary(self):
        endpoints = {
            key: {
                'count': s['count'],
                'avg_duration_ms': round(s['total'] / s['count'] * 1000, 2),
                'max_duration_ms': round(s['max'] * 1000, 2),
                'errors': s['errors'],
            }
            for key, s in self.endpoints.items()
        }
        total = sum(s['count'] for s in self.endpoints.values())
        return {
            'endpoints': endpoints,
            'slow_requests': sorted(self.slow_requests, key=lambda r: r['duration'], reverse=True),
            'summary': {
                'total_requests': total,
                'total_errors': sum(s['errors'] for s in self.endpoints.values()),
            },
        }


endpoint_stats = EndpointStats()


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.endswith("/metrics"):
            return await call_next(request)

        ACTIVE_REQUESTS.inc()
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start
            REQUEST_COUNT.labels(method=request.method, endpoint=request.url.path, status=status).inc()
            REQUEST_DURATION.labels(method=request.method, endpoint=request.url.path).observe(duration)
            endpoint_stats.record(request.method, request.url.path, duration, status)
            if duration > settings.slow_request_seconds:
                logger.warning("Slow request: %s %s took %.2fs (status=%s)", request.method, request.url.path, duration, status)
            ACTIVE_REQUESTS.dec()


def get_metrics():
    return generate_latest()


def get_dashboard_stats():
    return endpoint_stats.summary()
