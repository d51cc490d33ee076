"""Prometheus metrics for the application."""

import time

from prometheus_client import Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# --- Metrics ---

APP_INFO = Info("app", "Rankly metrics engine info")
APP_INFO.info({"version": "1.0.0", "name": "rankly"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5],
)

ENGINE_RUNS = Counter(
    "engine_runs_total",
    "Total metrics engine runs",
    ["scope"],
)

ENGINE_RECORDS_MERGED = Histogram(
    "engine_records_merged",
    "Number of metric records merged per engine run",
    buckets=[0, 1, 2, 3, 5, 10, 25, 50],
)


# --- Middleware ---


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = request.url.path

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=method, path=path).observe(duration)

        return response


def record_engine_run(scope: str, merged: int) -> None:
    """Count one engine run and how many records went into it."""
    ENGINE_RUNS.labels(scope=scope).inc()
    ENGINE_RECORDS_MERGED.observe(merged)


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
