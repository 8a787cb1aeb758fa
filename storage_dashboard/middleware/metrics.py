"""Prometheus metrics middleware for HTTP request instrumentation.

Collects HTTP request metrics:
- Request count by method, endpoint, status code
- Request duration histogram
- In-flight requests gauge
"""

import time
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from storage_dashboard.metrics import (
    REQUEST_COUNT,
    REQUEST_DURATION,
    REQUEST_IN_FLIGHT,
)

# Endpoints whose path segments are fixed words, not workspace ids
_FIXED_WORKSPACE_PATHS = {"empty"}


def normalize_path(path: str) -> str:
    """
    Normalize path for metrics labels to avoid high cardinality.

    Examples:
        /workspaces/empty -> /workspaces/empty
        /workspaces/1a2b3c -> /workspaces/{workspace_id}
        /entry -> /entry
    """
    parts = path.strip("/").split("/")
    normalized = []

    i = 0
    while i < len(parts):
        part = parts[i]

        if part == "workspaces" and i + 1 < len(parts):
            next_part = parts[i + 1]
            normalized.append("workspaces")
            normalized.append(next_part if next_part in _FIXED_WORKSPACE_PATHS else "{workspace_id}")
            i += 2
            continue

        normalized.append(part)
        i += 1

    joined = "/".join(p for p in normalized if p)
    return "/" + joined


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware that collects Prometheus metrics for HTTP requests.

    Metrics collected:
    - storage_dashboard_requests_total: Counter by method, endpoint, status_code
    - storage_dashboard_request_duration_seconds: Histogram by method, endpoint
    - storage_dashboard_requests_in_flight: Gauge by method
    """

    # Endpoints to skip (internal/debug endpoints)
    SKIP_PATHS = {"/metrics", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        method = request.method

        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        endpoint = normalize_path(request.url.path)

        REQUEST_IN_FLIGHT.labels(method=method).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        except Exception:
            status_code = "500"
            raise
        finally:
            duration = time.perf_counter() - start_time
            REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)
            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            REQUEST_IN_FLIGHT.labels(method=method).dec()

        return response
