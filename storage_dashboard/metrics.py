"""Prometheus metrics definitions for the storage dashboard.

This module defines all Prometheus metrics used for observability:
- HTTP request metrics (count, duration, in-flight)
- SQLite query metrics (queries, duration)
- Workspace scan and removal metrics
- Storage metrics (workspaces on disk, sizes)
- Process metrics (CPU, memory, file descriptors)
"""

import platform
import time
from prometheus_client import Counter, Histogram, Gauge, Info
from prometheus_client import ProcessCollector

# ProcessCollector only works on Linux (uses /proc filesystem)
if platform.system() == "Linux":
    try:
        ProcessCollector()
    except ValueError:
        pass  # already registered

# =============================================================================
# Service Health Metrics
# =============================================================================

SERVICE_UP = Gauge(
    "storage_dashboard_up",
    "Whether the storage dashboard service is up (1) or down (0)"
)

SERVICE_START_TIME = Gauge(
    "storage_dashboard_start_time_seconds",
    "Unix timestamp when the service started"
)

SERVICE_START_TIME.set(time.time())
SERVICE_UP.set(1)

# =============================================================================
# HTTP Request Metrics
# =============================================================================

REQUEST_COUNT = Counter(
    "storage_dashboard_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"]
)

REQUEST_DURATION = Histogram(
    "storage_dashboard_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

REQUEST_IN_FLIGHT = Gauge(
    "storage_dashboard_requests_in_flight",
    "Number of HTTP requests currently being processed",
    ["method"]
)

# =============================================================================
# Error Metrics
# =============================================================================

ERROR_COUNT = Counter(
    "storage_dashboard_errors_total",
    "Total number of errors by type",
    ["type", "endpoint"]
)

# =============================================================================
# SQLite Query Metrics
# =============================================================================

QUERY_COUNT = Counter(
    "storage_dashboard_queries_total",
    "Total number of SQLite queries",
    ["operation", "status"]  # operation: query_all, query_one
)

QUERY_DURATION = Histogram(
    "storage_dashboard_query_duration_seconds",
    "SQLite query duration in seconds",
    ["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0]
)

# =============================================================================
# Workspace Metrics
# =============================================================================

WORKSPACE_SCAN_FAILURES = Counter(
    "storage_dashboard_workspace_scan_failures_total",
    "Workspaces dropped from a statistics scan because their database could not be read"
)

WORKSPACE_REMOVALS = Counter(
    "storage_dashboard_workspace_removals_total",
    "Workspace directory removals",
    ["status"]  # removed, not_found, invalid, failed
)

GLOBAL_ANALYSIS_FAILURES = Counter(
    "storage_dashboard_global_analysis_failures_total",
    "Global database analyses that fell back to empty statistics"
)

# =============================================================================
# Storage Metrics (collected on-demand)
# =============================================================================

WORKSPACES_TOTAL = Gauge(
    "storage_dashboard_workspaces_total",
    "Workspace directories that contain a state database"
)

STORAGE_SIZE_BYTES = Gauge(
    "storage_dashboard_storage_size_bytes",
    "Storage size in bytes",
    ["type"]  # workspaces, global
)

# =============================================================================
# Service Info
# =============================================================================

SERVICE_INFO = Info(
    "storage_dashboard_service",
    "Storage dashboard service information"
)


def set_service_info(version: str, sqlite_version: str) -> None:
    """Set service info labels."""
    SERVICE_INFO.info({
        "version": version,
        "sqlite_version": sqlite_version
    })
